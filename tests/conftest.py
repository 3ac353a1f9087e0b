"""Shared fixtures: isolated event log, sample resume data and a tiny PDF writer."""

from typing import List, Sequence

import pytest

from atlas.contexts.templating.resume_data_structure import ResumeData
from atlas.utils import event_logging


@pytest.fixture(autouse=True)
def isolated_event_log(tmp_path, monkeypatch):
    """Keep pipeline events out of the working tree."""
    events_file = tmp_path / "logs" / "events.log"
    monkeypatch.setattr(event_logging, "PIPELINE_EVENTS_FILE", events_file)
    return events_file


def _pdf_string(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def make_pdf(pages: Sequence[Sequence[str]]) -> bytes:
    """
    Build a minimal text PDF, one list of lines per page (Helvetica, latin-1 only).

    Object layout: 1 catalog, 2 page tree, 3 font, then a page and its content
    stream for every page.
    """
    body = {}
    kids: List[int] = []
    next_num = 4
    for lines in pages:
        page_num, content_num = next_num, next_num + 1
        next_num += 2
        kids.append(page_num)

        ops = ["BT", "/F1 11 Tf", "14 TL", "72 720 Td"]
        ops += [f"({_pdf_string(line)}) Tj T*" for line in lines]
        ops.append("ET")
        stream = "\n".join(ops).encode("latin-1")

        body[content_num] = b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"
        body[page_num] = (
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {content_num} 0 R >>"
        ).encode("latin-1")

    kid_refs = " ".join(f"{num} 0 R" for num in kids)
    body[1] = b"<< /Type /Catalog /Pages 2 0 R >>"
    body[2] = f"<< /Type /Pages /Kids [{kid_refs}] /Count {len(kids)} >>".encode("latin-1")
    body[3] = b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>"

    out = bytearray(b"%PDF-1.4\n")
    offsets = {}
    for num in sorted(body):
        offsets[num] = len(out)
        out += b"%d 0 obj\n" % num + body[num] + b"\nendobj\n"

    xref_at = len(out)
    size = len(body) + 1
    out += b"xref\n0 %d\n" % size
    out += b"0000000000 65535 f \n"
    for num in range(1, size):
        out += b"%010d 00000 n \n" % offsets[num]
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (size, xref_at)
    return bytes(out)


RESUME_LINES = [
    "Jane Doe",
    "jane.doe@example.com | +1 555 0100 | Berlin, Germany",
    "Experience",
    "Senior Data Engineer, Acme Analytics, 2019 - Present",
    "Built streaming pipelines processing 2B events per day with Kafka and Spark",
    "Cut warehouse costs by 35% through partition pruning and query rewrites",
    "Education",
    "MSc Computer Science, TU Berlin, 2018",
]


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def resume_pdf() -> bytes:
    return make_pdf([RESUME_LINES[:4], RESUME_LINES[4:]])


@pytest.fixture
def sample_resume_dict() -> dict:
    return {
        "contact": {
            "name": "Jane Doe",
            "email": "jane.doe@example.com",
            "phone": "+1 555 0100",
            "location": "Berlin, Germany",
            "linkedin": "https://linkedin.com/in/janedoe",
            "github": "https://github.com/janedoe",
        },
        "summary": "Data engineer with 6 years of experience building R&D data platforms.",
        "experience": [
            {
                "company": "Acme Analytics",
                "position": "Senior Data Engineer",
                "location": "Berlin",
                "duration": "2019 - Present",
                "achievements": [
                    "Built streaming pipelines processing 2B events/day with Kafka & Spark",
                    "Cut warehouse costs by 35% through partition pruning",
                ],
            },
            {
                "company": "Initech",
                "position": "Data Engineer",
                "location": "Munich",
                "duration": "2017 - 2019",
                "achievements": ["Migrated 40 ETL jobs to Airflow"],
            },
        ],
        "skills": {
            "technical": ["Python", "SQL", "Spark"],
            "tools": ["Airflow", "dbt", "Docker"],
            "languages": ["English", "German"],
        },
        "education": [
            {
                "degree": "MSc",
                "field": "Computer Science",
                "institution": "TU Berlin",
                "location": "Berlin",
                "year": "2018",
                "gpa": "1.3",
            }
        ],
        "projects": [
            {
                "name": "stream_lab",
                "description": "Open-source benchmarks for stream processors",
                "technologies": ["Rust", "Flink"],
                "link": "https://github.com/janedoe/stream_lab",
            }
        ],
    }


@pytest.fixture
def sample_resume(sample_resume_dict) -> ResumeData:
    return ResumeData.from_dict(sample_resume_dict)
