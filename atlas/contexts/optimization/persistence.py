"""
Persistence of finished optimization runs.

ResultStore is the capability the optimizer depends on; LocalResultStore
writes each record as a PDF plus a JSON sidecar under
RESULTS_PATH/<date>/<user_id>/.
"""

import json
import os
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from atlas.contexts.optimization.logger import _log_debug, _log_success
from atlas.contexts.targeting.targeting_data_structures import ResearchProfile
from atlas.contexts.templating.filler import LatexFile
from atlas.contexts.templating.resume_data_structure import ResumeData
from atlas.exceptions import PersistenceError
from atlas.utils.timestamp import now, now_exact, today

load_dotenv()

RESULTS_PATH = Path(os.getenv("RESULTS_PATH", "outs/results"))


@dataclass
class OptimizationRecord:
    """Everything kept about one finished run."""

    user_id: str
    resume_data: ResumeData
    pdf: bytes
    score: int
    feedback: List[str]
    improvements: List[str]
    attempts: int
    score_history: List[Dict[str, int]]
    template: str
    latex_files: List[LatexFile] = field(default_factory=list)
    research_profile: Optional[ResearchProfile] = None
    company: str = ""
    role: str = ""
    original_filename: str = ""

    def metadata(self) -> Dict[str, Any]:
        """JSON-serializable view of the record (PDF bytes excluded)."""
        return {
            "userId": self.user_id,
            "createdAt": now_exact(),
            "company": self.company,
            "role": self.role,
            "originalFilename": self.original_filename,
            "template": self.template,
            "score": self.score,
            "feedback": self.feedback,
            "improvements": self.improvements,
            "attempts": self.attempts,
            "scoreHistory": self.score_history,
            "resumeData": self.resume_data.to_dict(),
            "companyResearch": self.research_profile.to_dict() if self.research_profile else None,
            "latexFiles": [{"filename": f.filename, "content": f.content} for f in self.latex_files],
        }


@dataclass(frozen=True)
class SavedRecord:
    record_id: str
    download_reference: str


class ResultStore(ABC):
    @abstractmethod
    def save(self, record: OptimizationRecord) -> SavedRecord:
        """
        Persist a finished run.

        Raises:
            PersistenceError: If the record could not be stored
        """


def _safe_path_component(value: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9_.-]", "_", value).strip(".")
    return cleaned or "anonymous"


class LocalResultStore(ResultStore):
    """Stores records on the local filesystem."""

    def __init__(self, root: Path = None):
        self.root = Path(root) if root is not None else RESULTS_PATH

    def save(self, record: OptimizationRecord) -> SavedRecord:
        record_id = f"{now()}_{uuid.uuid4().hex[:8]}"
        target_dir = self.root / today() / _safe_path_component(record.user_id)
        pdf_path = target_dir / f"{record_id}.pdf"
        json_path = target_dir / f"{record_id}.json"

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            pdf_path.write_bytes(record.pdf)
            with open(json_path, "w", encoding="utf-8") as f:
                json.dump({"recordId": record_id, **record.metadata()}, f, indent=2)
        except OSError as e:
            raise PersistenceError(f"could not write to {target_dir} ({e.strerror or e})") from e

        _log_success(f"Saved record {record_id}")
        _log_debug(f"  PDF: {pdf_path}")
        return SavedRecord(record_id=record_id, download_reference=pdf_path.resolve().as_uri())
