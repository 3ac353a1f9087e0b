"""
Error taxonomy for resume optimization runs.

Every error carries a plain `user_message` that is safe to show to an end user
and optional `details` meant for operators (logs, raw replies, toolchain output).
"""

from typing import Optional


class AtlasError(Exception):
    """
    Base class for expected, user-reportable failures of an optimization run.

    Attributes:
        user_message: Human-readable diagnostic for the caller
        details: Operator-side diagnostics (never shown as the primary error)
    """

    def __init__(self, user_message: str, details: Optional[str] = None):
        self.user_message = user_message
        self.details = details
        super().__init__(user_message)


class ExtractionError(AtlasError):
    """The uploaded document is not a readable PDF."""

    def __init__(self, reason: str, details: Optional[str] = None):
        self.reason = reason
        super().__init__(
            f"Could not read the uploaded PDF ({reason}). "
            "Please ensure the file is a valid, text-based PDF and not a scanned image.",
            details=details,
        )


class InsufficientContentError(AtlasError):
    """The document parsed, but yielded too little text to work with."""

    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Could not extract sufficient text from the PDF ({length} of at least "
            f"{minimum} characters). The file looks like a scanned image; please "
            "upload a text-based PDF."
        )


class GenerationParseError(AtlasError):
    """The generative model's reply could not be coerced into the expected structure."""

    def __init__(self, stage: str, reason: str, raw_reply: Optional[str] = None):
        self.stage = stage
        self.reason = reason
        super().__init__(
            f"The AI model returned an unusable response while {stage}: {reason}",
            details=raw_reply,
        )


class LLMServiceError(AtlasError):
    """The LLM provider could not be reached or kept failing after retries."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(
            "The AI service is currently unavailable. Please try again in a few minutes.",
            details=f"{provider}: {reason}",
        )


class CompilationError(AtlasError):
    """The LaTeX toolchain failed or produced no usable PDF."""

    def __init__(self, reason: str, logs: Optional[str] = None):
        self.reason = reason
        super().__init__(f"Failed to compile the resume document: {reason}", details=logs)


class PersistenceError(AtlasError):
    """The optimized resume could not be saved."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"The resume was optimized but could not be saved: {reason}")


class InvalidResumeStructureError(ValueError):
    """
    Raised when decoded resume data does not conform to the ResumeData shape.

    Raised by the shape validator; callers turn it into a GenerationParseError.
    """

    pass
