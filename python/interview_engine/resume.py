"""
Resume text extraction.

Reads a PDF or DOCX resume and produces a best-effort CandidateProfile
guess. Every failure is raised as ``ResumeParseError`` whose message is
safe to show the candidate verbatim.
"""

import logging
import zipfile
from pathlib import Path

import docx
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import FileNotDecryptedError, PdfReadError

from .models import CandidateProfile
from .profile import extract_profile_fields


__all__ = ["MAX_RESUME_BYTES", "ResumeParseError", "parse_resume_file"]


logger = logging.getLogger(__name__)


MAX_RESUME_BYTES = 10 * 1024 * 1024
SUPPORTED_EXTENSIONS = (".pdf", ".docx")


class ResumeParseError(Exception):
    """Raised when a resume cannot be turned into text."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(message)


def _extract_pdf_text(path: Path) -> str:
    try:
        reader = PdfReader(str(path))
        if reader.is_encrypted:
            raise ResumeParseError(
                path,
                "Password-protected files are not supported. Please upload an unprotected resume.",
            )
        return "\n".join((page.extract_text() or "") for page in reader.pages)
    except FileNotDecryptedError as e:
        raise ResumeParseError(
            path,
            "Password-protected files are not supported. Please upload an unprotected resume.",
        ) from e
    except (PdfReadError, ValueError) as e:
        raise ResumeParseError(
            path,
            "The PDF file appears to be corrupted or invalid. Please try a different file.",
        ) from e


def _extract_docx_text(path: Path) -> str:
    try:
        document = docx.Document(str(path))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise ResumeParseError(
            path,
            "The DOCX file appears to be corrupted or invalid. Please try a different file.",
        ) from e
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


def parse_resume_file(path: Path) -> CandidateProfile:
    """
    Extract contact details from a resume file.

    Args:
        path: Path to a ``.pdf`` or ``.docx`` resume.

    Returns:
        Profile guess with ``resume_file_name`` and ``resume_text`` set.

    Raises:
        ResumeParseError: If the file is missing, empty, larger than 10MB,
            of an unsupported format, password-protected, corrupted, or
            contains no extractable text.
    """
    path = Path(path)
    extension = path.suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise ResumeParseError(
            path, "Unsupported file format. Please upload a PDF or DOCX resume."
        )

    try:
        size = path.stat().st_size
    except OSError as e:
        raise ResumeParseError(
            path, "Unable to read the file. Please ensure it is a valid PDF or DOCX resume."
        ) from e

    if size == 0:
        raise ResumeParseError(path, "The file is empty. Please upload a resume with text content.")
    if size > MAX_RESUME_BYTES:
        raise ResumeParseError(
            path, "File too large. Please upload a resume smaller than 10MB."
        )

    if extension == ".pdf":
        text = _extract_pdf_text(path)
        if not text.strip():
            raise ResumeParseError(
                path,
                "The PDF appears to be empty or contains only images. "
                "Please upload a text-based resume.",
            )
    else:
        text = _extract_docx_text(path)
        if not text.strip():
            raise ResumeParseError(
                path,
                "The DOCX file appears to be empty. "
                "Please upload a valid resume with text content.",
            )

    profile = extract_profile_fields(text)
    logger.info(
        "Parsed resume %s (%d chars, name=%s)",
        path.name,
        len(text),
        "found" if profile.name else "missing",
    )
    return profile.model_copy(update={"resume_file_name": path.name})
