"""
Profile Reconciler.

Detects which contact fields are still unknown for a candidate and fills
them from free-text chat input. A field that is already set is never
overwritten: the first detected value wins for the whole session.
"""

from __future__ import annotations

import re
from typing import Optional

from .models import PROFILE_FIELDS, CandidateProfile


__all__ = [
    "EMAIL_PATTERN",
    "PHONE_PATTERN",
    "describe_missing_fields",
    "enrich_from_message",
    "extract_profile_fields",
    "guess_name_from_message",
    "guess_name_from_resume",
    "missing_fields",
]


EMAIL_PATTERN = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
PHONE_PATTERN = re.compile(r"(\+?\d{1,3}[\s-]?)?(\(?\d{3}\)?[\s-]?)?\d{3}[\s-]?\d{4}")

FIELD_LABELS: dict[str, str] = {
    "name": "name",
    "email": "email address",
    "phone": "phone number",
}

ACKNOWLEDGEMENTS: frozenset[str] = frozenset(
    {"yes", "no", "ok", "okay", "sure", "hi", "hello", "hey", "thanks", "thank you"}
)
SHORT_MESSAGE_LENGTH = 15
MAX_NAME_WORDS = 4


def missing_fields(profile: CandidateProfile) -> list[str]:
    """Return unknown contact fields in the fixed order name, email, phone."""
    return [field for field in PROFILE_FIELDS if not getattr(profile, field)]


def describe_missing_fields(fields: list[str]) -> str:
    """
    Human-readable list of missing fields.

    Example:
        >>> describe_missing_fields(["name", "email", "phone"])
        'name, email address and phone number'
    """
    ordered = [FIELD_LABELS[f] for f in PROFILE_FIELDS if f in fields]
    if not ordered:
        return ""
    if len(ordered) == 1:
        return ordered[0]
    return f"{', '.join(ordered[:-1])} and {ordered[-1]}"


def _title_case(words: list[str]) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def guess_name_from_message(message: str) -> Optional[str]:
    """Best-effort name from a short chat reply such as ``"jane doe"``."""
    trimmed = message.strip()
    if EMAIL_PATTERN.search(trimmed) or PHONE_PATTERN.search(trimmed):
        return None

    cleaned = re.sub(r"[^\w\s'-]", "", trimmed).strip()
    if not cleaned or not re.search(r"[^\W\d_]", cleaned):
        return None

    words = cleaned.split()
    if not 1 <= len(words) <= MAX_NAME_WORDS:
        return None

    lowered = trimmed.lower()
    if len(lowered) < SHORT_MESSAGE_LENGTH:
        normalized = " ".join(w.lower() for w in words)
        if normalized in ACKNOWLEDGEMENTS or any(w.lower() in ACKNOWLEDGEMENTS for w in words):
            return None

    return _title_case(words)


def enrich_from_message(text: str, profile: CandidateProfile) -> CandidateProfile:
    """
    Merge contact details found in ``text`` into a copy of ``profile``.

    Email and phone are pattern-matched anywhere in the message; a name is
    only guessed while none is known. Existing values are kept as-is.
    """
    email_match = EMAIL_PATTERN.search(text)
    phone_match = PHONE_PATTERN.search(text)
    guessed_name = None if profile.name else guess_name_from_message(text)

    return profile.model_copy(
        update={
            "name": profile.name or guessed_name,
            "email": profile.email or (email_match.group(0) if email_match else None),
            "phone": profile.phone or (phone_match.group(0).strip() if phone_match else None),
        }
    )


def guess_name_from_resume(text: str) -> Optional[str]:
    """Pick a 2-4 word line near the top of a resume as the candidate name."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines[:10]:
        if EMAIL_PATTERN.search(line) or "resume" in line.lower():
            continue
        sanitized = re.sub(r"[^a-zA-Z\s'-]", "", line).strip()
        if not sanitized:
            continue
        parts = sanitized.split()
        if 2 <= len(parts) <= MAX_NAME_WORDS:
            return _title_case(parts)
    return None


def extract_profile_fields(text: str) -> CandidateProfile:
    """Build a profile guess from extracted resume text."""
    email_match = EMAIL_PATTERN.search(text)
    phone_match = PHONE_PATTERN.search(text)
    phone = re.sub(r"\s+", " ", phone_match.group(0)).strip() if phone_match else None
    return CandidateProfile(
        name=guess_name_from_resume(text),
        email=email_match.group(0) if email_match else None,
        phone=phone,
        resume_text=text,
    )
