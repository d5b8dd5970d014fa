"""Credential variants and enrollment number normalization.

Enrollment numbers are issued as digit strings that may lose or gain leading
zeros between the registry and what the user types, so a typed secret is
expanded into an ordered list of literal candidates before probing the
provider.
"""

from __future__ import annotations

from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

ENROLLMENT_WIDTH = 6
MAX_PAD_WIDTH = 10


class CredentialVariant(BaseModel):
    """One literal candidate password; ``label`` is safe to log, ``value`` is not."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: str = Field(..., repr=False)


def is_all_digits(value: str) -> bool:
    return bool(value) and all("0" <= c <= "9" for c in value)


def pad(value: str, width: int = ENROLLMENT_WIDTH) -> str:
    """Left-pad with '0' up to ``width``; longer values are returned unchanged."""
    return value.rjust(width, "0")


def build_variants(secret: str) -> List[CredentialVariant]:
    """Expand a typed secret into the ordered, duplicate-free candidate list.

    1. the trimmed secret as typed
    2. shorter than 6: zero-padded to 6
    3. 6 or longer with a leading zero: leading zeros stripped (at least one char kept)
    4. all digits: zero-padded to each width from 6 to 10 longer than the secret
    """
    typed = secret.strip()
    variants: List[CredentialVariant] = []
    seen: Set[str] = set()

    def add(label: str, value: str) -> None:
        if value and value not in seen:
            seen.add(value)
            variants.append(CredentialVariant(label=label, value=value))

    add("original", typed)

    if len(typed) < ENROLLMENT_WIDTH:
        add(f"zero-padded to {ENROLLMENT_WIDTH}", pad(typed, ENROLLMENT_WIDTH))
    elif typed.startswith("0"):
        add("leading zeros stripped", typed.lstrip("0") or "0")

    if is_all_digits(typed):
        for width in range(ENROLLMENT_WIDTH, MAX_PAD_WIDTH + 1):
            if width <= len(typed):
                continue
            add(f"zero-padded to {width}", pad(typed, width))

    return variants


def normalize_secret(value: str) -> str:
    return str(value).strip().lower()


def enrollment_forms(enrollment: Optional[str]) -> Set[str]:
    """Raw and padded-to-6 forms of an enrollment number, lowercased."""
    if enrollment is None:
        return set()
    raw = str(enrollment).strip()
    if not raw:
        return set()
    return {raw.lower(), pad(raw, ENROLLMENT_WIDTH).lower()}


def matches_enrollment(candidate: str, enrollment: Optional[str]) -> bool:
    """True iff ``candidate`` equals the enrollment number raw or padded (case-insensitive)."""
    return normalize_secret(candidate) in enrollment_forms(enrollment)
