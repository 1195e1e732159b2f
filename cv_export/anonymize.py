"""
Anonymization of identifying candidate fields for export.

Masking is deterministic: the same record always yields the same masked
copy. The stored record is never modified.
"""

from cv_export.models import CVRecord

UNKNOWN_EMAIL_MASK = "***@***.***"
SHORT_PHONE_MASK = "***"
PHONE_VISIBLE_CHARS = 4


def initials(full_name: str) -> str:
    """
    Reduce a name to dotted initials.

    >>> initials("Jane Marie Doe")
    'J.M.D.'
    """
    return "".join(f"{token[0].upper()}." for token in full_name.split())


def mask_email(email: str) -> str:
    """
    Keep the first character of the local part and the whole domain.

    >>> mask_email("jane.doe@example.com")
    'j***@example.com'
    """
    if not email:
        return ""
    local, _, domain = email.partition("@")
    if not domain or not local:
        return UNKNOWN_EMAIL_MASK
    return f"{local[0]}***@{domain}"


def mask_phone(phone: str) -> str:
    """
    Replace every character except the last four with ``*``.

    >>> mask_phone("+44 20 1234 5678")
    '************5678'
    """
    if not phone:
        return ""
    if len(phone) < PHONE_VISIBLE_CHARS:
        return SHORT_PHONE_MASK
    hidden = len(phone) - PHONE_VISIBLE_CHARS
    return "*" * hidden + phone[hidden:]


def anonymize_record(record: CVRecord) -> CVRecord:
    """
    Return a masked deep copy of ``record``.

    Name becomes initials, email and phone are masked, and location and
    links are dropped so they never reach any export format.
    """
    masked = record.model_copy(deep=True)
    candidate = masked.candidate
    candidate.full_name = initials(candidate.full_name)
    candidate.email = mask_email(candidate.email)
    candidate.phone = mask_phone(candidate.phone)
    candidate.location = ""
    candidate.links = []
    return masked
