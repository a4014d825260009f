"""US postal code helpers."""

import re

from relief_sources.errors import InvalidInput

ZIP_CODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")

INVALID_ZIP_MESSAGE = (
    "Invalid ZIP code format. Use 5 digits (e.g., 12345) or 5+4 format (e.g., 12345-6789)"
)


def validate_postal_code(postal_code: object) -> str:
    """Return the trimmed ZIP code, or raise ``InvalidInput``.

    Accepts 5-digit codes and ZIP+4 (``12345-6789``).
    """
    if not isinstance(postal_code, str):
        raise InvalidInput(INVALID_ZIP_MESSAGE)
    sanitized = postal_code.strip()
    if not ZIP_CODE_PATTERN.match(sanitized):
        raise InvalidInput(INVALID_ZIP_MESSAGE)
    return sanitized
