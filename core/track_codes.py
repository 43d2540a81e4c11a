"""Customer-facing track codes."""

import secrets
import string

TRACK_CODE_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_TRACK_CODE_LENGTH = 8


def generate_track_code(length: int = DEFAULT_TRACK_CODE_LENGTH) -> str:
    """Draw an uppercase alphanumeric code using a CSPRNG."""
    return "".join(secrets.choice(TRACK_CODE_ALPHABET) for _ in range(length))


def normalize_track_code(raw: str) -> str:
    """Trim user input before lookup. Case is preserved; codes are stored uppercase."""
    return raw.strip()
