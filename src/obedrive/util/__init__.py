from .ids import new_submission_id
from .mime import DEFAULT_MIME, FOLDER_MIME, guess_mime_type
from .time import (
    normalize_dt,
    now_utc,
    parse_optional_rfc3339,
    parse_rfc3339,
    to_rfc3339,
)

__all__ = [
    "new_submission_id",
    "FOLDER_MIME",
    "DEFAULT_MIME",
    "guess_mime_type",
    "now_utc",
    "parse_rfc3339",
    "parse_optional_rfc3339",
    "to_rfc3339",
    "normalize_dt",
]
