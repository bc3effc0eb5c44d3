from __future__ import annotations

import mimetypes

FOLDER_MIME: str = "application/vnd.google-apps.folder"
DEFAULT_MIME: str = "application/octet-stream"


def guess_mime_type(filename: str) -> str:
    """Guess a MIME type from a file name, falling back to octet-stream."""
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_MIME
