from __future__ import annotations

import uuid


def new_submission_id() -> str:
    """Generate a new SubmissionRecord ID (24 hex chars, ObjectId-shaped)."""
    return uuid.uuid4().hex[:24]
