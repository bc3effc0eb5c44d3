"""Submission persistence and the submit gate."""

from __future__ import annotations

from .base import SubmissionStore
from .gate import GateState, SubmissionGate
from .memory import INCOMPLETE_SUBMISSION_MESSAGE, InMemorySubmissionStore
from .rest import RestSubmissionStore

__all__ = [
    "SubmissionStore",
    "InMemorySubmissionStore",
    "RestSubmissionStore",
    "INCOMPLETE_SUBMISSION_MESSAGE",
    "GateState",
    "SubmissionGate",
]
