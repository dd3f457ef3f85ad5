"""
Checkpoint Verification

Submission and polling of checkpoints, and classification of the
responses they produce.

Components:
    classifier — single-tag outcome classification and predicates
    engine     — submit/poll resolution with bounded retry and backoff
"""

from dodgeball.verification.classifier import (
    classify,
    has_error,
    is_allowed,
    is_denied,
    is_running,
    is_timeout,
    is_undecided,
)
from dodgeball.verification.engine import (
    DISABLED_VERIFICATION_ID,
    ResolutionEngine,
    ResolutionSession,
)

__all__ = [
    "DISABLED_VERIFICATION_ID",
    "ResolutionEngine",
    "ResolutionSession",
    "classify",
    "has_error",
    "is_allowed",
    "is_denied",
    "is_running",
    "is_timeout",
    "is_undecided",
]
