"""
Outcome Classifier

Maps a checkpoint response to exactly one ``CheckpointOutcome``. The
boolean predicates callers use are all derived from that single tag, so
running, allowed, denied and undecided can never hold together.
"""

from dodgeball.models.checkpoint import CheckpointResponse
from dodgeball.models.enums import (
    CheckpointOutcome,
    VerificationOutcome,
    VerificationStatus,
)


_RUNNING_STATUSES = frozenset({VerificationStatus.PENDING, VerificationStatus.BLOCKED})


def classify(response: CheckpointResponse) -> CheckpointOutcome:
    """Return the semantic outcome of a checkpoint response."""
    status = response.status
    outcome = response.outcome

    if not response.success:
        if response.is_timeout:
            return CheckpointOutcome.TIMEOUT
        failed = (
            status == VerificationStatus.FAILED
            and outcome == VerificationOutcome.ERROR
        )
        if failed or response.errors:
            return CheckpointOutcome.ERROR
        return CheckpointOutcome.UNKNOWN

    if status in _RUNNING_STATUSES:
        return CheckpointOutcome.RUNNING
    if outcome == VerificationOutcome.DENIED:
        return CheckpointOutcome.DENIED
    if status == VerificationStatus.COMPLETE:
        if outcome == VerificationOutcome.APPROVED:
            return CheckpointOutcome.ALLOWED
        if outcome == VerificationOutcome.PENDING:
            return CheckpointOutcome.UNDECIDED
    return CheckpointOutcome.UNKNOWN


def is_running(response: CheckpointResponse) -> bool:
    return classify(response) == CheckpointOutcome.RUNNING


def is_allowed(response: CheckpointResponse) -> bool:
    return classify(response) == CheckpointOutcome.ALLOWED


def is_denied(response: CheckpointResponse) -> bool:
    return classify(response) == CheckpointOutcome.DENIED


def is_undecided(response: CheckpointResponse) -> bool:
    return classify(response) == CheckpointOutcome.UNDECIDED


def has_error(response: CheckpointResponse) -> bool:
    """True for failed responses, including the synthesized timeout (it carries a 503)."""
    outcome = classify(response)
    if outcome == CheckpointOutcome.TIMEOUT:
        failed = (
            response.status == VerificationStatus.FAILED
            and response.outcome == VerificationOutcome.ERROR
        )
        return failed or bool(response.errors)
    return outcome == CheckpointOutcome.ERROR


def is_timeout(response: CheckpointResponse) -> bool:
    return classify(response) == CheckpointOutcome.TIMEOUT
