"""Enumeration types for the Dodgeball SDK."""

from enum import Enum


class ApiVersion(str, Enum):
    """Supported API versions."""
    v1 = "v1"


class VerificationStatus(str, Enum):
    """Server-side lifecycle of a verification."""
    PENDING = "PENDING"    # In process on the server
    BLOCKED = "BLOCKED"    # Waiting on some action, e.g. MFA
    COMPLETE = "COMPLETE"  # Workflow evaluated successfully
    FAILED = "FAILED"      # Workflow execution failure


class VerificationOutcome(str, Enum):
    """Decision rendered for a verification."""
    APPROVED = "APPROVED"
    DENIED = "DENIED"
    PENDING = "PENDING"
    ERROR = "ERROR"


class CheckpointOutcome(str, Enum):
    """Single semantic classification of a checkpoint response."""
    RUNNING = "running"      # Still pending or blocked
    ALLOWED = "allowed"      # Complete and approved
    DENIED = "denied"        # Denied
    UNDECIDED = "undecided"  # Complete without a decision
    ERROR = "error"          # Failed or carries errors
    TIMEOUT = "timeout"      # Poll retries exhausted
    UNKNOWN = "unknown"      # Anything else
