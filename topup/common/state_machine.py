"""Payment status vocabulary and the forward transitions operators expect.

Transitions outside `FORWARD_TRANSITIONS` are still applied (last write wins);
callers use `is_forward_transition` only to flag them in logs.
"""

PENDING = "pending"
VERIFIED = "verified"
COMPLETED = "completed"
FAILED = "failed"

PAYMENT_STATUSES = (PENDING, VERIFIED, COMPLETED, FAILED)

FORWARD_TRANSITIONS: dict[str, set[str]] = {
    PENDING: {VERIFIED, FAILED},
    VERIFIED: {COMPLETED, FAILED},
    COMPLETED: set(),
    FAILED: set(),
}


def validate_status(status: str) -> None:
    """Raise when `status` is not a known payment status."""

    if status not in PAYMENT_STATUSES:
        raise ValueError(f"Unknown payment status: {status}")


def is_forward_transition(current: str, new: str) -> bool:
    """True when `current -> new` follows the documented lifecycle."""

    validate_status(new)
    return new in FORWARD_TRANSITIONS.get(current, set())
