"""Role upgrade request state machine."""

from campus.domain.lifecycle import Lifecycle

NONE = "none"
PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

SUBMIT = "submit"
APPROVE = "approve"
REJECT = "reject"

REQUESTABLE_ROLES = ("organizer",)

ROLE_REQUEST_LIFECYCLE = Lifecycle(
    name="role request",
    transitions={
        NONE: {SUBMIT: frozenset({PENDING})},
        REJECTED: {SUBMIT: frozenset({PENDING})},
        # Approved users asking for yet another role start over
        APPROVED: {SUBMIT: frozenset({PENDING})},
        PENDING: {
            APPROVE: frozenset({APPROVED}),
            REJECT: frozenset({REJECTED}),
        },
    },
)


def apply_role_request_action(current: str, action: str) -> str:
    """Return the role request status after ``action``.

    Raises:
        ConflictError: Action not allowed from ``current``
    """
    (target,) = ROLE_REQUEST_LIFECYCLE.targets(current, action)
    return target
