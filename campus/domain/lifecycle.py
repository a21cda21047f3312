"""Generic status lifecycle.

A lifecycle is a table ``status -> action -> allowed target statuses``.
Venue requests, event bookings and role requests each declare one and
go through the same precondition check.
"""

from dataclasses import dataclass

from campus.core.exceptions import ConflictError


@dataclass(frozen=True)
class Lifecycle:
    """Transition table for one kind of resource."""

    name: str
    transitions: dict[str, dict[str, frozenset[str]]]

    @property
    def statuses(self) -> frozenset[str]:
        return frozenset(self.transitions)

    @property
    def terminal(self) -> frozenset[str]:
        return frozenset(s for s, actions in self.transitions.items() if not actions)

    def allowed_actions(self, current: str) -> frozenset[str]:
        return frozenset(self.transitions.get(current, {}))

    def targets(self, current: str, action: str) -> frozenset[str]:
        """Return the statuses ``action`` may lead to from ``current``.

        Raises:
            ConflictError: If the action is not allowed from ``current``
        """
        allowed = self.transitions.get(current, {})
        if action not in allowed:
            raise ConflictError(
                f"Cannot {action.replace('_', ' ')} a {self.name} that is {current.replace('_', ' ')}"
            )
        return allowed[action]

    def assert_transition(self, current: str, action: str, target: str) -> None:
        """Check that ``action`` moves ``current`` to ``target``."""
        if target not in self.targets(current, action):
            raise ConflictError(
                f"Invalid {self.name} transition: {current} → {target}"
            )
