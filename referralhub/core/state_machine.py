"""
Table-driven state machine shared by the referral lifecycles
"""

from typing import Dict, FrozenSet, Generic, List, NamedTuple, Optional, TypeVar
import enum

from referralhub.core.exceptions import AuthorizationError, InvalidTransitionError
from referralhub.models.user import UserRole

S = TypeVar("S", bound=enum.Enum)
A = TypeVar("A", bound=enum.Enum)

STUDENT = frozenset({UserRole.STUDENT})
PROFESSIONAL = frozenset({UserRole.PROFESSIONAL})
PARTICIPANTS = frozenset({UserRole.STUDENT, UserRole.PROFESSIONAL})

class Transition(NamedTuple):
    target: enum.Enum
    actors: FrozenSet[UserRole]

class StateMachine(Generic[S, A]):
    """
    Maps (current status, action, acting party) to the next status

    Subclasses fill in `transitions`. A status with no outgoing actions is
    terminal.
    """

    transitions: Dict[S, Dict[A, Transition]] = {}

    def can_transition(self, current_status: S, action: A) -> bool:
        """
        Check if action is valid from current status

        Args:
            current_status: Current status
            action: Requested action

        Returns:
            True if the table has an entry for the pair
        """
        return action in self.transitions.get(current_status, {})

    def get_valid_actions(
        self,
        current_status: S,
        party: Optional[UserRole] = None
    ) -> List[A]:
        """
        Get actions available from current status

        Args:
            current_status: Current status
            party: Restrict to actions this party may perform

        Returns:
            List of valid actions
        """
        return [
            action
            for action, transition in self.transitions.get(current_status, {}).items()
            if party is None or party in transition.actors
        ]

    def is_terminal_state(self, status: S) -> bool:
        """Check if no more transitions are possible"""
        return len(self.transitions.get(status, {})) == 0

    def source_states(self, action: A) -> List[S]:
        """Every status from which action is permitted"""
        return [
            status
            for status, actions in self.transitions.items()
            if action in actions
        ]

    def resolve(self, current_status: S, action: A, party: Optional[UserRole]) -> S:
        """
        Next status for action performed by party

        Raises:
            InvalidTransitionError: If action is not permitted from current status
            AuthorizationError: If party may not perform action
        """
        transition = self.transitions.get(current_status, {}).get(action)
        if transition is None:
            raise InvalidTransitionError(current_status.value, action.value)
        if party not in transition.actors:
            who = party.value if party else "non-participant"
            raise AuthorizationError(f"A {who} cannot {action.value} from '{current_status.value}'")
        return transition.target
