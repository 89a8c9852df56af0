"""Verification state machine for document decisions."""

from services.document_verification.app.core.errors import (
    InvalidTransitionError,
    VerificationCompletedError,
)
from shared.schemas.document import VerificationStatus


class StateMachine:
    """Document verification state machine.

    Valid transitions:
    - pending -> approved (verifier approves)
    - pending -> rejected (verifier rejects with a reason)

    Approved and rejected are terminal: a decision is final.
    """

    VALID_TRANSITIONS: set[tuple[VerificationStatus, VerificationStatus]] = {
        (VerificationStatus.PENDING, VerificationStatus.APPROVED),
        (VerificationStatus.PENDING, VerificationStatus.REJECTED),
    }

    TERMINAL_STATES: frozenset[VerificationStatus] = frozenset(
        {VerificationStatus.APPROVED, VerificationStatus.REJECTED}
    )

    @classmethod
    def is_valid_transition(
        cls,
        current_state: VerificationStatus,
        target_state: VerificationStatus,
    ) -> bool:
        """Check if a state transition is valid.

        Args:
            current_state: Current verification status
            target_state: Desired new status

        Returns:
            True if transition is valid, False otherwise
        """
        return (current_state, target_state) in cls.VALID_TRANSITIONS

    @classmethod
    def validate_transition(
        cls,
        current_state: VerificationStatus,
        target_state: VerificationStatus,
    ) -> None:
        """Validate a state transition, raising an error if invalid.

        Args:
            current_state: Current verification status
            target_state: Desired new status

        Raises:
            VerificationCompletedError: If current state is terminal
            InvalidTransitionError: If the pair is otherwise not allowed
        """
        if cls.is_terminal_state(current_state):
            raise VerificationCompletedError(current_state, target_state)
        if not cls.is_valid_transition(current_state, target_state):
            raise InvalidTransitionError(current_state, target_state)

    @classmethod
    def is_terminal_state(cls, state: VerificationStatus) -> bool:
        """Check if a state is terminal (no valid transitions out)."""
        return state in cls.TERMINAL_STATES

    @staticmethod
    def decision_status(approve: bool) -> VerificationStatus:
        """Map a verifier's decision to its terminal status."""
        return VerificationStatus.APPROVED if approve else VerificationStatus.REJECTED
