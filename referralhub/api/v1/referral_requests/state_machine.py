"""
Referral request state machine for managing status transitions
"""

from referralhub.core.state_machine import (
    PARTICIPANTS,
    PROFESSIONAL,
    STUDENT,
    StateMachine,
    Transition,
)
from referralhub.models.referral_request import (
    ReferralRequestAction as Action,
    ReferralRequestStatus as Status,
)

class ReferralRequestStateMachine(StateMachine[Status, Action]):
    """
    Manages valid referral request transitions

    Only the professional answers a pending request, only the student answers
    a payment demand and pays, either participant may complete or cancel
    where the table allows it.
    """

    transitions = {
        Status.PENDING: {
            Action.ACCEPT: Transition(Status.ACCEPTED, PROFESSIONAL),
            Action.REQUEST_PAYMENT: Transition(Status.PAYMENT_REQUESTED, PROFESSIONAL),
            Action.DECLINE: Transition(Status.DECLINED, PROFESSIONAL),
            Action.CANCEL: Transition(Status.CANCELLED, PARTICIPANTS),
        },
        Status.PAYMENT_REQUESTED: {
            Action.ACCEPT_PAYMENT: Transition(Status.PAYMENT_ACCEPTED, STUDENT),
            Action.REJECT_PAYMENT: Transition(Status.PAYMENT_REJECTED, STUDENT),
            Action.CANCEL: Transition(Status.CANCELLED, PARTICIPANTS),
        },
        Status.PAYMENT_ACCEPTED: {
            Action.COMPLETE_PAYMENT: Transition(Status.PAYMENT_COMPLETED, STUDENT),
        },
        Status.ACCEPTED: {
            Action.COMPLETE: Transition(Status.COMPLETED, PARTICIPANTS),
            Action.CANCEL: Transition(Status.CANCELLED, PARTICIPANTS),
        },
        Status.PAYMENT_COMPLETED: {
            Action.COMPLETE: Transition(Status.COMPLETED, PARTICIPANTS),
        },
        # Terminal states
        Status.DECLINED: {},
        Status.PAYMENT_REJECTED: {},
        Status.COMPLETED: {},
        Status.CANCELLED: {},
    }

    def is_cancellable(self, status: Status) -> bool:
        """Check if request can be cancelled in current status"""
        return self.can_transition(status, Action.CANCEL)
