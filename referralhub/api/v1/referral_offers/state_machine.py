"""
Referral offer state machine
"""

from referralhub.core.state_machine import PROFESSIONAL, STUDENT, StateMachine, Transition
from referralhub.models.referral_offer import (
    ReferralOfferAction as Action,
    ReferralOfferStatus as Status,
)

class ReferralOfferStateMachine(StateMachine[Status, Action]):
    """Offers have no payment step: the student answers, the professional completes"""

    transitions = {
        Status.OFFERED: {
            Action.ACCEPT: Transition(Status.ACCEPTED, STUDENT),
            Action.DECLINE: Transition(Status.DECLINED, STUDENT),
        },
        Status.ACCEPTED: {
            Action.COMPLETE: Transition(Status.COMPLETED, PROFESSIONAL),
        },
        # Terminal states
        Status.DECLINED: {},
        Status.COMPLETED: {},
    }
