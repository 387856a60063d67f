"""
Payment gateway integration
Only a simulated gateway exists; no money moves.
"""

from abc import ABC, abstractmethod
from typing import Optional
import asyncio
import logging

from referralhub.core.config import settings
from referralhub.models.payment import PaymentMethod
from referralhub.utils.helpers import generate_payment_reference

logger = logging.getLogger(__name__)

class PaymentGateway(ABC):
    """Charges a student for a referral"""

    @abstractmethod
    async def charge(
        self,
        amount: float,
        method: PaymentMethod,
        upi_handle: Optional[str] = None,
        currency: str = "INR"
    ) -> str:
        """
        Collect amount and return the gateway reference

        Raises:
            RemoteError: If the gateway refuses the charge
        """

class SimulatedPaymentGateway(PaymentGateway):
    """Waits a moment and always succeeds"""

    def __init__(self, delay: Optional[float] = None):
        self.delay = settings.PAYMENT_SIMULATION_DELAY if delay is None else delay

    async def charge(
        self,
        amount: float,
        method: PaymentMethod,
        upi_handle: Optional[str] = None,
        currency: str = "INR"
    ) -> str:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        reference = generate_payment_reference()
        logger.info(f"Simulated {method.value} payment of {amount} {currency}: {reference}")
        return reference
