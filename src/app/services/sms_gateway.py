from abc import ABC, abstractmethod
from typing import Optional


class SmsDeliveryError(Exception):
    """The SMS gateway did not accept a message"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ISmsGateway(ABC):
    """SMS gateway - application layer"""

    @abstractmethod
    async def send(self, phone_number: str, message: str) -> str:
        """Send a text message; returns the gateway's message id"""
        pass
