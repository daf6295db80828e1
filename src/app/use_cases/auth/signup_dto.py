"""
Signup Use Case DTOs (Data Transfer Objects)

Command/Response pattern for clean architecture separation:
- SignupCommand: Input to use case (enrollment intent)
- SignupResponse: Output from use case (structured result)
"""

from typing import Optional

from pydantic import BaseModel


class SignupCommand(BaseModel):
    """
    Signup command - represents enrollment intent

    Without eid: found a new enterprise, the signer becomes its admin.
    With eid and role: add an internal user to an existing enterprise.
    """

    email: Optional[str] = None
    password: Optional[str] = None
    enterprise_type: Optional[str] = None
    client_id: Optional[str] = None
    username: Optional[str] = None
    business_name: Optional[str] = None
    eid: Optional[str] = None
    role: Optional[str] = None


class SignupResponse(BaseModel):
    """Signup response - enterprise binding of the enrolled user"""

    eid: str
    username: str
    role: str
