"""
Enterprise Use Case DTOs (Data Transfer Objects)
"""

from typing import List, Optional

from pydantic import BaseModel


class AddUserCommand(BaseModel):
    """Internal user to enroll into the caller's enterprise"""

    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    client_id: Optional[str] = None
    username: Optional[str] = None


class MemberResponse(BaseModel):
    """Result of a member-level change"""

    status: str = "success"
    eid: str
    username: str
    message: str


class EnterpriseSummary(BaseModel):
    """Enterprise profile as listed to administrators"""

    eid: str
    enterprise_type: str
    business_name: Optional[str] = None
    admin: Optional[str] = None
    create_datetime: Optional[int] = None
    email_verified: Optional[str] = None


class ListEnterprisesResponse(BaseModel):
    status: str = "success"
    data: List[EnterpriseSummary]


class DeleteEnterpriseResponse(BaseModel):
    status: str = "success"
    eid: str
    deleted_members: List[str]
