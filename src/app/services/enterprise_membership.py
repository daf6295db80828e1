"""
Enterprise membership check used before issuing OTPs.
"""

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.keys import member_key


class EnterpriseMembershipChecker:
    """
    Confirms a user is an admin-approved member of an enterprise.

    Runs inside the caller's unit of work; it only reads.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def check(self, eid: str, username: str) -> Result[dict]:
        member = await self.uow.records.get(*member_key(eid, username))
        if member is None:
            return Return.err(
                Error("FORBIDDEN", "User is not registered with this enterprise")
            )
        if member.get("isConfirmedByAdmin") != "true":
            return Return.err(
                Error("FORBIDDEN", "User is not confirmed by enterprise admin")
            )
        return Return.ok(member)
