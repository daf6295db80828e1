from libs.result import Result, Return

from src.app.services.unit_of_work import UnitOfWork
from src.domain.keys import ENTERPRISE_PK, ENTERPRISE_PROFILE_PREFIX

from .dtos import EnterpriseSummary, ListEnterprisesResponse


class ListEnterprisesUseCase:
    """Lists every enterprise profile record"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[ListEnterprisesResponse]:
        async with self.uow:
            records = await self.uow.records.query(ENTERPRISE_PK, ENTERPRISE_PROFILE_PREFIX)

        enterprises = [
            EnterpriseSummary(
                eid=record["eid"],
                enterprise_type=record["enterprise_type"],
                business_name=record.get("business_name"),
                admin=record.get("admin"),
                create_datetime=record.get("create_datetime"),
                email_verified=record.get("email_verified"),
            )
            for record in records
            if record.get("eid") and record.get("enterprise_type")
        ]
        return Return.ok(ListEnterprisesResponse(data=enterprises))
