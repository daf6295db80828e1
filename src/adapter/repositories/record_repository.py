from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.record_repository import (
    Condition,
    IRecordRepository,
    TransactAction,
    TransactItem,
    TransactionCanceledError,
)
from src.domain.entities import Record


class RecordRepository(IRecordRepository):
    """Record repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, pk: str, sk: str) -> Optional[Record]:
        stmt = select(Record).where(Record.pk == pk, Record.sk == sk)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get(self, pk: str, sk: str) -> Optional[Dict[str, Any]]:
        """Get the attribute map of a record, or None"""
        record = await self._load(pk, sk)
        return dict(record.attr1) if record else None

    async def query(self, pk: str, sk_prefix: str = "") -> List[Dict[str, Any]]:
        """List attribute maps in a partition whose sort key has the prefix"""
        stmt = select(Record).where(Record.pk == pk)
        if sk_prefix:
            stmt = stmt.where(Record.sk.startswith(sk_prefix, autoescape=True))
        result = await self.session.exec(stmt.order_by(Record.sk))
        return [dict(record.attr1) for record in result.all()]

    async def conditional_update(
        self,
        pk: str,
        sk: str,
        set_attrs: Optional[Dict[str, Any]] = None,
        remove_attrs: Optional[Iterable[str]] = None,
        condition: Optional[Condition] = None,
        upsert: bool = True,
    ) -> Dict[str, Any]:
        """Merge/remove attributes of one record; returns the new attribute map"""
        record = await self._load(pk, sk)
        current = dict(record.attr1) if record else None

        if condition is not None and not condition.holds(current):
            raise TransactionCanceledError([(pk, sk)])
        if record is None and not upsert:
            raise TransactionCanceledError([(pk, sk)])

        attrs = dict(current or {})
        attrs.update(set_attrs or {})
        for name in remove_attrs or ():
            attrs.pop(name, None)

        if record is None:
            record = Record(pk=pk, sk=sk, attr1=attrs)
        else:
            # Reassign so SQLAlchemy detects the JSON change
            record.attr1 = attrs
            record.updated_at = datetime.utcnow()
        self.session.add(record)
        await self.session.flush()
        return attrs

    async def delete(self, pk: str, sk: str, condition: Optional[Condition] = None) -> bool:
        """Delete one record; returns False when it did not exist"""
        record = await self._load(pk, sk)
        current = dict(record.attr1) if record else None

        if condition is not None and not condition.holds(current):
            raise TransactionCanceledError([(pk, sk)])
        if record is None:
            return False

        await self.session.delete(record)
        await self.session.flush()
        return True

    async def transact_write(self, items: Sequence[TransactItem]) -> None:
        """
        Apply all items or none of them.

        Every condition is evaluated against the pre-transaction state before
        anything is written. Durability comes from the unit of work commit.
        """
        keys = [item.key for item in items]
        if len(set(keys)) != len(keys):
            raise ValueError("Transaction cannot include multiple operations on one item")

        existing: Dict[tuple, Optional[Record]] = {}
        for item in items:
            existing[item.key] = await self._load(item.pk, item.sk)

        failed = []
        for item in items:
            record = existing[item.key]
            current = dict(record.attr1) if record else None
            if item.condition is not None and not item.condition.holds(current):
                failed.append(item.key)
        if failed:
            raise TransactionCanceledError(failed)

        now = datetime.utcnow()
        for item in items:
            record = existing[item.key]
            if item.action == TransactAction.CONDITION_CHECK:
                continue
            if item.action == TransactAction.DELETE:
                if record is not None:
                    await self.session.delete(record)
                continue
            if item.action == TransactAction.PUT:
                attrs = dict(item.attrs)
            elif item.action == TransactAction.UPDATE:
                attrs = dict(record.attr1) if record else {}
                attrs.update(item.attrs)
            else:
                raise ValueError(f"Unknown transaction action: {item.action}")

            if record is None:
                self.session.add(Record(pk=item.pk, sk=item.sk, attr1=attrs))
            else:
                record.attr1 = attrs
                record.updated_at = now
                self.session.add(record)

        await self.session.flush()
