from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple


class ConditionKind:
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"
    NOT_EXISTS_OR_EQUALS = "not_exists_or_equals"
    EQUALS = "equals"


@dataclass(frozen=True)
class Condition:
    """Guard evaluated against the current state of a record"""

    kind: str
    attribute: Optional[str] = None
    value: Any = None

    @classmethod
    def exists(cls) -> "Condition":
        return cls(ConditionKind.EXISTS)

    @classmethod
    def not_exists(cls) -> "Condition":
        return cls(ConditionKind.NOT_EXISTS)

    @classmethod
    def not_exists_or_equals(cls, attribute: str, value: Any) -> "Condition":
        return cls(ConditionKind.NOT_EXISTS_OR_EQUALS, attribute, value)

    @classmethod
    def equals(cls, attribute: str, value: Any) -> "Condition":
        return cls(ConditionKind.EQUALS, attribute, value)

    def holds(self, attrs: Optional[Dict[str, Any]]) -> bool:
        if self.kind == ConditionKind.EXISTS:
            return attrs is not None
        if self.kind == ConditionKind.NOT_EXISTS:
            return attrs is None
        if self.kind == ConditionKind.NOT_EXISTS_OR_EQUALS:
            return attrs is None or attrs.get(self.attribute) == self.value
        if self.kind == ConditionKind.EQUALS:
            return attrs is not None and attrs.get(self.attribute) == self.value
        raise ValueError(f"Unknown condition kind: {self.kind}")


class TransactAction:
    PUT = "put"
    UPDATE = "update"
    DELETE = "delete"
    CONDITION_CHECK = "condition_check"


@dataclass(frozen=True)
class TransactItem:
    """
    One operation of an all-or-nothing transactional write.

    put replaces the attribute map, update merges set_attrs into it,
    delete removes the record and condition_check only asserts.
    """

    action: str
    pk: str
    sk: str
    attrs: Dict[str, Any] = field(default_factory=dict)
    condition: Optional[Condition] = None

    @property
    def key(self) -> Tuple[str, str]:
        return self.pk, self.sk

    @classmethod
    def put(cls, key: Tuple[str, str], attrs: Dict[str, Any], condition: Optional[Condition] = None):
        return cls(TransactAction.PUT, key[0], key[1], dict(attrs), condition)

    @classmethod
    def update(cls, key: Tuple[str, str], set_attrs: Dict[str, Any], condition: Optional[Condition] = None):
        return cls(TransactAction.UPDATE, key[0], key[1], dict(set_attrs), condition)

    @classmethod
    def delete(cls, key: Tuple[str, str], condition: Optional[Condition] = None):
        return cls(TransactAction.DELETE, key[0], key[1], {}, condition)

    @classmethod
    def condition_check(cls, key: Tuple[str, str], condition: Condition):
        return cls(TransactAction.CONDITION_CHECK, key[0], key[1], {}, condition)


class TransactionCanceledError(Exception):
    """A transactional write was rejected; none of its items were applied"""

    def __init__(self, failed_keys: Sequence[Tuple[str, str]]):
        self.failed_keys = list(failed_keys)
        super().__init__(
            "Transaction cancelled, conditional check failed for: "
            + ", ".join(f"{pk}/{sk}" for pk, sk in self.failed_keys)
        )


class IRecordRepository(ABC):
    """Partition/sort-key record store interface - application layer"""

    @abstractmethod
    async def get(self, pk: str, sk: str) -> Optional[Dict[str, Any]]:
        """Get the attribute map of a record, or None"""
        pass

    @abstractmethod
    async def query(self, pk: str, sk_prefix: str = "") -> List[Dict[str, Any]]:
        """List attribute maps in a partition whose sort key has the prefix"""
        pass

    @abstractmethod
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
        pass

    @abstractmethod
    async def delete(self, pk: str, sk: str, condition: Optional[Condition] = None) -> bool:
        """Delete one record; returns False when it did not exist"""
        pass

    @abstractmethod
    async def transact_write(self, items: Sequence[TransactItem]) -> None:
        """Apply all items or none of them"""
        pass
