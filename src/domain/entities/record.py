"""
Record Entity

A single item of the partition/sort-key store. Enterprises, authentication
profiles, enterprise-member indexes and OTP records are all stored as
Records whose keys follow the scheme in src.domain.keys.
"""

from datetime import datetime
from typing import Any, Dict

from sqlmodel import JSON, Column, DateTime, Field, SQLModel


class Record(SQLModel, table=True):
    """
    Record entity - one (pk, sk) addressed attribute map.

    Business Rules:
    - (pk, sk) is unique
    - attr1 holds the denormalized attributes (the ATTR1 map)
    - attr1 must be reassigned, not mutated in place, for changes to persist
    """

    __tablename__ = "records"

    pk: str = Field(primary_key=True, max_length=255)
    sk: str = Field(primary_key=True, max_length=255)

    attr1: Dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )
