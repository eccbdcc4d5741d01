"""Pydantic models for stored entities and API request/response schemas."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from canonid.core.codec import canonical


class CodeState(str, Enum):
    UNASSIGNED = "unassigned"
    CODE_ASSIGNED = "code_assigned"
    CHECKED = "checked"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# --- Stored entity ---


class EntityRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    type_name: str
    prefix: str
    code: str
    values: dict[str, Any] = {}
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def canonical_id(self) -> str:
        return canonical(self.prefix, self.code)


# --- API request/response models ---


class IdentifierParts(BaseModel):
    identifier: str
    prefix: str
    code: str


class PrefixEntry(BaseModel):
    prefix: str
    type_name: str
    inherited_by: list[str] = []


class PrefixListResponse(BaseModel):
    prefixes: list[PrefixEntry]
    total: int


class ExistsResponse(BaseModel):
    identifier: str
    exists: bool


class EntityCreate(BaseModel):
    code: Optional[str] = Field(
        None, max_length=255,
        description="Bare code or full canonical identifier; generated when omitted"
    )
    values: dict[str, Any] = {}


class EntityDocument(BaseModel):
    """Entity values plus the canonical identifier as both id and uuid."""

    model_config = ConfigDict(extra="allow")

    id: str
    uuid: str
    type_name: str
    created_at: datetime
