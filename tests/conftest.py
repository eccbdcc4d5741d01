"""Shared test fixtures for canonid test suite."""

from typing import Optional

import pytest

from canonid.core.collision import CollisionChecker
from canonid.core.models import EntityRecord
from canonid.core.prefix_registry import PrefixRegistry
from canonid.core.resolver import Resolver
from canonid.core.stores import InMemoryStore


class StubStore:
    """Store whose existence answers are scripted by the test."""

    def __init__(self, existing: Optional[set[str]] = None):
        self.existing = set(existing or ())
        self.exists_calls: list[str] = []
        self.inserted: list[EntityRecord] = []
        self.identity_column = None

    def ensure_identity_column(self, size: int = 8, unique: bool = True) -> None:
        self.identity_column = {"size": size, "unique": unique}

    def exists_by_code(self, code: str) -> bool:
        self.exists_calls.append(code)
        return code in self.existing

    def find_by_code(self, code: str) -> Optional[EntityRecord]:
        return None

    def insert(self, record: EntityRecord) -> None:
        self.inserted.append(record)


def make_record(
    code: str = "abcd1234",
    prefix: str = "a",
    type_name: str = "Account",
    **values,
) -> EntityRecord:
    """Helper to create entity records for testing."""
    return EntityRecord(type_name=type_name, prefix=prefix, code=code, values=values)


@pytest.fixture
def registry() -> PrefixRegistry:
    """Registry with Account ('a'), User ('u') and Admin (inherits 'u')."""
    reg = PrefixRegistry(code_length=8)
    reg.define_type("Account", prefix="a", store=InMemoryStore("Account"))
    user = reg.define_type("User", prefix="u", store=InMemoryStore("User"))
    reg.define_type("Admin", parent=user)
    return reg


@pytest.fixture
def checker(registry) -> CollisionChecker:
    return CollisionChecker(registry)


@pytest.fixture
def resolver(registry) -> Resolver:
    return Resolver(registry)
