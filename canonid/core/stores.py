"""Backing stores — existence and lookup-by-code for one entity type.

A store is the collaborator the identifier core consults; it owns the
authoritative uniqueness guard. The collision check in
``canonid.core.collision`` is only a fast-fail in front of ``insert``:
two creators can both see a code as free, and ``insert`` is what
decides which one wins.
"""

import logging
import threading
from typing import Optional, Protocol, runtime_checkable

import redis as redis_lib

from canonid.core.errors import CodeDuplicationError
from canonid.core.models import EntityRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class BackingStore(Protocol):
    def exists_by_code(self, code: str) -> bool: ...

    def find_by_code(self, code: str) -> Optional[EntityRecord]: ...

    def insert(self, record: EntityRecord) -> None: ...

    def ensure_identity_column(self, size: int = 8, unique: bool = True) -> None: ...


class InMemoryStore:
    """Process-local store, one dict per entity type scope."""

    def __init__(self, name: str = "memory"):
        self.name = name
        self.identity_column: Optional[dict] = None
        self._records: dict[str, EntityRecord] = {}
        self._lock = threading.Lock()

    def ensure_identity_column(self, size: int = 8, unique: bool = True) -> None:
        if self.identity_column is None:
            self.identity_column = {"size": size, "unique": unique, "fixed": True}
            logger.info(f"Declared identity column for store '{self.name}' (size={size})")

    def exists_by_code(self, code: str) -> bool:
        with self._lock:
            return code in self._records

    def find_by_code(self, code: str) -> Optional[EntityRecord]:
        with self._lock:
            return self._records.get(code)

    def insert(self, record: EntityRecord) -> None:
        unique = self.identity_column is None or self.identity_column["unique"]
        with self._lock:
            if unique and record.code in self._records:
                raise CodeDuplicationError(record.canonical_id)
            self._records[record.code] = record

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class RedisStore:
    """Redis-backed store: one JSON string per code.

    Key format: {namespace}:{scope}:{code}
    ``insert`` uses SET NX, so the uniqueness guard is atomic on the server.
    """

    def __init__(self, client: redis_lib.Redis, scope: str, namespace: str = "canonid"):
        self.client = client
        self.scope = scope
        self.namespace = namespace
        self.code_size: Optional[int] = None

    def _key(self, code: str) -> str:
        return f"{self.namespace}:{self.scope}:{code}"

    def ensure_identity_column(self, size: int = 8, unique: bool = True) -> None:
        # Redis has no schema; SET NX already enforces uniqueness per key.
        self.code_size = size

    def exists_by_code(self, code: str) -> bool:
        return bool(self.client.exists(self._key(code)))

    def find_by_code(self, code: str) -> Optional[EntityRecord]:
        raw = self.client.get(self._key(code))
        if raw is None:
            return None
        return EntityRecord.model_validate_json(raw)

    def insert(self, record: EntityRecord) -> None:
        ok = self.client.set(self._key(record.code), record.model_dump_json(), nx=True)
        if not ok:
            raise CodeDuplicationError(record.canonical_id)
