"""Prefix Registry — binds identifier prefixes to entity types.

Each entity type owns one prefix; a type without its own prefix adopts
the nearest ancestor's, sharing that ancestor's registry slot and backing
store (collision scope). Registrations normally happen at startup, but
reads may interleave with late registrations, so every access goes
through one lock.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Iterator, Optional

from canonid.core.codec import PrefixGrammar, grammar_for, is_valid_prefix
from canonid.core.config import settings
from canonid.core.errors import (
    DuplicatePrefixRegistrationError,
    InvalidFormatError,
    PrefixReassignmentError,
    UnknownPrefixError,
    UnsetPrefixError,
)
from canonid.core.models import EntityRecord
from canonid.core.stores import BackingStore

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class TypeDescriptor:
    """An entity type as seen by the identifier core."""

    name: str
    prefix: Optional[str] = None
    parent: Optional["TypeDescriptor"] = None
    store: Optional[BackingStore] = None

    def lineage(self) -> Iterator["TypeDescriptor"]:
        """Yield this type, then each ancestor. Stops at a repeated type."""
        seen = set()
        current = self
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            yield current
            current = current.parent

    def has_backing_store(self) -> bool:
        return any(t.store is not None for t in self.lineage())

    @property
    def backing_store(self) -> BackingStore:
        for t in self.lineage():
            if t.store is not None:
                return t.store
        raise RuntimeError(f"No backing store declared for type '{self.name}'")

    def exists_by_code(self, code: str) -> bool:
        return self.backing_store.exists_by_code(code)

    def find_by_code(self, code: str) -> Optional[EntityRecord]:
        return self.backing_store.find_by_code(code)


@dataclass(frozen=True)
class RegistryEntry:
    prefix: str
    descriptor: TypeDescriptor
    grammar: PrefixGrammar


class PrefixRegistry:
    """Registry of prefix -> TypeDescriptor, plus type name -> TypeDescriptor."""

    def __init__(self, code_length: Optional[int] = None):
        self.code_length = code_length or settings.code_length
        self._entries: dict[str, RegistryEntry] = {}
        self._types: dict[str, TypeDescriptor] = {}
        self._lock = threading.RLock()

    def register(self, prefix: str, descriptor: TypeDescriptor) -> None:
        """Bind a prefix to a type.

        Raises DuplicatePrefixRegistrationError if the prefix (compared
        case-insensitively) is already bound, even to the same descriptor,
        and PrefixReassignmentError if the type already owns another prefix.
        The type must reach a backing store, its own or an ancestor's.
        """
        if not is_valid_prefix(prefix):
            raise InvalidFormatError(f"Invalid identifier prefix: {prefix!r}")
        if not descriptor.has_backing_store():
            raise ValueError(f"Type '{descriptor.name}' has no backing store")

        with self._lock:
            existing = self._entries.get(prefix.lower())
            if existing is not None:
                raise DuplicatePrefixRegistrationError(
                    prefix, existing.descriptor.name, descriptor.name
                )
            if descriptor.prefix and descriptor.prefix.lower() != prefix.lower():
                raise PrefixReassignmentError(descriptor.name, descriptor.prefix, prefix)
            self._entries[prefix.lower()] = RegistryEntry(
                prefix=prefix, descriptor=descriptor, grammar=PrefixGrammar(prefix)
            )
            descriptor.prefix = prefix
            self._types.setdefault(descriptor.name, descriptor)

        logger.info(f"Registered prefix '{prefix}' for type '{descriptor.name}'")

    def define_type(
        self,
        name: str,
        prefix: Optional[str] = None,
        parent: Optional[TypeDescriptor] = None,
        store: Optional[BackingStore] = None,
    ) -> TypeDescriptor:
        """Create, register and return a type descriptor.

        A type without a prefix must inherit one and a type without a store
        must inherit one; both are checked here so a type can never operate
        half-defined. The type's own store gets its identity column declared.
        """
        descriptor = TypeDescriptor(name=name, parent=parent, store=store)
        if not descriptor.has_backing_store():
            raise ValueError(f"Type '{name}' has no backing store")

        with self._lock:
            if name in self._types:
                raise ValueError(f"Entity type '{name}' is already defined")
            if prefix:
                self.register(prefix, descriptor)
            else:
                self.effective_prefix(descriptor)
            self._types[name] = descriptor

        if store is not None:
            store.ensure_identity_column(size=self.code_length, unique=True)
        return descriptor

    def lookup(self, prefix: str) -> TypeDescriptor:
        return self.entry(prefix).descriptor

    def entry(self, prefix: str) -> RegistryEntry:
        with self._lock:
            entry = self._entries.get(prefix.lower()) if prefix else None
        if entry is None:
            raise UnknownPrefixError(prefix)
        return entry

    def effective_prefix(self, descriptor: TypeDescriptor) -> str:
        """Own prefix if set, otherwise the nearest ancestor's."""
        for t in descriptor.lineage():
            if t.prefix:
                return t.prefix
        raise UnsetPrefixError(descriptor.name)

    def grammar(self, prefix: str) -> PrefixGrammar:
        with self._lock:
            entry = self._entries.get(prefix.lower())
        if entry is not None and entry.prefix == prefix:
            return entry.grammar
        return grammar_for(prefix)

    def grammar_for_type(self, descriptor: TypeDescriptor) -> PrefixGrammar:
        return self.grammar(self.effective_prefix(descriptor))

    def trim_code(self, descriptor: TypeDescriptor, identifier: Optional[str]) -> str:
        """Strip the type's effective prefix from an identifier."""
        return self.grammar_for_type(descriptor).trim(identifier)

    def get_type(self, name: str) -> TypeDescriptor:
        with self._lock:
            descriptor = self._types.get(name)
        if descriptor is None:
            raise KeyError(f"Unknown entity type: {name}")
        return descriptor

    def types(self) -> list[TypeDescriptor]:
        with self._lock:
            return list(self._types.values())

    def prefixes(self) -> list[RegistryEntry]:
        with self._lock:
            return sorted(self._entries.values(), key=lambda e: e.prefix.lower())

    def __contains__(self, prefix: str) -> bool:
        with self._lock:
            return bool(prefix) and prefix.lower() in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# ---------------------------------------------------------------------------
# Process-wide default registry
# ---------------------------------------------------------------------------

_registry: Optional[PrefixRegistry] = None


def init_registry(code_length: Optional[int] = None) -> PrefixRegistry:
    """Create the default registry. Call once at app startup."""
    global _registry
    _registry = PrefixRegistry(code_length=code_length)
    logger.info("Prefix registry initialized")
    return _registry


def get_registry() -> PrefixRegistry:
    """Get the default registry."""
    if _registry is None:
        raise RuntimeError("Prefix registry not initialized. Call init_registry() first.")
    return _registry


def reset_registry() -> None:
    global _registry
    _registry = None
