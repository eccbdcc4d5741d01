"""Resolve canonical identifiers back to stored entities."""

import logging
from typing import Optional

from canonid.core.codec import parse
from canonid.core.models import EntityRecord
from canonid.core.prefix_registry import PrefixRegistry, TypeDescriptor

logger = logging.getLogger(__name__)


class Resolver:
    def __init__(self, registry: PrefixRegistry):
        self.registry = registry

    def find(self, identifier: str) -> Optional[EntityRecord]:
        """Find the entity for ``{prefix}-{code}``.

        Raises InvalidFormatError for malformed input and UnknownPrefixError
        for an unregistered prefix. Returns None when nothing has the code.
        """
        prefix, code = parse(identifier)
        descriptor = self.registry.lookup(prefix)
        return descriptor.find_by_code(code)

    def exists(self, identifier: str) -> bool:
        return self.find(identifier) is not None

    def find_for_type(
        self, descriptor: TypeDescriptor, identifier: Optional[str]
    ) -> Optional[EntityRecord]:
        """Find within one type; the identifier must carry that type's prefix."""
        code = self.registry.trim_code(descriptor, identifier)
        return descriptor.find_by_code(code)
