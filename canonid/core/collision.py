"""Collision check run when an entity is created.

An entity under construction moves through:

    UNASSIGNED -> CODE_ASSIGNED -> CHECKED -> ACCEPTED | REJECTED

The existence check is optimistic: it is not atomic with the insert that
follows, so the backing store's own uniqueness guard has the last word.
Nothing here retries; see ``canonid.core.entities.create_entity`` for the
opt-in bounded retry.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from canonid.core.codec import SEPARATOR, canonical, is_valid_trimmed_code
from canonid.core.config import settings
from canonid.core.errors import CodeDuplicationError, InvalidFormatError
from canonid.core.id_gen import generate_code
from canonid.core.models import CodeState
from canonid.core.prefix_registry import PrefixRegistry, TypeDescriptor

logger = logging.getLogger(__name__)


@dataclass
class PendingEntity:
    entity_type: TypeDescriptor
    code: Optional[str] = None
    values: dict[str, Any] = field(default_factory=dict)
    prefix: Optional[str] = None
    state: CodeState = CodeState.UNASSIGNED

    @property
    def canonical_id(self) -> str:
        return canonical(self.prefix, self.code)


class CollisionChecker:
    def __init__(
        self,
        registry: PrefixRegistry,
        code_length: Optional[int] = None,
        max_code_length: Optional[int] = None,
    ):
        self.registry = registry
        self.code_length = code_length or registry.code_length
        self.max_code_length = max_code_length or settings.max_trimmed_code_length

    def assign_code(self, pending: PendingEntity) -> PendingEntity:
        """Generate a code, or normalize the one supplied by the caller.

        A supplied value containing the separator is treated as a full
        canonical identifier and must carry the type's effective prefix.
        """
        if pending.state is not CodeState.UNASSIGNED:
            raise RuntimeError(f"Cannot assign a code in state '{pending.state.value}'")

        prefix = self.registry.effective_prefix(pending.entity_type)
        if not pending.code:
            pending.code = generate_code(self.code_length)
        else:
            code = pending.code
            if SEPARATOR in code:
                code = self.registry.trim_code(pending.entity_type, code)
            if not is_valid_trimmed_code(code, self.max_code_length):
                raise InvalidFormatError(f"Invalid code syntax: {code!r}")
            pending.code = code

        pending.prefix = prefix
        pending.state = CodeState.CODE_ASSIGNED
        return pending

    def check(self, pending: PendingEntity) -> PendingEntity:
        """Ask the type's store whether the code is taken."""
        if pending.state is not CodeState.CODE_ASSIGNED:
            raise RuntimeError(f"Cannot check a code in state '{pending.state.value}'")

        pending.state = CodeState.CHECKED
        if pending.entity_type.exists_by_code(pending.code):
            pending.state = CodeState.REJECTED
            logger.warning(f"Rejected duplicate identifier {pending.canonical_id}")
            raise CodeDuplicationError(pending.canonical_id)

        pending.state = CodeState.ACCEPTED
        return pending

    def prepare(
        self,
        entity_type: TypeDescriptor,
        code: Optional[str] = None,
        values: Optional[dict[str, Any]] = None,
    ) -> PendingEntity:
        """Assign and check a code; returns an ACCEPTED pending entity."""
        pending = PendingEntity(entity_type=entity_type, code=code, values=dict(values or {}))
        self.assign_code(pending)
        return self.check(pending)
