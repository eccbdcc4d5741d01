"""Entity creation and API document shaping.

create_entity is the store-side half of the collision workflow: the
checker decides whether a code looks free, the store insert decides
whether it actually was.
"""

import logging
from typing import Any, Optional

from canonid.core.collision import CollisionChecker
from canonid.core.errors import CodeDuplicationError
from canonid.core.models import EntityDocument, EntityRecord
from canonid.core.prefix_registry import TypeDescriptor

logger = logging.getLogger(__name__)


def create_entity(
    checker: CollisionChecker,
    entity_type: TypeDescriptor,
    code: Optional[str] = None,
    values: Optional[dict[str, Any]] = None,
    max_attempts: int = 1,
) -> EntityRecord:
    """Assign a verified code to a new entity and persist it.

    Args:
        checker: collision checker bound to the registry
        entity_type: type of the new entity
        code: bare code or full canonical identifier; generated when omitted
        values: entity fields stored alongside the code
        max_attempts: bound on regenerate-and-retry after CodeDuplicationError.
            Only applies to generated codes; a supplied code is tried once.

    Returns:
        The stored EntityRecord.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be positive, got {max_attempts}")
    attempts = max_attempts if code is None else 1

    attempt = 1
    while True:
        try:
            pending = checker.prepare(entity_type, code=code, values=values)
            record = EntityRecord(
                type_name=entity_type.name,
                prefix=pending.prefix,
                code=pending.code,
                values=pending.values,
            )
            entity_type.backing_store.insert(record)
        except CodeDuplicationError as e:
            if attempt >= attempts:
                raise
            logger.warning(
                f"Code collision on {e.canonical_id}, regenerating "
                f"(attempt {attempt}/{attempts})"
            )
            attempt += 1
            continue

        logger.info(f"Created {entity_type.name} {record.canonical_id}")
        return record


def to_api_document(record: EntityRecord) -> EntityDocument:
    """Shape a record for the API.

    The entity values are merged flat with the canonical identifier set as
    both id and uuid; the bare code is never exposed.
    """
    return EntityDocument(
        **{
            **record.values,
            "id": record.canonical_id,
            "uuid": record.canonical_id,
            "type_name": record.type_name,
            "created_at": record.created_at,
        }
    )
