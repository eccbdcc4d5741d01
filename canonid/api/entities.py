"""Type-scoped entity endpoints — creation with collision check, lookup by ID."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from canonid.api.deps import get_checker, get_entity_type, get_resolver
from canonid.core.collision import CollisionChecker
from canonid.core.config import settings
from canonid.core.entities import create_entity, to_api_document
from canonid.core.errors import (
    CodeDuplicationError,
    InvalidFormatError,
    InvalidPrefixForTypeError,
)
from canonid.core.models import EntityCreate, EntityDocument
from canonid.core.prefix_registry import TypeDescriptor
from canonid.core.resolver import Resolver

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/entities", response_model=EntityDocument, status_code=201)
async def create(
    body: EntityCreate,
    entity_type: TypeDescriptor = Depends(get_entity_type),
    checker: CollisionChecker = Depends(get_checker),
):
    """Create an entity of this type.

    Without a code one is generated (regenerated on collision, bounded by
    max_generation_attempts). A supplied code that already exists is a 409.
    """
    try:
        record = create_entity(
            checker,
            entity_type,
            code=body.code,
            values=body.values,
            max_attempts=settings.max_generation_attempts,
        )
    except (InvalidFormatError, InvalidPrefixForTypeError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CodeDuplicationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return to_api_document(record)


@router.get("/entities/{identifier}", response_model=EntityDocument)
async def get_entity(
    identifier: str,
    entity_type: TypeDescriptor = Depends(get_entity_type),
    resolver: Resolver = Depends(get_resolver),
):
    """Get an entity of this type by its canonical identifier."""
    try:
        record = resolver.find_for_type(entity_type, identifier)
    except InvalidPrefixForTypeError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if record is None:
        raise HTTPException(status_code=404, detail="Entity not found")
    return to_api_document(record)
