"""Identifier endpoints — parse, resolve and existence checks by canonical ID."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from canonid.api.deps import get_registry, get_resolver
from canonid.core.codec import parse
from canonid.core.entities import to_api_document
from canonid.core.errors import InvalidFormatError, UnknownPrefixError
from canonid.core.models import (
    EntityDocument,
    ExistsResponse,
    IdentifierParts,
    PrefixEntry,
    PrefixListResponse,
)
from canonid.core.prefix_registry import PrefixRegistry
from canonid.core.resolver import Resolver

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/prefixes", response_model=PrefixListResponse)
async def list_prefixes(registry: PrefixRegistry = Depends(get_registry)):
    """List registered prefixes, the types that own them and the types inheriting them."""
    inherited: dict[str, list[str]] = {}
    for t in registry.types():
        if t.prefix is None:
            inherited.setdefault(registry.effective_prefix(t), []).append(t.name)

    entries = [
        PrefixEntry(
            prefix=e.prefix,
            type_name=e.descriptor.name,
            inherited_by=inherited.get(e.prefix, []),
        )
        for e in registry.prefixes()
    ]
    return PrefixListResponse(prefixes=entries, total=len(entries))


@router.get("/ids/{identifier}/parse", response_model=IdentifierParts)
async def parse_identifier(identifier: str):
    """Split a canonical identifier into prefix and code."""
    try:
        prefix, code = parse(identifier)
    except InvalidFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return IdentifierParts(identifier=identifier, prefix=prefix, code=code)


@router.get("/ids/{identifier}/exists", response_model=ExistsResponse)
async def identifier_exists(identifier: str, resolver: Resolver = Depends(get_resolver)):
    """Check whether an entity exists for the identifier.

    A well-formed identifier with a known prefix and no match is not an error.
    """
    try:
        found = resolver.exists(identifier)
    except InvalidFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnknownPrefixError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ExistsResponse(identifier=identifier, exists=found)


@router.get("/ids/{identifier}", response_model=EntityDocument)
async def resolve_identifier(identifier: str, resolver: Resolver = Depends(get_resolver)):
    """Resolve a canonical identifier to its entity, whatever its type."""
    try:
        record = resolver.find(identifier)
    except InvalidFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnknownPrefixError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if record is None:
        raise HTTPException(status_code=404, detail="Entity not found")
    return to_api_document(record)
