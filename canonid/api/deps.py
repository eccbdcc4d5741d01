"""FastAPI dependencies for registry access and entity type lookup."""

from fastapi import Depends, HTTPException, Path, Request

from canonid.core.collision import CollisionChecker
from canonid.core.prefix_registry import PrefixRegistry, TypeDescriptor
from canonid.core.resolver import Resolver


async def get_registry(request: Request) -> PrefixRegistry:
    return request.app.state.registry


async def get_resolver(registry: PrefixRegistry = Depends(get_registry)) -> Resolver:
    return Resolver(registry)


async def get_checker(registry: PrefixRegistry = Depends(get_registry)) -> CollisionChecker:
    return CollisionChecker(registry)


async def get_entity_type(
    type_name: str = Path(..., description="Entity type name", min_length=1, max_length=64),
    registry: PrefixRegistry = Depends(get_registry),
) -> TypeDescriptor:
    """Resolve the entity type named in the URL path.

    Raises 404 if no such type is defined.
    """
    try:
        return registry.get_type(type_name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Entity type '{type_name}' not found")
