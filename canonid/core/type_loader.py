"""Entity Type Loader — declares entity types and prefixes from YAML.

Example:

    entity_types:
      Account:
        prefix: a
      User:
        prefix: u
      Admin:
        parent: User      # inherits 'u' and User's store

Types may be listed in any order; parents are defined first.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

import yaml
from pydantic import BaseModel

from canonid.core.prefix_registry import PrefixRegistry, TypeDescriptor
from canonid.core.stores import BackingStore

logger = logging.getLogger(__name__)

StoreFactory = Callable[[str], BackingStore]


class EntityTypeDef(BaseModel):
    prefix: Optional[str] = None
    parent: Optional[str] = None
    description: Optional[str] = None


def parse_type_defs(yaml_content: str) -> dict[str, EntityTypeDef]:
    """Parse and validate type declarations from a YAML string."""
    raw = yaml.safe_load(yaml_content)
    if not isinstance(raw, dict):
        raise ValueError("Entity types YAML must be a mapping")

    defs = {}
    for name, tdef in (raw.get("entity_types") or {}).items():
        defs[name] = EntityTypeDef(**(tdef or {}))
    return defs


def _definition_order(defs: dict[str, EntityTypeDef]) -> list[str]:
    """Order type names so that every parent precedes its children."""
    ordered: list[str] = []
    placed: set[str] = set()
    remaining = list(defs)

    while remaining:
        progressed = False
        for name in list(remaining):
            parent = defs[name].parent
            if parent is None or parent in placed:
                ordered.append(name)
                placed.add(name)
                remaining.remove(name)
                progressed = True
        if not progressed:
            unknown = [n for n in remaining if defs[n].parent not in defs]
            if unknown:
                raise ValueError(
                    f"Entity '{unknown[0]}': parent '{defs[unknown[0]].parent}' "
                    f"not found in entity_types"
                )
            raise ValueError(f"Cyclic parent declarations among: {sorted(remaining)}")

    return ordered


def load_types_from_yaml(
    yaml_content: str,
    registry: PrefixRegistry,
    store_factory: StoreFactory,
) -> list[TypeDescriptor]:
    """Define every declared type in the registry.

    Types with their own prefix get their own store from ``store_factory``;
    inheriting types share their parent's.
    """
    defs = parse_type_defs(yaml_content)
    descriptors: dict[str, TypeDescriptor] = {}

    for name in _definition_order(defs):
        tdef = defs[name]
        parent = descriptors[tdef.parent] if tdef.parent else None
        store = store_factory(name) if tdef.prefix or parent is None else None
        descriptors[name] = registry.define_type(
            name, prefix=tdef.prefix, parent=parent, store=store
        )

    logger.info(f"Loaded {len(descriptors)} entity types")
    return list(descriptors.values())


def load_types(
    path: Path,
    registry: PrefixRegistry,
    store_factory: StoreFactory,
) -> list[TypeDescriptor]:
    """Load type declarations from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Entity types file not found: {path}")
    return load_types_from_yaml(path.read_text(), registry, store_factory)
