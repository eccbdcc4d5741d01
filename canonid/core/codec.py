"""Canonical identifier grammar.

A canonical identifier is ``{prefix}-{code}``:

- prefix: one or more word characters (``\\w+``), owned by one entity type
- code:   characters from ALPHABET (``a-z0-9``), fixed length when generated

Provides:
- canonical / parse: format and split identifiers against the full grammar
- trim / matches_expected_prefix / is_valid_syntax: checks against a known prefix
- is_valid_trimmed_code: permissive syntax check for externally supplied codes
- PrefixGrammar: per-prefix precompiled patterns used by the registry
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from canonid.core.errors import InvalidFormatError, InvalidPrefixForTypeError

ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
SEPARATOR = "-"
MAX_TRIMMED_CODE_LENGTH = 255

PREFIX_PATTERN = re.compile(r"\w+", re.ASCII)
IDENTIFIER_PATTERN = re.compile(rf"(\w+){SEPARATOR}([{ALPHABET}]+)", re.ASCII)
TRIMMED_CODE_PATTERN = re.compile(r"\w+", re.ASCII)


@dataclass(frozen=True)
class PrefixGrammar:
    """Patterns for one prefix, compiled once and reused on every call."""

    prefix: str
    _head: re.Pattern = field(init=False, repr=False, compare=False)
    _syntax: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        escaped = re.escape(self.prefix)
        object.__setattr__(self, "_head", re.compile(rf"{escaped}{SEPARATOR}"))
        object.__setattr__(
            self, "_syntax", re.compile(rf"{escaped}{SEPARATOR}\w+", re.ASCII)
        )

    def matches(self, identifier: Optional[str]) -> bool:
        return bool(identifier) and self._head.match(identifier) is not None

    def trim(self, identifier: Optional[str]) -> str:
        """Strip ``{prefix}-`` from the identifier and return the code.

        Raises InvalidPrefixForTypeError if the identifier is empty or
        carries another prefix.
        """
        if identifier:
            m = self._head.match(identifier)
            if m:
                return identifier[m.end():]
        raise InvalidPrefixForTypeError(self.prefix, identifier)

    def is_valid_syntax(self, identifier: Optional[str]) -> bool:
        return bool(identifier) and self._syntax.match(identifier) is not None


@lru_cache(maxsize=256)
def grammar_for(prefix: str) -> PrefixGrammar:
    """Cached grammar for prefixes that are not held by a registry."""
    return PrefixGrammar(prefix)


def canonical(prefix: str, code: str) -> str:
    """Format ``{prefix}-{code}``."""
    if not prefix:
        raise InvalidFormatError("Identifier prefix must not be empty")
    return f"{prefix}{SEPARATOR}{code}"


def parse(identifier: Optional[str]) -> tuple[str, str]:
    """Split a canonical identifier into (prefix, code).

    The whole string must match; a code character outside ALPHABET makes
    the identifier invalid even when a separator is present.
    """
    m = IDENTIFIER_PATTERN.fullmatch(identifier) if identifier else None
    if m is None:
        raise InvalidFormatError(f"Invalid identifier syntax: {identifier!r}")
    return m.group(1), m.group(2)


def trim(expected_prefix: str, identifier: Optional[str]) -> str:
    return grammar_for(expected_prefix).trim(identifier)


def matches_expected_prefix(expected_prefix: str, identifier: Optional[str]) -> bool:
    return grammar_for(expected_prefix).matches(identifier)


def is_valid_syntax(expected_prefix: str, identifier: Optional[str]) -> bool:
    """True if the identifier is ``{expected_prefix}-`` followed by word characters."""
    return grammar_for(expected_prefix).is_valid_syntax(identifier)


def is_valid_trimmed_code(
    code: Optional[str], max_length: int = MAX_TRIMMED_CODE_LENGTH
) -> bool:
    """Permissive check for a bare code: word characters only, bounded length."""
    if not code:
        return False
    return TRIMMED_CODE_PATTERN.fullmatch(code) is not None and len(code) <= max_length


def is_valid_prefix(prefix: Optional[str]) -> bool:
    return bool(prefix) and PREFIX_PATTERN.fullmatch(prefix) is not None
