"""Exceptions raised by the identifier core.

Every failure is a subclass of IdentifierError so callers can catch the
whole family; the format/prefix errors also subclass the builtin they
most resemble.
"""


class IdentifierError(Exception):
    """Base class for canonical identifier failures."""


class InvalidFormatError(IdentifierError, ValueError):
    """Input does not match the canonical identifier grammar."""


class UnknownPrefixError(IdentifierError, LookupError):
    """No entity type is registered for the prefix."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"Unknown identifier prefix: {prefix}")


class DuplicatePrefixRegistrationError(IdentifierError):
    """The prefix is already bound to an entity type."""

    def __init__(self, prefix: str, existing_type: str, new_type: str):
        self.prefix = prefix
        self.existing_type = existing_type
        self.new_type = new_type
        super().__init__(
            f"Found collision for prefix '{prefix}': already registered to "
            f"'{existing_type}', cannot register '{new_type}'"
        )


class PrefixReassignmentError(IdentifierError):
    """The type already owns a different prefix."""

    def __init__(self, type_name: str, current_prefix: str, new_prefix: str):
        self.type_name = type_name
        self.current_prefix = current_prefix
        self.new_prefix = new_prefix
        super().__init__(
            f"Type '{type_name}' already owns prefix '{current_prefix}', "
            f"cannot also register '{new_prefix}'"
        )


class UnsetPrefixError(IdentifierError):
    """Neither the type nor any of its ancestors declares a prefix."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Identifier prefix is unset for: {type_name}")


class InvalidPrefixForTypeError(IdentifierError, ValueError):
    """Identifier does not carry the prefix expected for the type."""

    def __init__(self, expected_prefix: str, identifier):
        self.expected_prefix = expected_prefix
        self.identifier = identifier
        super().__init__(
            f"Invalid or unsupported identifier: {identifier!r} "
            f"(expected prefix '{expected_prefix}-')"
        )


class CodeDuplicationError(IdentifierError):
    """A code already exists within the target type's scope."""

    def __init__(self, canonical_id: str):
        self.canonical_id = canonical_id
        super().__init__(f"Duplicate identifier: {canonical_id} already exists")
