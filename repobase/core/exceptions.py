from __future__ import annotations

from typing import Iterable, Tuple


class RepositoryError(Exception):
    """
    Base exception for all repository construction and access failures.
    """

    pass


class UnknownProperty(RepositoryError, AttributeError):
    """
    Raised when a name does not refer to a declared field, or refers to a
    hidden one through the public read path.

    Hidden and nonexistent fields are reported the same way so callers
    cannot probe for hidden data.
    """

    def __init__(self, property_name: str) -> None:
        super().__init__(f"Unknown property: {property_name}.")
        self.property_name = property_name


class UnknownSetter(RepositoryError):
    """
    Raised in strict mode when an input value targets a field that has no
    setter hook.
    """

    def __init__(self, setter: str) -> None:
        super().__init__(f"Setter missing: {setter}.")
        self.setter = setter


class DuplicateProperties(RepositoryError):
    """
    Raised when an optional field and a required-convention field share the
    same logical name.
    """

    def __init__(self, names: Iterable[str]) -> None:
        self.names: Tuple[str, ...] = tuple(names)
        super().__init__(
            "Please ensure that you do not have optional and required properties "
            f"of the same name: {', '.join(self.names)}."
        )


class EmptyRequirements(RepositoryError):
    """
    Raised when required fields are still empty after defaults are applied.

    ``missing`` lists every empty required field, not just the first one.
    """

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing: Tuple[str, ...] = tuple(missing)
        noun = "property" if len(self.missing) == 1 else "properties"
        super().__init__(
            f"Please be sure to provide values for the following {noun}:  "
            + ", ".join(self.missing)
        )


class InvalidValue(RepositoryError, ValueError):
    """
    Raised by setter hooks that reject a value, and for constructor input
    that is not a mapping.
    """

    pass


class ReadOnlyProperty(RepositoryError, AttributeError):
    """
    Raised when something tries to assign or delete a field after
    construction has finished.
    """

    def __init__(self, property_name: str) -> None:
        super().__init__(f"Read-only property: {property_name}.")
        self.property_name = property_name


class RepositoryConfigurationError(RepositoryError):
    """
    Raised when a repository class or its configuration is invalid.
    """

    pass
