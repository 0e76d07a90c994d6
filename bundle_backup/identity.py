"""Project identities used as the registry's uniqueness key."""

from __future__ import annotations

import os
from typing import Optional

from .errors import ConfigurationError


class Identity:
    """Canonical, case-normalized project name.

    Use :func:`create` or :func:`deduce_from_path` rather than instantiating
    the variants directly.
    """

    __slots__ = ()

    @property
    def known(self) -> bool:
        raise NotImplementedError


class KnownIdentity(Identity):
    """A resolved project name, lower-cased at construction."""

    __slots__ = ("_name",)

    def __init__(self, name: str):
        if not name:
            raise ConfigurationError("A known identity needs a non-empty name")
        self._name = name.lower()

    @property
    def known(self) -> bool:
        return True

    @property
    def name(self) -> str:
        return self._name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KnownIdentity):
            return False
        return self._name == other._name

    def __hash__(self) -> int:
        return hash(self._name)

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"KnownIdentity({self._name!r})"


class UnknownIdentity(Identity):
    """An unresolved project name.

    Never equal to anything, itself included, so two unresolved identities
    can not be mistaken for the same project.
    """

    __slots__ = ()

    @property
    def known(self) -> bool:
        return False

    def __eq__(self, other: object) -> bool:
        return False

    def __hash__(self) -> int:
        return id(self)

    def __str__(self) -> str:
        return ""

    def __repr__(self) -> str:
        return "UnknownIdentity()"


def create(value: Optional[str]) -> Identity:
    """Build an identity from user or store input.

    Args:
        value: Raw project name, possibly empty or None

    Returns:
        UnknownIdentity for empty input, KnownIdentity otherwise
    """
    if not value:
        return UnknownIdentity()
    return KnownIdentity(value)


def deduce_from_path(path: str) -> KnownIdentity:
    """Derive an identity from the last component of a working path.

    Trailing separators are ignored, so ``/code/MyProj/`` yields ``myproj``.

    Raises:
        ConfigurationError: If the path has no last component (empty or root)
    """
    name = os.path.basename(os.path.normpath(path)) if path else ""
    if not name or name in (os.curdir, os.pardir):
        raise ConfigurationError(
            f"Cannot deduce a project name from path: {path!r}"
        )
    return KnownIdentity(name)
