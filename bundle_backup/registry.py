"""Project registry: entries, the shared backup root and the JSON store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import identity as identities
from .backup_path import default_backup_path, is_proper_backup_path
from .errors import ConfigurationError, StoreError
from .identity import Identity, KnownIdentity

logger = logging.getLogger(__name__)

EMPTY_REGISTRY_MESSAGE = "No projects registered for backup."

IdentityLike = Union[Identity, str, None]


def _as_identity(value: IdentityLike) -> Identity:
    if isinstance(value, Identity):
        return value
    return identities.create(value)


class ProjectRecord(BaseModel):
    """Stored form of a single project.

    Any ``backup_path`` found in the store is dropped here; the backup
    root is the only source of truth for artifact locations.
    """

    model_config = ConfigDict(extra="ignore")

    project: str = Field(description="Project name as registered")
    working_path: str = Field(description="Path to the git working tree")

    @field_validator("project", "working_path")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty names and paths."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v


class StoreDocument(BaseModel):
    """Top-level layout of the JSON project store."""

    default_backup_root: Optional[str] = Field(
        default=None, description="Directory receiving every project bundle"
    )
    to_backup: List[ProjectRecord] = Field(
        default_factory=list, description="Registered projects, in order"
    )


class Entry(BaseModel):
    """One project under backup."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    identity: KnownIdentity
    working_path: str
    backup_path: str

    @classmethod
    def create(
        cls,
        identity: IdentityLike,
        working_path: Optional[str],
        backup_path: Optional[str] = None,
        root_directory: Optional[str] = None,
    ) -> Entry:
        """
        Build a fully resolved entry from partial input.

        Args:
            identity: Project identity; unknown identities are deduced from
                the working path
            working_path: Path to the git working tree (required)
            backup_path: Explicit bundle path, used only if it ends with
                ``.git.bundle``
            root_directory: Backup root used to compute the default bundle path

        Returns:
            The new entry
        """
        if not working_path:
            raise ConfigurationError("A project entry requires a working path")

        resolved = _as_identity(identity)
        if not resolved.known:
            resolved = identities.deduce_from_path(working_path)

        if not is_proper_backup_path(backup_path):
            backup_path = default_backup_path(root_directory, resolved)

        return cls(identity=resolved, working_path=working_path, backup_path=backup_path)

    @classmethod
    def from_record(cls, record: ProjectRecord, root_directory: Optional[str]) -> Entry:
        return cls.create(
            KnownIdentity(record.project),
            record.working_path,
            root_directory=root_directory,
        )

    def to_record(self) -> ProjectRecord:
        return ProjectRecord(project=str(self.identity), working_path=self.working_path)

    def __str__(self) -> str:
        return (
            f"{self.identity}\n"
            f"  working path: {self.working_path}\n"
            f"  backup path:  {self.backup_path}\n"
        )


class Registry:
    """
    Ordered set of project entries sharing one backup root.

    The registry never persists on its own; callers save explicitly after a
    successful mutation. A single writer is assumed: nothing guards against
    two processes loading and saving the same store concurrently.
    """

    def __init__(self, root_directory: Optional[str] = None):
        self.root_directory = root_directory or ""
        self.entries: List[Entry] = []

    @classmethod
    def from_document(cls, data: Any) -> Registry:
        """Rebuild a registry from already-parsed store data."""
        try:
            document = StoreDocument.model_validate(data)
        except ValidationError as e:
            raise StoreError(f"Invalid project store layout: {e}") from e

        if not document.default_backup_root:
            raise ConfigurationError("Project store is missing default_backup_root")

        registry = cls(document.default_backup_root)
        for record in document.to_backup:
            entry = Entry.from_record(record, registry.root_directory)
            if registry.includes(entry.identity):
                logger.warning(f"Ignoring duplicate project in store: {entry.identity}")
                continue
            registry.entries.append(entry)
        return registry

    @classmethod
    def load(cls, source: Union[str, Path]) -> Registry:
        """Load the registry from a JSON store file."""
        store_file = Path(source)
        try:
            with open(store_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"Invalid JSON in project store {store_file}: {e}") from e
        except OSError as e:
            raise StoreError(f"Cannot read project store {store_file}: {e}") from e

        registry = cls.from_document(data)
        logger.debug(f"Loaded {len(registry)} projects from {store_file}")
        return registry

    @classmethod
    def load_or_create(
        cls, source: Union[str, Path], default_root: Optional[str] = None
    ) -> Registry:
        """Load the store, or start an empty registry if it does not exist yet."""
        if not Path(source).exists():
            logger.info(f"No project store at {source}, starting a new one")
            return cls(default_root)
        return cls.load(source)

    def to_document(self) -> Dict[str, Any]:
        document = StoreDocument(
            default_backup_root=self.root_directory,
            to_backup=[entry.to_record() for entry in self.entries],
        )
        return document.model_dump()

    def save(self, destination: Union[str, Path]) -> None:
        """Write the registry to a JSON store file, replacing its content."""
        store_file = Path(destination)
        try:
            store_file.parent.mkdir(parents=True, exist_ok=True)
            with open(store_file, "w", encoding="utf-8") as f:
                json.dump(self.to_document(), f, indent=2)
                f.write("\n")
        except OSError as e:
            raise StoreError(f"Cannot write project store {store_file}: {e}") from e
        logger.debug(f"Saved {len(self)} projects to {store_file}")

    def includes(self, identity: IdentityLike) -> bool:
        return self.find(identity) is not None

    def find(self, identity: IdentityLike) -> Optional[Entry]:
        target = identities.create(str(_as_identity(identity)))
        for entry in self.entries:
            if entry.identity == target:
                return entry
        return None

    def add(
        self,
        identity: IdentityLike,
        working_path: Optional[str],
        backup_path: Optional[str] = None,
    ) -> Union[Entry, bool]:
        """
        Register a project.

        Returns:
            The new entry, or False if a project with the same identity is
            already registered (the registry is left untouched)
        """
        candidate = Entry.create(identity, working_path, backup_path, self.root_directory)
        if self.includes(candidate.identity):
            return False
        self.entries.append(candidate)
        return candidate

    def remove(self, identity: IdentityLike) -> bool:
        """Unregister a project; returns False if it was not registered."""
        target = identities.create(str(_as_identity(identity)))
        remaining = [entry for entry in self.entries if entry.identity != target]
        if len(remaining) == len(self.entries):
            return False
        self.entries = remaining
        return True

    def describe(self) -> str:
        if not self.entries:
            return EMPTY_REGISTRY_MESSAGE
        return "".join(str(entry) for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)
