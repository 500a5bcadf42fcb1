#!/usr/bin/env python3
"""Repository catalog built by discovery and consumed by later stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional


@dataclass(frozen=True)
class RepoDescriptor:
    """One repository known to the migration.

    In single-repo mode only ``full_name`` is populated.
    """
    full_name: str
    name: str = ""
    owner_login: str = ""
    primary_language: Optional[str] = None

    @classmethod
    def from_full_name(cls, full_name: str) -> "RepoDescriptor":
        return cls(full_name=full_name)

    @classmethod
    def from_github(cls, repo: object) -> "RepoDescriptor":
        """Build a descriptor from a PyGithub repository object."""
        owner = getattr(repo, "owner", None)
        owner_login = getattr(owner, "login", "") or ""
        name = getattr(repo, "name", "") or ""
        full_name = getattr(repo, "full_name", "") or f"{owner_login}/{name}"
        return cls(
            full_name=full_name,
            name=name,
            owner_login=owner_login,
            primary_language=getattr(repo, "language", None),
        )


class RepoCatalog:
    """Ordered set of descriptors keyed by ``full_name``."""

    def __init__(self) -> None:
        self._entries: Dict[str, RepoDescriptor] = {}

    def add(self, descriptor: RepoDescriptor) -> bool:
        """Append a descriptor; return False if its full name is already known."""
        if descriptor.full_name in self._entries:
            return False
        self._entries[descriptor.full_name] = descriptor
        return True

    def full_names(self) -> List[str]:
        return list(self._entries)

    def __iter__(self) -> Iterator[RepoDescriptor]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, full_name: object) -> bool:
        return full_name in self._entries


@dataclass(frozen=True)
class MigrationOutcome:
    """Result of forking a single descriptor."""
    descriptor: RepoDescriptor
    succeeded: bool
    reason: Optional[str] = None
    dest_full_name: Optional[str] = None

    @classmethod
    def success(
        cls, descriptor: RepoDescriptor, dest_full_name: str
    ) -> "MigrationOutcome":
        """Record a fork under the full name the platform actually gave it."""
        return cls(descriptor=descriptor, succeeded=True, dest_full_name=dest_full_name)

    @classmethod
    def failure(cls, descriptor: RepoDescriptor, reason: str) -> "MigrationOutcome":
        return cls(descriptor=descriptor, succeeded=False, reason=reason)


@dataclass
class StageReport:
    """Succeeded/failed tally for one stage of the run."""
    stage: str
    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    def record_success(self, target: str) -> None:
        self.succeeded.append(target)

    def record_failure(self, target: str, reason: str) -> None:
        self.failed[target] = reason

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)
