#!/usr/bin/env python3
"""
Data model for groups, repositories and run outcomes.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import TransportPreference
from .exceptions import MirrorError


def sanitize_name(name: str) -> str:
    """
    Sanitize a group slug or project name for filesystem compatibility.

    Args:
        name: Original name from GitLab

    Returns:
        Sanitized name safe for filesystem use
    """
    sanitized = str(name).strip()

    # Path separators would escape the group directory
    for char in '<>:"|?*/\\':
        sanitized = sanitized.replace(char, '_')

    # Remove trailing dots and spaces (Windows restriction)
    sanitized = sanitized.rstrip('. ')

    if sanitized in ('', '.', '..'):
        return 'unnamed'
    return sanitized


@dataclass(frozen=True)
class Group:
    """A GitLab group or subgroup."""

    id: Any
    name: str
    slug: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Group':
        """Create a group from a ``GET /groups/:id`` payload."""
        name = data.get('name') or data.get('path') or str(data['id'])
        slug = data.get('path') or data.get('slug') or name
        return cls(id=data['id'], name=name, slug=sanitize_name(slug))


@dataclass(frozen=True)
class Repository:
    """A GitLab project as seen in a group listing."""

    id: Any
    name: str
    ssh_url: str
    http_url: str
    archived: bool = False
    path_with_namespace: str = ''

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Repository':
        """Create a repository from a project listing item."""
        return cls(
            id=data['id'],
            name=data.get('name') or data.get('path') or str(data['id']),
            ssh_url=data.get('ssh_url_to_repo') or data.get('ssh_url') or '',
            http_url=data.get('http_url_to_repo') or data.get('http_url') or '',
            archived=bool(data.get('archived', False)),
            path_with_namespace=data.get('path_with_namespace') or '',
        )

    @property
    def local_name(self) -> str:
        return sanitize_name(self.name)

    @property
    def display_name(self) -> str:
        return self.path_with_namespace or self.name

    def url_for(self, transport: TransportPreference) -> str:
        if transport == TransportPreference.HTTPS:
            return self.http_url
        return self.ssh_url


@dataclass(frozen=True)
class ClonePlan:
    """Where a repository goes and which URL it is fetched from."""

    path: Path
    url: str


class OutcomeStatus(Enum):
    """Result of handling one repository."""
    CLONED = "cloned"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class SyncOutcome:
    """Outcome of a single repository within a run."""

    repository: Repository
    status: OutcomeStatus
    reason: Optional[str] = None
    path: Optional[Path] = None
    error: Optional[MirrorError] = None

    @classmethod
    def skipped(cls, repository: Repository, reason: str, path: Optional[Path] = None) -> 'SyncOutcome':
        return cls(repository, OutcomeStatus.SKIPPED, reason=reason, path=path)

    @classmethod
    def failed(cls, repository: Repository, reason: str, error: MirrorError,
               path: Optional[Path] = None) -> 'SyncOutcome':
        return cls(repository, OutcomeStatus.FAILED, reason=reason, path=path, error=error)

    def describe(self) -> str:
        text = f"{self.status.value}: {self.repository.display_name}"
        if self.reason:
            text += f" ({self.reason})"
        return text


@dataclass
class GroupFailure:
    """A group whose lookup or listing failed during the walk."""

    group_id: Any
    stage: str
    error: MirrorError

    def describe(self) -> str:
        return f"group {self.group_id} ({self.stage}): {self.error}"


@dataclass
class RunResult:
    """Everything that happened during one run."""

    outcomes: List[SyncOutcome] = field(default_factory=list)
    group_failures: List[GroupFailure] = field(default_factory=list)
    groups_processed: int = 0

    def add(self, outcome: SyncOutcome) -> None:
        self.outcomes.append(outcome)

    def record_group_failure(self, group_id: Any, stage: str, error: MirrorError) -> GroupFailure:
        failure = GroupFailure(group_id, stage, error)
        self.group_failures.append(failure)
        return failure

    def counts(self) -> Dict[OutcomeStatus, int]:
        counter = Counter(outcome.status for outcome in self.outcomes)
        return {status: counter.get(status, 0) for status in OutcomeStatus}

    def with_status(self, status: OutcomeStatus) -> List[SyncOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == status]

    @property
    def failed(self) -> List[SyncOutcome]:
        return self.with_status(OutcomeStatus.FAILED)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed or self.group_failures)
