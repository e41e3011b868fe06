#!/usr/bin/env python3
"""
Clone-or-update logic for a single repository.
"""

import logging
from pathlib import Path

from .config import TransportPreference
from .exceptions import LocalConflict, TransportError
from .git_client import GitClient
from .models import ClonePlan, OutcomeStatus, Repository, SyncOutcome
from .registry import DedupRegistry

GIT_MARKER = '.git'


class RepositorySynchronizer:
    """Decides between clone, pull, skip and conflict for one repository."""

    def __init__(self, git_client: GitClient, registry: DedupRegistry,
                 transport: TransportPreference = TransportPreference.SSH):
        """
        Initialize the synchronizer.

        Args:
            git_client: Collaborator running clone and pull
            registry: Dedup registry owned by the current run
            transport: URL preference used for every clone of the run
        """
        self.git = git_client
        self.registry = registry
        self.transport = transport
        self.logger = logging.getLogger('gitlab_mirror.synchronizer')

    def plan(self, repository: Repository, group_dir: Path) -> ClonePlan:
        return ClonePlan(path=Path(group_dir) / repository.local_name,
                         url=repository.url_for(self.transport))

    def dry_run(self, repository: Repository, group_dir: Path) -> SyncOutcome:
        """Report what ``sync`` would do without claiming or calling git."""
        plan = self.plan(repository, group_dir)
        return SyncOutcome.skipped(repository, f"dry run: {plan.url} -> {plan.path}", path=plan.path)

    def sync(self, repository: Repository, group_dir: Path) -> SyncOutcome:
        """
        Clone or update one repository inside its group directory.

        The registry claim is taken before any git call and kept even if
        the clone or pull fails, so a repository is attempted once per run.

        Args:
            repository: Repository descriptor
            group_dir: Local directory of the owning group

        Returns:
            SyncOutcome for the repository
        """
        if not self.registry.try_claim(repository.id):
            self.logger.debug(f"{repository.display_name} already processed (id {repository.id})")
            return SyncOutcome.skipped(repository, "already processed this run")

        plan = self.plan(repository, group_dir)
        clone_path = plan.path

        if not clone_path.exists():
            self.logger.debug(f"Cloning {repository.display_name} from {plan.url}")
            result = self.git.clone(plan.url, clone_path)
            if result.success:
                return SyncOutcome(repository, OutcomeStatus.CLONED, path=clone_path)
            return SyncOutcome.failed(repository, "clone error",
                                      TransportError('clone', plan.url, result.detail), path=clone_path)

        if (clone_path / GIT_MARKER).exists():
            self.logger.debug(f"Repository already exists, pulling updates: {clone_path}")
            result = self.git.pull(clone_path)
            if result.success:
                return SyncOutcome(repository, OutcomeStatus.UPDATED, path=clone_path)
            return SyncOutcome.failed(repository, "pull error",
                                      TransportError('pull', str(clone_path), result.detail), path=clone_path)

        self.logger.debug(f"Directory {clone_path} exists but is not a git repository")
        return SyncOutcome.failed(repository, "path exists, not a repository",
                                  LocalConflict(clone_path), path=clone_path)
