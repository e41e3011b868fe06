#!/usr/bin/env python3
"""
Depth-first traversal of a GitLab group hierarchy.

The group graph is assumed to be a tree, as GitLab guarantees; no cycle
detection is performed.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, List, Optional

from .api import GitLabApi
from .exceptions import ApiError, LocalConflict, MirrorError
from .models import Group, Repository, RunResult, SyncOutcome
from .progress import ProgressReporter
from .synchronizer import RepositorySynchronizer


class GroupWalker:
    """Walks a group tree, syncing each group's repositories before its subgroups."""

    def __init__(self, api: GitLabApi, synchronizer: RepositorySynchronizer,
                 reporter: Optional[ProgressReporter] = None, workers: int = 1, dry_run: bool = False):
        """
        Initialize the walker.

        Args:
            api: Source of group metadata and listings
            synchronizer: Handles each non-archived repository
            reporter: Progress output, defaults to a quiet reporter
            workers: Concurrent repository syncs within one group
            dry_run: Report clone plans without touching git or the registry
        """
        self.api = api
        self.synchronizer = synchronizer
        self.reporter = reporter or ProgressReporter(quiet=True)
        self.workers = max(1, workers)
        self.dry_run = dry_run
        self.logger = logging.getLogger('gitlab_mirror.walker')

    def walk(self, group_id: Any, base_path: Path) -> RunResult:
        """
        Mirror a group and all of its descendants under ``base_path``.

        Args:
            group_id: Root group ID or full path
            base_path: Directory receiving the root group's directory

        Returns:
            RunResult with every repository outcome and group failure

        Raises:
            ApiError: if the root group cannot be resolved
            LocalConflict: if the root group directory cannot be created
        """
        result = RunResult()

        # Work items are (group id, parent directory, depth)
        stack = [(group_id, Path(base_path), 0)]

        while stack:
            current_id, parent_path, depth = stack.pop()

            try:
                group = self.api.get_group(current_id)
            except ApiError as e:
                if depth == 0:
                    self.logger.error(f"Failed to get group '{current_id}': {e}")
                    raise
                self._record_failure(result, current_id, 'lookup', e, depth)
                continue

            self.reporter.group_started(group, depth)
            self.logger.debug(f"Processing group: {group.name} (ID: {group.id})")

            group_path = parent_path / group.slug
            if not self.dry_run:
                try:
                    group_path.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    error = LocalConflict(group_path, f"cannot create directory {group_path}: {e}")
                    if depth == 0:
                        raise error from e
                    self._record_failure(result, group.id, 'directory', error, depth)
                    continue
            result.groups_processed += 1

            self._process_projects(group, group_path, depth, result)

            subgroup_ids = self._list_subgroups(group, depth, result)
            # Reversed so the first listed subgroup is popped first
            for subgroup_id in reversed(subgroup_ids):
                stack.append((subgroup_id, group_path, depth + 1))

        return result

    def _record_failure(self, result: RunResult, group_id: Any, stage: str, error: MirrorError, depth: int) -> None:
        self.logger.debug(f"Error processing group '{group_id}' ({stage}): {error}")
        result.record_group_failure(group_id, stage, error)
        self.reporter.group_failed(group_id, stage, error, depth)

    def _list_subgroups(self, group: Group, depth: int, result: RunResult) -> List[Any]:
        try:
            subgroup_ids = self.api.list_subgroups(group.id)
        except ApiError as e:
            self._record_failure(result, group.id, 'subgroups', e, depth)
            return []
        self.logger.debug(f"Found {len(subgroup_ids)} subgroups in group '{group.name}'")
        return subgroup_ids

    def _process_projects(self, group: Group, group_path: Path, depth: int, result: RunResult) -> None:
        try:
            projects = self.api.list_projects(group.id)
        except ApiError as e:
            self._record_failure(result, group.id, 'projects', e, depth)
            return

        self.logger.debug(f"Found {len(projects)} projects in group '{group.name}'")

        if self.workers > 1 and len(projects) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                # map() yields in listing order
                for outcome in executor.map(lambda project: self._handle_project(project, group_path), projects):
                    self._report(outcome, depth, result)
        else:
            for project in projects:
                self._report(self._handle_project(project, group_path), depth, result)

    def _handle_project(self, project: Repository, group_path: Path) -> SyncOutcome:
        if project.archived:
            return SyncOutcome.skipped(project, "archived")
        if self.dry_run:
            return self.synchronizer.dry_run(project, group_path)
        return self.synchronizer.sync(project, group_path)

    def _report(self, outcome: SyncOutcome, depth: int, result: RunResult) -> None:
        result.add(outcome)
        self.reporter.outcome(outcome, depth)
