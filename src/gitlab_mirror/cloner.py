#!/usr/bin/env python3
"""
GitLab Group Mirror

Recursively clone, or update, every Git repository of a GitLab group
hierarchy, mirroring groups and subgroups as local directories.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

import gitlab

from .api import GitLabApi
from .config import MirrorConfig, TransportPreference
from .exceptions import ConfigurationError
from .git_client import GitClient, GitPythonClient
from .manual import manual_targets
from .models import RunResult
from .progress import ProgressReporter
from .registry import DedupRegistry
from .synchronizer import RepositorySynchronizer
from .walker import GroupWalker


class GitLabCloner:
    """Main class for mirroring GitLab repositories."""

    def __init__(self, config: MirrorConfig, git_client: Optional[GitClient] = None,
                 api: Optional[GitLabApi] = None, reporter: Optional[ProgressReporter] = None):
        """
        Initialize the GitLab cloner.

        Args:
            config: Validated run configuration
            git_client: Git collaborator, GitPython by default
            api: GitLab listing client, built from the configuration by default
            reporter: Progress output, built from the configuration by default
        """
        self.config = config
        self.gitlab_url = config.gitlab_url.rstrip('/')
        self.destination_path = Path(config.destination).resolve()

        # Setup logging
        self.logger = self._setup_logging()

        self.api = api or GitLabApi(self.gitlab_url, config.token, per_page=config.per_page,
                                    timeout=config.api_timeout)
        self.git = git_client or GitPythonClient()
        self.reporter = reporter or ProgressReporter(quiet=config.quiet)

    def _setup_logging(self) -> logging.Logger:
        """Setup logging configuration."""
        logger = logging.getLogger('gitlab_mirror')

        # In quiet mode, only show WARNING and ERROR level logs
        log_level = logging.WARNING if self.config.quiet else logging.INFO
        logger.setLevel(log_level)

        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            logger.addHandler(handler)
        return logger

    def authenticate(self) -> str:
        """
        Test GitLab authentication.

        Returns:
            The authenticated user name

        Raises:
            ConfigurationError: if the token is rejected or GitLab is unreachable
        """
        try:
            gl = gitlab.Gitlab(self.gitlab_url, private_token=self.config.token,
                               timeout=self.config.api_timeout)
            gl.auth()
            username = gl.user.username
        except (gitlab.exceptions.GitlabError, OSError) as e:
            raise ConfigurationError(f"authentication failed: {e}") from e

        self.logger.info(f"Successfully authenticated as: {username}")
        return username

    def _new_synchronizer(self) -> RepositorySynchronizer:
        # One registry per run
        return RepositorySynchronizer(self.git, DedupRegistry(), self.config.transport)

    def clone_group_recursively(self, group_identifier: Optional[str] = None) -> RunResult:
        """
        Mirror a GitLab group and all of its subgroups.

        Args:
            group_identifier: Group ID or path, defaults to the configured group

        Returns:
            RunResult with every outcome of the run

        Raises:
            ConfigurationError: if authentication fails
            ApiError: if the root group cannot be resolved
        """
        group_identifier = group_identifier or self.config.group
        self.authenticate()

        if not self.config.dry_run:
            self.destination_path.mkdir(parents=True, exist_ok=True)

        self.logger.info(
            f"Starting recursive clone of group '{group_identifier}' to {self.destination_path} "
            f"using {self.config.transport.value.upper()}"
        )

        walker = GroupWalker(self.api, self._new_synchronizer(), reporter=self.reporter,
                             workers=self.config.workers, dry_run=self.config.dry_run)
        result = walker.walk(group_identifier, self.destination_path)
        self.reporter.print_summary(result)
        return result

    def clone_manual(self, repo_paths: Iterable[str]) -> RunResult:
        """
        Clone or update repositories named explicitly, without API discovery.

        Args:
            repo_paths: Repository paths relative to the configured group

        Returns:
            RunResult with one outcome per path
        """
        if self.config.transport == TransportPreference.HTTPS and not self.config.token:
            self.logger.warning("HTTPS cloning in manual mode may require authentication")

        synchronizer = self._new_synchronizer()
        result = RunResult()

        for repository, target_dir in manual_targets(self.gitlab_url, self.config.group,
                                                     self.destination_path, repo_paths):
            if self.config.dry_run:
                outcome = synchronizer.dry_run(repository, target_dir)
            else:
                target_dir.mkdir(parents=True, exist_ok=True)
                outcome = synchronizer.sync(repository, target_dir)
            result.add(outcome)
            self.reporter.outcome(outcome, 0)

        self.reporter.print_summary(result)
        return result
