#!/usr/bin/env python3
"""
Manual-entry mode: repositories named by the user instead of discovered.

Paths are relative to the group (``project``, ``sub/project``) and are turned
into the same Repository descriptors the API produces, with synthesized
clone URLs.
"""

import posixpath
from pathlib import Path
from typing import Iterable, List, Tuple
from urllib.parse import urlparse

import click

from .models import Repository


def parse_repository_paths(lines: Iterable[str]) -> List[str]:
    """
    Normalize user-supplied repository paths.

    Blank lines and ``#`` comments are ignored; leading and trailing slashes
    and a trailing ``.git`` are removed.

    Raises:
        click.BadParameter: if a path tries to leave the output directory
    """
    paths = []
    for line in lines:
        path = line.split('#', 1)[0].strip().strip('/')
        if path.endswith('.git'):
            path = path[:-len('.git')]
        if not path:
            continue
        if '..' in path.split('/'):
            raise click.BadParameter(f"repository path must not contain '..': {path}")
        paths.append(path)
    return paths


def prompt_repository_paths() -> List[str]:
    """Ask for repository paths until an empty line is entered."""
    click.secho("Manual Mode: Clone repositories without API discovery", fg='green')
    click.echo("Enter repository paths (one per line, relative to the GitLab group):")
    click.echo("  myproject")
    click.echo("  subgroup/another-project")
    click.echo("Press Enter on an empty line to finish.")

    lines = []
    while True:
        line = click.prompt("Repository path", default='', show_default=False)
        if not line.strip():
            break
        lines.append(line)
    return parse_repository_paths(lines)


def build_manual_repository(gitlab_url: str, group: str, repo_path: str) -> Repository:
    """
    Synthesize a repository descriptor for ``<group>/<repo_path>``.

    Args:
        gitlab_url: Base URL of the GitLab instance
        group: Group path the repository path is relative to
        repo_path: Repository path inside the group

    Returns:
        Repository whose identity is its full path
    """
    gitlab_url = gitlab_url.rstrip('/')
    full_path = f"{group.strip('/')}/{repo_path}"
    host = urlparse(gitlab_url).hostname or gitlab_url
    return Repository(
        id=full_path,
        name=posixpath.basename(repo_path),
        ssh_url=f"git@{host}:{full_path}.git",
        http_url=f"{gitlab_url}/{full_path}.git",
        path_with_namespace=full_path,
    )


def manual_targets(gitlab_url: str, group: str, destination: Path,
                   repo_paths: Iterable[str]) -> List[Tuple[Repository, Path]]:
    """Pair each manual repository with the directory that receives it."""
    targets = []
    for repo_path in repo_paths:
        subdir = posixpath.dirname(repo_path)
        target_dir = Path(destination).joinpath(*subdir.split('/')) if subdir else Path(destination)
        targets.append((build_manual_repository(gitlab_url, group, repo_path), target_dir))
    return targets
