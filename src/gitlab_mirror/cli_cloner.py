#!/usr/bin/env python3
"""
Command-line interface for GitLab Mirror.
"""

import sys
import logging
from typing import Optional

import click

from .cloner import GitLabCloner
from .config import ConfigFile, MirrorConfig, TransportPreference
from .exceptions import ConfigurationError, MirrorError
from .manual import parse_repository_paths, prompt_repository_paths

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def _pick(value, config_file: ConfigFile, key: str):
    """Command-line and environment values win over the config file."""
    return value if value is not None else config_file.get(key)


def build_config(config_file: ConfigFile, gitlab_url: Optional[str], token: Optional[str], group: Optional[str],
                 destination: Optional[str], https: bool, per_page: Optional[int], workers: Optional[int],
                 timeout: Optional[float], manual_mode: bool, dry_run: bool, quiet: bool) -> MirrorConfig:
    """Merge options with the config file and validate the result."""
    try:
        transport = TransportPreference.HTTPS if https else TransportPreference(
            str(config_file.get('transport')).lower())
        config = MirrorConfig(
            group=_pick(group, config_file, 'group'),
            token=_pick(token, config_file, 'token'),
            gitlab_url=_pick(gitlab_url, config_file, 'gitlab_url'),
            destination=_pick(destination, config_file, 'destination'),
            transport=transport,
            per_page=int(_pick(per_page, config_file, 'per_page')),
            api_timeout=float(_pick(timeout, config_file, 'api_timeout')),
            workers=int(_pick(workers, config_file, 'workers')),
            manual=manual_mode,
            dry_run=dry_run,
            quiet=quiet,
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid configuration value: {e}") from e
    config.validate()
    return config


def save_settings(config_file: ConfigFile, config: MirrorConfig) -> bool:
    """Store the effective options, except the token, as defaults for later runs."""
    config_file.set('gitlab_url', config.gitlab_url)
    if config.group is not None:
        config_file.set('group', config.group)
    config_file.set('destination', config.destination)
    config_file.set('transport', config.transport.value)
    config_file.set('per_page', config.per_page)
    config_file.set('api_timeout', config.api_timeout)
    config_file.set('workers', config.workers)
    return config_file.save_config()


@click.command()
@click.option('--gitlab-url', envvar='GITLAB_URL', help='GitLab base URL (default: https://gitlab.com)')
@click.option('--token', envvar='GITLAB_TOKEN', help='GitLab API access token')
@click.option('--group', envvar='GITLAB_GROUP', help='Group ID or group path to mirror')
@click.option('--destination', '-o', help='Local output directory (default: current directory)')
@click.option('--https', is_flag=True, help='Use HTTPS for git operations instead of SSH')
@click.option('--per-page', type=click.IntRange(1, 100), help='Page size for API listings (default: 100)')
@click.option('--workers', type=click.IntRange(min=1), help='Concurrent repository syncs within a group')
@click.option('--timeout', type=float, help='Timeout in seconds for each API request (default: 30)')
@click.option('--dry-run', is_flag=True, help='Show what would be cloned or updated without running git')
@click.option('--manual-mode', is_flag=True, help='Skip API discovery and clone the given repositories')
@click.option('--repo', 'repos', multiple=True, help='Repository path relative to the group (manual mode, repeatable)')
@click.option('--repos-file', type=click.File('r'), help='File with one repository path per line (manual mode)')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), help='JSON file with default option values')
@click.option('--save-config', is_flag=True, help='Store the effective options (except the token) in the config file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Quiet mode - show only errors and the summary')
def main(gitlab_url: Optional[str], token: Optional[str], group: Optional[str], destination: Optional[str],
         https: bool, per_page: Optional[int], workers: Optional[int], timeout: Optional[float], dry_run: bool,
         manual_mode: bool, repos: tuple, repos_file, config_path: Optional[str], save_config: bool,
         verbose: bool, quiet: bool):
    """
    Mirror every Git repository of a GitLab group hierarchy.

    All projects of the group and of its subgroups are cloned into
    directories mirroring the group structure. Repositories that already
    exist locally are updated with git pull. Archived projects are skipped.

    Manual mode:
    - Use --manual-mode to clone repositories without API discovery
    - Give paths with --repo or --repos-file, or enter them when prompted
    """
    try:
        config_file = ConfigFile(config_path)
        config = build_config(config_file, gitlab_url, token, group, destination, https,
                              per_page, workers, timeout, manual_mode, dry_run, quiet)
    except ConfigurationError as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    if save_config:
        if save_settings(config_file, config):
            click.secho(f"Saved options to {config_file.config_file}", fg='green')
        else:
            click.secho(f"Warning: could not write {config_file.config_file}", fg='yellow', err=True)

    cloner = GitLabCloner(config)
    if verbose:
        logging.getLogger('gitlab_mirror').setLevel(logging.DEBUG)

    try:
        if config.manual:
            lines = list(repos)
            if repos_file is not None:
                lines.extend(repos_file.read().splitlines())
            repo_paths = parse_repository_paths(lines) if lines else prompt_repository_paths()
            if not repo_paths:
                click.secho("No repositories specified", fg='red', err=True)
                sys.exit(EXIT_FAILURE)
            cloner.clone_manual(repo_paths)
        else:
            cloner.clone_group_recursively()
        sys.exit(EXIT_SUCCESS)
    except click.ClickException:
        raise
    except ConfigurationError as e:
        cloner.logger.error(str(e))
        sys.exit(EXIT_CONFIG_ERROR)
    except MirrorError as e:
        cloner.logger.error(f"Mirror aborted: {e}")
        sys.exit(EXIT_FAILURE)
    except KeyboardInterrupt:
        cloner.logger.info("Operation cancelled by user")
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        cloner.logger.error(f"Unexpected error: {e}")
        sys.exit(EXIT_FAILURE)


if __name__ == '__main__':
    main()
