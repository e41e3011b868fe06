#!/usr/bin/env python3
"""
Unit tests for manual-entry mode.
"""

import unittest
from pathlib import Path

import click

from gitlab_mirror.manual import build_manual_repository, manual_targets, parse_repository_paths


class TestParseRepositoryPaths(unittest.TestCase):
    """Test cases for parse_repository_paths."""

    def test_normalizes_and_skips_blank_lines(self):
        lines = ['myproject', '', '  /subgroup/another-project/ ', '# comment', 'deep/nested/project.git']

        self.assertEqual(parse_repository_paths(lines),
                         ['myproject', 'subgroup/another-project', 'deep/nested/project'])

    def test_rejects_parent_traversal(self):
        with self.assertRaises(click.BadParameter):
            parse_repository_paths(['../outside'])


class TestBuildManualRepository(unittest.TestCase):
    """Test cases for synthesized repository descriptors."""

    def test_urls_are_synthesized_from_group_and_path(self):
        repo = build_manual_repository('https://gitlab.example.com:8443/', 'mygroup', 'sub/tool')

        self.assertEqual(repo.id, 'mygroup/sub/tool')
        self.assertEqual(repo.name, 'tool')
        self.assertEqual(repo.ssh_url, 'git@gitlab.example.com:mygroup/sub/tool.git')
        self.assertEqual(repo.http_url, 'https://gitlab.example.com:8443/mygroup/sub/tool.git')
        self.assertFalse(repo.archived)

    def test_targets_follow_nested_paths(self):
        targets = manual_targets('https://gitlab.com', 'mygroup', Path('/out'), ['app', 'sub/tool'])

        self.assertEqual([(repo.name, target) for repo, target in targets],
                         [('app', Path('/out')), ('tool', Path('/out/sub'))])


if __name__ == '__main__':
    unittest.main(verbosity=2)
