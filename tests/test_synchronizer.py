#!/usr/bin/env python3
"""
Unit tests for the dedup registry and the repository synchronizer.
"""

import shutil
import tempfile
import threading
import unittest
from pathlib import Path

from gitlab_mirror.config import TransportPreference
from gitlab_mirror.exceptions import LocalConflict, TransportError
from gitlab_mirror.models import OutcomeStatus, Repository
from gitlab_mirror.registry import DedupRegistry
from gitlab_mirror.synchronizer import RepositorySynchronizer

from fakes import FakeGitClient, project


class TestDedupRegistry(unittest.TestCase):
    """Test cases for DedupRegistry."""

    def test_claim_once(self):
        registry = DedupRegistry()

        self.assertTrue(registry.try_claim(1))
        self.assertFalse(registry.try_claim(1))
        self.assertTrue(registry.try_claim(2))
        self.assertIn(1, registry)
        self.assertEqual(len(registry), 2)

    def test_concurrent_claims_grant_exactly_one(self):
        registry = DedupRegistry()
        granted = []
        barrier = threading.Barrier(16)

        def claim():
            barrier.wait()
            if registry.try_claim('org/svc'):
                granted.append(True)

        threads = [threading.Thread(target=claim) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(granted), 1)


class TestRepositorySynchronizer(unittest.TestCase):
    """Test cases for RepositorySynchronizer."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.git = FakeGitClient()
        self.registry = DedupRegistry()
        self.synchronizer = RepositorySynchronizer(self.git, self.registry)
        self.repo = Repository.from_api(project(10, 'svc'))

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_clone_when_path_missing(self):
        outcome = self.synchronizer.sync(self.repo, self.temp_dir)

        self.assertEqual(outcome.status, OutcomeStatus.CLONED)
        self.assertEqual(outcome.path, self.temp_dir / 'svc')
        self.assertEqual(self.git.clones, [('git@gitlab.example.com:org/svc.git', self.temp_dir / 'svc')])
        self.assertIn(10, self.registry)

    def test_https_transport_selects_http_url(self):
        synchronizer = RepositorySynchronizer(self.git, self.registry, TransportPreference.HTTPS)

        synchronizer.sync(self.repo, self.temp_dir)

        self.assertEqual(self.git.clones[0][0], 'https://gitlab.example.com/org/svc.git')

    def test_pull_when_git_marker_present(self):
        (self.temp_dir / 'svc' / '.git').mkdir(parents=True)

        outcome = self.synchronizer.sync(self.repo, self.temp_dir)

        self.assertEqual(outcome.status, OutcomeStatus.UPDATED)
        self.assertEqual(self.git.pulls, [self.temp_dir / 'svc'])
        self.assertEqual(self.git.clones, [])

    def test_existing_non_repository_is_conflict(self):
        (self.temp_dir / 'svc').mkdir()
        (self.temp_dir / 'svc' / 'notes.txt').write_text('keep me')

        outcome = self.synchronizer.sync(self.repo, self.temp_dir)

        self.assertEqual(outcome.status, OutcomeStatus.FAILED)
        self.assertEqual(outcome.reason, 'path exists, not a repository')
        self.assertIsInstance(outcome.error, LocalConflict)
        self.assertEqual(self.git.clones, [])
        self.assertEqual(self.git.pulls, [])
        self.assertEqual((self.temp_dir / 'svc' / 'notes.txt').read_text(), 'keep me')

    def test_second_sync_of_same_id_is_skipped(self):
        self.synchronizer.sync(self.repo, self.temp_dir)

        outcome = self.synchronizer.sync(self.repo, self.temp_dir / 'elsewhere')

        self.assertEqual(outcome.status, OutcomeStatus.SKIPPED)
        self.assertEqual(outcome.reason, 'already processed this run')
        self.assertEqual(len(self.git.clones), 1)

    def test_failed_clone_keeps_claim(self):
        git = FakeGitClient(failing_urls={'git@gitlab.example.com:org/svc.git'})
        synchronizer = RepositorySynchronizer(git, self.registry)

        first = synchronizer.sync(self.repo, self.temp_dir)
        second = synchronizer.sync(self.repo, self.temp_dir)

        self.assertEqual(first.status, OutcomeStatus.FAILED)
        self.assertEqual(first.reason, 'clone error')
        self.assertIsInstance(first.error, TransportError)
        self.assertIn('Repository not found', str(first.error))
        self.assertEqual(second.status, OutcomeStatus.SKIPPED)
        self.assertEqual(len(git.clones), 1)

    def test_failed_pull_is_reported(self):
        (self.temp_dir / 'svc' / '.git').mkdir(parents=True)
        synchronizer = RepositorySynchronizer(FakeGitClient(failing_pulls={'svc'}), self.registry)

        outcome = synchronizer.sync(self.repo, self.temp_dir)

        self.assertEqual(outcome.status, OutcomeStatus.FAILED)
        self.assertEqual(outcome.reason, 'pull error')
        self.assertEqual(outcome.error.operation, 'pull')

    def test_dry_run_touches_nothing(self):
        outcome = self.synchronizer.dry_run(self.repo, self.temp_dir)

        self.assertEqual(outcome.status, OutcomeStatus.SKIPPED)
        self.assertEqual(outcome.path, self.temp_dir / 'svc')
        self.assertEqual(self.git.clones, [])
        self.assertNotIn(10, self.registry)

    def test_unsafe_name_stays_inside_group_dir(self):
        repo = Repository.from_api(project(11, 'tools: "cli"'))

        plan = self.synchronizer.plan(repo, self.temp_dir)

        self.assertEqual(plan.path.parent, self.temp_dir)
        self.assertEqual(plan.path.name, 'tools_ _cli_')


if __name__ == '__main__':
    unittest.main(verbosity=2)
