"""Tests for git command orchestration."""
import shutil
import subprocess

import pytest

from git_hop import git as git_module
from git_hop.errors import SubprocessLaunchError
from git_hop.git import GitOrchestrator, clean_lines, git_command
from git_hop.render import strip_escape_codes
from git_hop.store import UsageStore


class FakeRun:
    """Stands in for subprocess.run, recording every call."""

    def __init__(self, returncode=0, stdout='', stderr=''):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(cmd)
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def fake_run(monkeypatch):
    def install(**kwargs):
        run = FakeRun(**kwargs)
        monkeypatch.setattr(git_module.subprocess, 'run', run)
        return run
    return install


@pytest.fixture
def orchestrator(repo, store):
    return GitOrchestrator(str(repo), store, clock=lambda: 1000)


class TestGitCommand:
    def test_message_block(self, fake_run):
        fake_run(stdout='\nline one\n\nline two\n', stderr="Switched to branch 'x'\n")

        result = git_command('switch', ['x'])

        assert result.status == 0
        assert [strip_escape_codes(line) for line in result.message] == [
            '‣ git switch x', 'line one', 'line two', "Switched to branch 'x'",
        ]

    def test_status_indicator_color(self, fake_run):
        fake_run(returncode=0)
        assert git_command('switch', ['x']).message[0].startswith('\x1b[38;5;2m')

        fake_run(returncode=128)
        assert git_command('switch', ['x']).message[0].startswith('\x1b[38;5;1m')

    def test_nonzero_exit_is_not_an_error(self, fake_run):
        fake_run(returncode=1, stderr='fatal: invalid reference: nope\n')
        result = git_command('switch', ['nope'])
        assert result.status == 1
        assert result.stderr == 'fatal: invalid reference: nope\n'

    def test_launch_failure(self, monkeypatch):
        def missing(cmd, **kwargs):
            raise FileNotFoundError('git')

        monkeypatch.setattr(git_module.subprocess, 'run', missing)

        with pytest.raises(SubprocessLaunchError, match='git switch x'):
            git_command('switch', ['x'])

    def test_clean_lines(self):
        assert clean_lines('\n a\n\nb \n') == ['a', 'b']
        assert clean_lines('') == []


class TestOrchestrator:
    def test_switch_records_on_success(self, fake_run, orchestrator, store):
        run = fake_run(returncode=0)
        orchestrator.switch(['develop'])

        assert run.calls == [['git', 'switch', 'develop']]
        assert store.read() == {'develop': {'name': 'develop', 'lastSwitch': 1000}}

    def test_switch_failure_leaves_store(self, fake_run, orchestrator, store):
        fake_run(returncode=1)
        orchestrator.switch(['nope'])
        assert store.read() == {}

    def test_switch_with_options_does_not_record(self, fake_run, orchestrator, store):
        fake_run(returncode=0)
        orchestrator.switch(['--detach', 'HEAD~1'])
        orchestrator.switch(['-'])
        assert store.read() == {}

    def test_create(self, fake_run, orchestrator, store):
        run = fake_run(returncode=0)
        orchestrator.create(['topic', 'main'])

        assert run.calls == [['git', 'switch', '--create', 'topic', 'main']]
        assert store.read() == {'topic': {'name': 'topic', 'lastSwitch': 1000}}

    def test_rename(self, fake_run, orchestrator, store):
        store.record_switch('a', 7)
        run = fake_run(returncode=0)

        orchestrator.rename('a', 'b')

        assert run.calls == [['git', 'branch', '--move', 'a', 'b']]
        assert store.read() == {'b': {'name': 'b', 'lastSwitch': 7}}

    def test_rename_failure(self, fake_run, orchestrator, store):
        store.record_switch('a', 7)
        fake_run(returncode=128)
        orchestrator.rename('a', 'b')
        assert store.read() == {'a': {'name': 'a', 'lastSwitch': 7}}

    def test_delete(self, fake_run, orchestrator, store):
        store.record_switch('a', 1)
        store.record_switch('b', 2)
        run = fake_run(returncode=0)

        orchestrator.delete(['a', 'b'])

        assert run.calls == [['git', 'branch', '--delete', 'a', 'b']]
        assert store.read() == {}


@pytest.mark.skipif(shutil.which('git') is None, reason='git is not installed')
class TestWithRealGit:
    @pytest.fixture
    def real_repo(self, tmp_path):
        def git(*args):
            subprocess.run(['git', *args], cwd=tmp_path, check=True, capture_output=True)

        git('init', '-q', '-b', 'main')
        git('-c', 'user.name=Test', '-c', 'user.email=test@example.com', 'commit', '-q', '--allow-empty', '-m', 'init')
        git('branch', 'develop')
        return tmp_path

    @pytest.fixture
    def real_store(self, real_repo):
        usage_store = UsageStore(str(real_repo))
        usage_store.ensure()
        return usage_store

    def test_switch_existing_branch(self, real_repo, real_store):
        result = GitOrchestrator(str(real_repo), real_store, clock=lambda: 5).switch(['develop'])

        assert result.status == 0
        assert real_store.read() == {'develop': {'name': 'develop', 'lastSwitch': 5}}

    def test_switch_missing_branch(self, real_repo, real_store):
        result = GitOrchestrator(str(real_repo), real_store, clock=lambda: 5).switch(['nope'])

        assert result.status != 0
        assert real_store.read() == {}
