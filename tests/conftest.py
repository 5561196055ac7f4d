"""Shared test fixtures for git-hop.

Provides a fake repository tree (just enough of .git for reading refs and
HEAD) and an in-memory terminal stream.
"""
import io
import os

import pytest

from git_hop.store import UsageStore


def make_repo(root, branches, head='ref: refs/heads/main\n'):
    """Lay out a .git folder with one loose ref file per branch."""
    git_dir = root / '.git'
    (git_dir / 'refs' / 'heads').mkdir(parents=True)
    (git_dir / 'info').mkdir()
    (git_dir / 'HEAD').write_text(head)

    for name in branches:
        ref = git_dir / 'refs' / 'heads' / name
        ref.parent.mkdir(parents=True, exist_ok=True)
        ref.write_text('0123456789abcdef0123456789abcdef01234567\n')

    return root


@pytest.fixture
def repo(tmp_path):
    """Repository on main with a handful of branches."""
    return make_repo(tmp_path, ['main', 'develop', 'feature/login', 'feature/search', 'fix/typo'])


@pytest.fixture
def store(repo):
    usage_store = UsageStore(str(repo))
    usage_store.ensure()
    return usage_store


@pytest.fixture
def output():
    return io.StringIO()
