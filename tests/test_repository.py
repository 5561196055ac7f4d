"""Tests for reading repository state from the .git folder."""
import os

import pytest

from git_hop.errors import RepositoryNotFoundError, StoreCorruptError, UserInputError
from git_hop.repository import (
    BranchRecord,
    list_branch_names,
    locate_repository,
    read_branches,
    read_current_head,
)

from conftest import make_repo


class TestLocateRepository:
    def test_finds_repository_root(self, repo):
        assert locate_repository(str(repo)) == str(repo)

    def test_walks_up_from_subfolder(self, repo):
        nested = repo / 'src' / 'deep' / 'er'
        nested.mkdir(parents=True)
        assert locate_repository(str(nested)) == str(repo)

    def test_not_found(self, tmp_path):
        # The walk continues to / and must not find a repository on the way
        if any(os.path.isdir(os.path.join(parent, '.git')) for parent in [str(p) for p in tmp_path.parents]):
            pytest.skip('temporary folder lives inside a git repository')

        with pytest.raises(RepositoryNotFoundError) as error:
            locate_repository(str(tmp_path))
        assert isinstance(error.value, UserInputError)

    def test_git_file_is_not_a_repository_marker(self, tmp_path):
        make_repo(tmp_path, ['main'])
        worktree = tmp_path / 'wt'
        worktree.mkdir()
        (worktree / '.git').write_text('gitdir: elsewhere\n')
        assert locate_repository(str(worktree)) == str(tmp_path)


class TestListBranchNames:
    def test_nested_refs(self, repo):
        assert list_branch_names(str(repo)) == ['develop', 'feature/login', 'feature/search', 'fix/typo', 'main']

    def test_folders_sort_among_sibling_branches(self, tmp_path):
        make_repo(tmp_path, ['zeta', 'beta', 'alpha/one', 'alpha/deep/two', 'gamma/three'])
        assert list_branch_names(str(tmp_path)) == ['alpha/deep/two', 'alpha/one', 'beta', 'gamma/three', 'zeta']

    def test_packed_refs(self, repo):
        (repo / '.git' / 'packed-refs').write_text(
            '# pack-refs with: peeled fully-peeled sorted\n'
            '1111111111111111111111111111111111111111 refs/heads/main\n'
            '2222222222222222222222222222222222222222 refs/heads/old/release\n'
            '3333333333333333333333333333333333333333 refs/tags/v1.0\n'
            '^4444444444444444444444444444444444444444\n'
        )
        assert list_branch_names(str(repo)) == [
            'develop', 'feature/login', 'feature/search', 'fix/typo', 'main', 'old/release',
        ]

    def test_no_heads_folder(self, tmp_path):
        (tmp_path / '.git').mkdir()
        assert list_branch_names(str(tmp_path)) == []


class TestReadCurrentHead:
    def test_branch(self, repo):
        head = read_current_head(str(repo))
        assert not head.detached
        assert head.branch_name == 'main'
        assert head.sha is None

    def test_nested_branch(self, tmp_path):
        make_repo(tmp_path, ['feature/login'], head='ref: refs/heads/feature/login\n')
        assert read_current_head(str(tmp_path)).branch_name == 'feature/login'

    def test_detached(self, tmp_path):
        make_repo(tmp_path, ['main'], head='0123456789abcdef0123456789abcdef01234567\n')
        head = read_current_head(str(tmp_path))
        assert head.detached
        assert head.sha == '0123456'
        assert head.branch_name is None


class TestReadBranches:
    def test_merges_usage_and_reconciles(self, repo, store):
        store.record_switch('develop', 10)
        store.record_switch('deleted', 20)

        branches = read_branches(str(repo), store)

        assert BranchRecord('develop', 10) in branches
        assert BranchRecord('main', 0) in branches
        assert 'deleted' not in store.read()

    def test_malformed_record_is_reported_as_corrupt_store(self, repo, store):
        store.write({'main': 5})

        with pytest.raises(StoreCorruptError):
            read_branches(str(repo), store)
