"""Tests for the usage store."""
import json

import pytest

from git_hop.errors import StoreCorruptError, StoreWriteError
from git_hop.store import UsageStore


class TestEnsure:
    def test_creates_folder_data_file_and_exclude_entry(self, repo):
        store = UsageStore(str(repo))
        store.ensure()

        assert (repo / '.hop' / 'data.json').read_text() == '{}'
        assert (repo / '.git' / 'info' / 'exclude').read_text().splitlines()[-1] == '.hop'

    def test_existing_store_is_left_alone(self, store, repo):
        store.record_switch('main', 42)
        store.ensure()

        assert store.read() == {'main': {'name': 'main', 'lastSwitch': 42}}
        assert (repo / '.git' / 'info' / 'exclude').read_text().count('.hop') == 1


class TestReadWrite:
    def test_round_trip(self, store):
        data = {
            'main': {'name': 'main', 'lastSwitch': 1700000000000},
            'feature/login': {'name': 'feature/login', 'lastSwitch': 1},
        }
        store.write(data)
        assert store.read() == data

    def test_missing_file_reads_empty(self, tmp_path):
        assert UsageStore(str(tmp_path)).read() == {}

    def test_invalid_json(self, store):
        with open(store.path, 'w') as f:
            f.write('{not json')

        with pytest.raises(StoreCorruptError, match='is not valid'):
            store.read()

    def test_non_object_json(self, store):
        with open(store.path, 'w') as f:
            json.dump([1, 2], f)

        with pytest.raises(StoreCorruptError):
            store.read()

    @pytest.mark.parametrize('record', [5, None, {'name': 'main'}, {'name': 'main', 'lastSwitch': 'yesterday'}])
    def test_malformed_record(self, store, record):
        with open(store.path, 'w') as f:
            json.dump({'main': record}, f)

        with pytest.raises(StoreCorruptError):
            store.read()

    def test_write_failure(self, tmp_path):
        # The store folder was never created
        store = UsageStore(str(tmp_path))

        with pytest.raises(StoreWriteError, match='Could not write'):
            store.write({})


class TestUpdates:
    def test_record_switch_overwrites(self, store):
        store.record_switch('develop', 1)
        store.record_switch('develop', 2)
        assert store.read() == {'develop': {'name': 'develop', 'lastSwitch': 2}}

    def test_rename_moves_record(self, store):
        store.record_switch('a', 123)
        store.rename('a', 'b')
        assert store.read() == {'b': {'name': 'b', 'lastSwitch': 123}}

    def test_rename_untracked_branch_is_noop(self, store):
        store.record_switch('main', 5)
        store.rename('a', 'b')
        assert store.read() == {'main': {'name': 'main', 'lastSwitch': 5}}

    def test_delete(self, store):
        store.record_switch('a', 1)
        store.record_switch('b', 2)
        store.delete(['a', 'missing'])
        assert list(store.read()) == ['b']


class TestReconcile:
    def test_drops_missing_branches_and_persists(self, store):
        store.record_switch('main', 1)
        store.record_switch('gone', 2)

        clean = store.reconcile(['main', 'develop'])

        assert clean == {'main': {'name': 'main', 'lastSwitch': 1}}
        assert UsageStore(store.repo_root).read() == clean
