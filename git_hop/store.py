"""Per-repository record of when each branch was last switched to."""
import json
import logging
import os
from typing import Any, Dict, Iterable

from git_hop.errors import StoreCorruptError, StoreWriteError

logger = logging.getLogger(__name__)

STORE_FOLDER = '.hop'
DATA_FILE = 'data.json'

UsageData = Dict[str, Dict[str, Any]]


def is_usage_record(record: Any) -> bool:
    """A record is an object with an integer lastSwitch."""
    if not isinstance(record, dict):
        return False
    last_switch = record.get('lastSwitch')
    return isinstance(last_switch, int) and not isinstance(last_switch, bool)


class UsageStore:
    """JSON file mapping branch name to {name, lastSwitch}.

    Lives in <repo>/.hop/data.json, excluded from git through
    .git/info/exclude. Every update reads and rewrites the whole file;
    concurrent writers are not coordinated, the last one wins.

    Attributes:
        repo_root: Repository root folder
        folder: Store folder inside the repository
        path: Full path of the data file
    """

    def __init__(self, repo_root: str):
        self.repo_root = repo_root
        self.folder = os.path.join(repo_root, STORE_FOLDER)
        self.path = os.path.join(self.folder, DATA_FILE)

    def ensure(self) -> None:
        """Create the store folder and data file when missing.

        A freshly created folder is also added to the repository's
        exclude list so it never shows up as untracked.
        """
        if not os.path.exists(self.folder):
            try:
                os.makedirs(self.folder)
                exclude_path = os.path.join(self.repo_root, '.git', 'info', 'exclude')
                os.makedirs(os.path.dirname(exclude_path), exist_ok=True)
                with open(exclude_path, 'a', encoding='utf-8') as f:
                    f.write(f"\n{STORE_FOLDER}")
            except OSError as e:
                raise StoreWriteError(self.folder) from e
            logger.debug("Created usage store folder %s", self.folder)

        if not os.path.exists(self.path):
            self.write({})

    def read(self) -> UsageData:
        """Read the whole store.

        Returns:
            Mapping of branch name to its record, empty if the file is missing

        Raises:
            StoreCorruptError: If the file is not a JSON object of branch records
        """
        if not os.path.exists(self.path):
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            raise StoreCorruptError(self.path) from e

        if not isinstance(data, dict) or not all(is_usage_record(record) for record in data.values()):
            raise StoreCorruptError(self.path)

        return data

    def write(self, data: UsageData) -> None:
        """Replace the whole store.

        Raises:
            StoreWriteError: If the file cannot be written
        """
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise StoreWriteError(self.path) from e
        logger.debug("Wrote %d branch record(s) to %s", len(data), self.path)

    def reconcile(self, branch_names: Iterable[str]) -> UsageData:
        """Drop records of branches that no longer exist and persist the result.

        Args:
            branch_names: Branches currently present in the repository

        Returns:
            The cleaned store contents
        """
        existing = set(branch_names)
        data = self.read()
        clean = {name: record for name, record in data.items() if name in existing}

        for name in data.keys() - clean.keys():
            logger.debug("Dropping record of missing branch %s", name)

        self.write(clean)
        return clean

    def record_switch(self, name: str, timestamp: int) -> None:
        """Set the last switch time of a branch, in epoch millis."""
        data = self.read()
        data[name] = {'name': name, 'lastSwitch': timestamp}
        self.write(data)

    def rename(self, current_name: str, new_name: str) -> None:
        """Move a branch record under a new name; untracked branches are left alone."""
        data = self.read()
        record = data.get(current_name)

        if record is None:
            return

        data[new_name] = {**record, 'name': new_name}
        del data[current_name]
        self.write(data)

    def delete(self, names: Iterable[str]) -> None:
        data = self.read()

        for name in names:
            data.pop(name, None)

        self.write(data)
