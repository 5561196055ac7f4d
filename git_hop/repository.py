"""Reading repository state straight from the .git directory."""
import logging
import os
from typing import List, NamedTuple, Optional

from git_hop.errors import RepositoryNotFoundError

logger = logging.getLogger(__name__)

GIT_FOLDER = '.git'
HEAD_REF_PREFIX = 'ref: refs/heads/'
HEADS_PREFIX = 'refs/heads/'
SHORT_SHA_LENGTH = 7


class BranchRecord(NamedTuple):
    name: str
    last_switch: int  # epoch millis, 0 when never recorded


class CurrentHead(NamedTuple):
    detached: bool
    sha: Optional[str]  # set only when detached
    branch_name: Optional[str]  # set only when not detached


def locate_repository(start: str) -> str:
    """Find the closest folder containing a .git directory.

    Walks from start up to the filesystem root.

    Args:
        start: Folder to start from, usually the working directory

    Returns:
        Absolute path of the repository root

    Raises:
        RepositoryNotFoundError: If no folder on the way has a .git directory
    """
    folder = os.path.abspath(start)

    while True:
        if os.path.isdir(os.path.join(folder, GIT_FOLDER)):
            logger.debug("Repository found at %s", folder)
            return folder

        parent = os.path.dirname(folder)
        if parent == folder:
            raise RepositoryNotFoundError(start)
        folder = parent


def _loose_branch_names(heads_dir: str) -> List[str]:
    """Names of loose refs, one file per branch under refs/heads.

    Depth first in name order, a folder's branches sit where the folder
    name sorts among its siblings.
    """
    names = []
    if not os.path.isdir(heads_dir):
        return names

    stack = [(heads_dir, '', True)]

    while stack:
        path, name, is_dir = stack.pop()
        if not is_dir:
            names.append(name)
            continue

        prefix = f"{name}/" if name else ''
        items = sorted(os.scandir(path), key=lambda item: item.name)

        # Pushed in reverse so they pop in name order
        for item in reversed(items):
            if item.is_file():
                stack.append((item.path, prefix + item.name, False))
            elif item.is_dir():
                stack.append((item.path, prefix + item.name, True))

    return names


def _packed_branch_names(packed_refs_path: str) -> List[str]:
    """Branch names listed in packed-refs."""
    if not os.path.exists(packed_refs_path):
        return []

    names = []
    with open(packed_refs_path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            # Skip the header and peeled tag lines
            if not line or line.startswith('#') or line.startswith('^'):
                continue
            parts = line.split(' ', 1)
            if len(parts) == 2 and parts[1].startswith(HEADS_PREFIX):
                names.append(parts[1][len(HEADS_PREFIX):])
    return names


def list_branch_names(repo_root: str) -> List[str]:
    """List every local branch of the repository.

    Loose refs come first, in directory walk order, followed by branches
    only present in packed-refs.

    Args:
        repo_root: Repository root folder

    Returns:
        Branch names such as "main" or "feature/login"
    """
    git_dir = os.path.join(repo_root, GIT_FOLDER)
    names = _loose_branch_names(os.path.join(git_dir, 'refs', 'heads'))

    known = set(names)
    for name in _packed_branch_names(os.path.join(git_dir, 'packed-refs')):
        if name not in known:
            names.append(name)
            known.add(name)

    return names


def read_current_head(repo_root: str) -> CurrentHead:
    """Read HEAD, either a branch reference or a detached commit."""
    with open(os.path.join(repo_root, GIT_FOLDER, 'HEAD'), 'r', encoding='utf-8') as f:
        head = f.read()

    if not head.startswith('ref:'):
        return CurrentHead(detached=True, sha=head[:SHORT_SHA_LENGTH].strip(), branch_name=None)

    return CurrentHead(detached=False, sha=None, branch_name=head[len(HEAD_REF_PREFIX):].strip())


def read_branches(repo_root: str, store) -> List[BranchRecord]:
    """Read branches with their last switch time.

    Also drops usage store entries of branches that no longer exist.

    Args:
        repo_root: Repository root folder
        store: UsageStore of the repository

    Returns:
        One record per branch
    """
    names = list_branch_names(repo_root)
    usage = store.reconcile(names)

    return [
        BranchRecord(name, usage[name]['lastSwitch'] if name in usage else 0)
        for name in names
    ]
