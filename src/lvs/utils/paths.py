import logging
import os
from pathlib import Path
from typing import Iterator, List, Union

from lvs.utils.errors import DiscoveryError

logger = logging.getLogger(__name__)

# Manifest names recognised per ecosystem
NPM_MANIFEST = "package-lock.json"
PYTHON_MANIFEST = "requirements.txt"
DEPENDENCY_CACHE_DIR = "node_modules"


def _list_dir(directory: str) -> List[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            return list(it)
    except OSError as e:
        raise DiscoveryError(f"cannot read {directory}: {e}") from e


def iter_manifests(
    root_dir: Union[str, Path],
    target_filename: str,
    excluded_dir_name: str = DEPENDENCY_CACHE_DIR,
) -> Iterator[Path]:
    """
    Walks ``root_dir`` depth-first and yields every file named ``target_filename``.

    Directories named ``excluded_dir_name`` are never entered. Unreadable
    directories are skipped without being reported. Symlinked directories are
    followed, but a directory whose real path was already visited is not
    entered twice, so link cycles terminate.

    Args:
        root_dir: Directory to start the search from.
        target_filename: Exact file name to look for (e.g. "package-lock.json").
        excluded_dir_name: Directory name pruned from the walk.

    Yields:
        Absolute paths of matching files, in no particular order.
    """
    root = os.path.abspath(os.fspath(root_dir))
    stack = [root]
    visited = set()

    while stack:
        current = stack.pop()

        real = os.path.realpath(current)
        if real in visited:
            logger.debug(f"Already visited {real}, skipping {current}")
            continue
        visited.add(real)

        try:
            entries = _list_dir(current)
        except DiscoveryError as e:
            logger.debug(f"Skipping unreadable directory: {e}")
            continue

        for entry in entries:
            full = os.path.join(current, entry.name)
            try:
                is_dir = entry.is_dir()
                is_file = entry.is_file()
            except OSError:
                continue

            if is_dir:
                if entry.name == excluded_dir_name:
                    continue
                stack.append(full)
            elif is_file and entry.name == target_filename:
                yield Path(full)


def find_manifests(
    root_dir: Union[str, Path],
    target_filename: str,
    excluded_dir_name: str = DEPENDENCY_CACHE_DIR,
) -> List[Path]:
    """List form of :func:`iter_manifests`."""
    return list(iter_manifests(root_dir, target_filename, excluded_dir_name))
