"""Discovery and validation of mountpoints.

The daemon keeps one cache directory per mount under the cache root, named
after the escaped mountpoint. The directory names are the only record of
which mounts exist.
"""
import logging
import os
import shutil
from pathlib import Path

from pydantic import ValidationError

from odlauncher.errors import MalformedEscapeError
from odlauncher.models.mount import AuthTokens
from odlauncher.systemd.escape import escape_path, unescape_path
from odlauncher.systemd.types import LauncherDefaults

logger = logging.getLogger(__name__)


def list_known_mounts(cache_root: str | os.PathLike[str]) -> list[str]:
    """List mountpoints that have a cache directory and still exist.

    Returns:
        Sorted absolute mountpoint paths
    """
    try:
        with os.scandir(cache_root) as entries:
            names = [
                entry.name for entry in entries
                if not entry.name.startswith('.')
                and entry.is_dir(follow_symlinks=False)
            ]
    except FileNotFoundError:
        return []
    except OSError as e:
        logger.warning('Cannot read cache root %s: %s', cache_root, e)
        return []

    mounts = []
    for name in names:
        try:
            mountpoint = unescape_path(name)
        except MalformedEscapeError as e:
            logger.warning('Skipping cache directory %s: %s', name, e)
            continue

        if os.path.isdir(mountpoint):
            mounts.append(mountpoint)
        else:
            logger.debug('Skipping stale cache entry for %s', mountpoint)

    return sorted(mounts)


def is_valid_mount_candidate(path: str | os.PathLike[str] | None) -> bool:
    """Check that a path is an existing, empty directory.
    """
    if not path or not os.fspath(path):
        return False

    try:
        with os.scandir(path) as entries:
            return next(entries, None) is None
    except OSError:
        return False


def get_account_name(
    instance: str,
    cache_root: str | os.PathLike[str],
) -> str | None:
    """Read the signed-in account name for a mount instance.

    Returns:
        The account name, or None if the daemon has not stored one
    """
    token_file = Path(cache_root) / instance / LauncherDefaults.AUTH_TOKENS_FILE

    try:
        return AuthTokens.model_validate_json(token_file.read_text()).account
    except FileNotFoundError:
        return None
    except (OSError, ValueError, ValidationError) as e:
        logger.warning('Cannot read account from %s: %s', token_file, e)
        return None


def remove_mount_cache(
    mountpoint: str | os.PathLike[str],
    cache_root: str | os.PathLike[str],
) -> bool:
    """Delete the cache directory of a mount with everything in it.

    Returns:
        True if a cache directory was removed
    """
    cache_dir = Path(cache_root) / escape_path(mountpoint)
    if not cache_dir.is_dir():
        return False

    shutil.rmtree(cache_dir)
    logger.info('Removed cache directory %s', cache_dir)
    return True
