from odlauncher.mounts.paths import escape_home, unescape_home
from odlauncher.mounts.poller import await_available
from odlauncher.mounts.registry import (
    get_account_name,
    is_valid_mount_candidate,
    list_known_mounts,
    remove_mount_cache,
)

__all__ = [
    'await_available',
    'escape_home',
    'get_account_name',
    'is_valid_mount_candidate',
    'list_known_mounts',
    'remove_mount_cache',
    'unescape_home',
]
