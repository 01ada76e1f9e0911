import os
from pathlib import Path


def escape_home(path: str) -> str:
    """Replace the user's home directory prefix with ``~``.
    """
    home = str(Path.home())
    if path == home:
        return '~'
    if path.startswith(home.rstrip('/') + '/'):
        return '~' + path[len(home.rstrip('/')):]
    return path


def unescape_home(path: str) -> str:
    """Expand a leading ``~`` back into the absolute home directory.
    """
    if path == '~':
        return str(Path.home())
    if path.startswith('~/'):
        return os.path.join(str(Path.home()), path[2:])
    return path
