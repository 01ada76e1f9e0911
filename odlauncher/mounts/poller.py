import asyncio
import logging
import os

from odlauncher.systemd.types import LauncherDefaults

logger = logging.getLogger(__name__)


def _sentinel_present(mountpoint: str, sentinel: str) -> bool:
    """Scan the directory listing for the sentinel entry.

    Raises:
        OSError: If the directory cannot be opened
    """
    with os.scandir(mountpoint) as entries:
        return any(entry.name == sentinel for entry in entries)


async def await_available(
    mountpoint: str | os.PathLike[str],
    timeout: float | None = None,
    sentinel: str = LauncherDefaults.SENTINEL_FILE,
    interval: float = LauncherDefaults.POLL_INTERVAL,
) -> bool:
    """Wait until a mounted filesystem publishes its sentinel file.

    Never raises for a missing mount: the caller decides what an unavailable
    mount means. Cancel the awaiting task to stop early.

    Args:
        mountpoint: Directory the filesystem is mounted on
        timeout: Seconds to wait, ``None`` or a negative value for the default
        sentinel: Entry name that marks the filesystem as ready
        interval: Seconds between directory scans

    Returns:
        True if the sentinel appeared before the deadline
    """
    if timeout is None or timeout < 0:
        timeout = LauncherDefaults.POLL_TIMEOUT

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    while True:
        # a half-initialised FUSE mount can hang readdir, keep it off the loop
        scan_timeout = max(deadline - loop.time(), interval)
        try:
            present = await asyncio.wait_for(
                asyncio.to_thread(_sentinel_present, mountpoint, sentinel),
                scan_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning('Listing %s did not complete', mountpoint)
            break
        except OSError as e:
            logger.warning('Cannot poll %s: %s', mountpoint, e)
            return False

        if present:
            logger.debug('%s is available', mountpoint)
            return True

        if loop.time() >= deadline:
            break
        await asyncio.sleep(interval)

    logger.info(
        '%s did not become available within %.1f seconds',
        mountpoint,
        timeout,
    )
    return False
