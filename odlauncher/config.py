import logging
import os
import sys
from pathlib import Path
from typing import Self

from pydantic import BaseModel, Field, field_validator
from systemd.journal import JournalHandler

from odlauncher.dbus.constants import ConnectionConfig
from odlauncher.systemd.escape import template_unit
from odlauncher.systemd.types import LauncherDefaults


def setup_logger() -> None:
    """Configure logging to use systemd journal.
    """
    app_logger = logging.getLogger('odlauncher')
    app_logger.setLevel(logging.DEBUG)

    journal_handler = JournalHandler(SYSLOG_IDENTIFIER='odlauncher')

    app_logger.addHandler(journal_handler)


def add_stderr_handler() -> None:
    """Mirror launcher logs to stderr.
    """
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(
        logging.Formatter('%(levelname)s %(name)s: %(message)s')
    )
    logging.getLogger('odlauncher').addHandler(stream_handler)


def default_cache_root(app_name: str = LauncherDefaults.APP_NAME) -> Path:
    """Return the daemon's cache root, honouring XDG_CACHE_HOME.
    """
    cache_home = os.environ.get('XDG_CACHE_HOME')
    if not cache_home:
        cache_home = str(Path.home() / '.cache')
    return Path(cache_home) / app_name


class LauncherConfig(BaseModel):
    """Runtime configuration of the launcher.

    Args:
        app_name: Name of the mount daemon
        unit_template: Template unit, e.g. onedriver@.service
        cache_root: Directory holding one cache directory per mount
        sentinel: File the daemon creates once a mount is ready
        poll_timeout: Seconds to wait for a mount to become available
        call_timeout: Seconds to wait for a reply from systemd
    """
    model_config = {'frozen': True}

    app_name: str = Field(LauncherDefaults.APP_NAME, min_length=1)
    unit_template: str = Field(LauncherDefaults.UNIT_TEMPLATE)
    cache_root: Path = Field(default_factory=default_cache_root)
    sentinel: str = Field(LauncherDefaults.SENTINEL_FILE, min_length=1)
    poll_timeout: float = Field(LauncherDefaults.POLL_TIMEOUT, gt=0)
    call_timeout: float = Field(ConnectionConfig.DEFAULT_CALL_TIMEOUT, gt=0)

    @field_validator('unit_template')
    @classmethod
    def validate_unit_template(cls, v: str) -> str:
        # raises InvalidInputError, a ValueError, for malformed templates
        template_unit(v, 'x')
        return v

    @field_validator('sentinel')
    @classmethod
    def validate_sentinel(cls, v: str) -> str:
        if '/' in v:
            raise ValueError('Sentinel must be a file name, not a path')
        return v

    @classmethod
    def from_environment(cls, **overrides) -> Self:
        """Build the configuration from the environment.

        Keyword arguments set to None are ignored, so CLI options can be
        passed through unconditionally.
        """
        values = {k: v for k, v in overrides.items() if v is not None}
        if 'cache_root' not in values:
            values['cache_root'] = default_cache_root(
                values.get('app_name', LauncherDefaults.APP_NAME)
            )
        return cls(**values)
