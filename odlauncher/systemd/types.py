from enum import StrEnum
from typing import Final, Self


class MountOperation(StrEnum):
    """Mount lifecycle operation types.
    """

    CREATE = 'create'
    MOUNT = 'mount'
    UNMOUNT = 'unmount'
    ENABLE = 'enable'
    DISABLE = 'disable'
    DELETE = 'delete'


class UnitFileState(StrEnum):
    """Systemd unit file states.
    """

    ENABLED = 'enabled'
    ENABLED_RUNTIME = 'enabled-runtime'
    LINKED = 'linked'
    LINKED_RUNTIME = 'linked-runtime'
    MASKED = 'masked'
    MASKED_RUNTIME = 'masked-runtime'
    STATIC = 'static'
    DISABLED = 'disabled'
    INDIRECT = 'indirect'
    INVALID = 'invalid'


class UnitActiveState(StrEnum):
    """Systemd unit active states.
    """

    ACTIVE = 'active'
    RELOADING = 'reloading'
    INACTIVE = 'inactive'
    FAILED = 'failed'
    ACTIVATING = 'activating'
    DEACTIVATING = 'deactivating'


class UnitState(StrEnum):
    """Coarse unit state reported to front ends.
    """

    NOT_LOADED = 'not-loaded'
    INACTIVE = 'inactive'
    ACTIVE = 'active'
    FAILED = 'failed'
    OTHER = 'other'

    @classmethod
    def from_active_state(cls, active_state: str) -> Self:
        """Collapse a systemd ActiveState value into a UnitState.
        """
        match active_state:
            case UnitActiveState.ACTIVE:
                return cls.ACTIVE
            case UnitActiveState.INACTIVE:
                return cls.INACTIVE
            case UnitActiveState.FAILED:
                return cls.FAILED
            case _:
                return cls.OTHER


class LauncherDefaults:
    """Defaults shared by the launcher and the mount daemon.
    """

    APP_NAME: Final[str] = 'onedriver'
    UNIT_TEMPLATE: Final[str] = 'onedriver@.service'
    # written by the daemon once the filesystem is ready
    SENTINEL_FILE: Final[str] = '.xdg-volume-info'
    AUTH_TOKENS_FILE: Final[str] = 'auth_tokens.json'
    POLL_INTERVAL: Final[float] = 0.1
    POLL_TIMEOUT: Final[float] = 120.0
