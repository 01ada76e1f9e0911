from pydantic import BaseModel, Field

from odlauncher.systemd.types import MountOperation, UnitState


class MountInfo(BaseModel):
    """A known mountpoint and the state of its unit.
    """
    model_config = {'frozen': True}

    mountpoint: str = Field(..., min_length=1, description='Absolute path')
    display_path: str = Field(..., description='Path with home shortened')
    instance: str = Field(..., min_length=1, description='Unit instance name')
    unit_name: str = Field(..., min_length=1, description='Full unit name')
    state: UnitState = Field(..., description='Current unit state')
    enabled: bool = Field(False, description='Starts on login')
    account: str | None = Field(None, description='Signed-in account')


class MountOperationResult(BaseModel):
    """Result of a mount lifecycle operation.
    """
    model_config = {'frozen': True}

    success: bool = Field(...)
    mountpoint: str = Field(..., min_length=1)
    unit_name: str = Field(..., min_length=1)
    operation: MountOperation = Field(...)
    available: bool = Field(
        False,
        description='Sentinel observed after starting the unit',
    )
    message: str = Field('')


class AuthTokens(BaseModel):
    """The subset of the daemon's auth_tokens.json the launcher reads.
    """
    model_config = {'frozen': True, 'extra': 'ignore'}

    account: str | None = Field(None)
