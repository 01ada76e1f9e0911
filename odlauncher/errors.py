class LauncherError(Exception):
    """Base exception for all odlauncher errors.
    """


class InvalidInputError(LauncherError, ValueError):
    """A path, unit name or template failed validation.
    """


class UnitNameError(InvalidInputError):
    """A unit name is not an instance of a template unit.
    """


class MalformedEscapeError(LauncherError, ValueError):
    """An escaped instance name contains an invalid escape sequence.
    """

    def __init__(self, value: str, position: int):
        """
        Args:
            value: The string being unescaped
            position: Index of the offending backslash
        """
        super().__init__(
            f'Malformed escape sequence at position {position} in {value!r}'
        )
        self.value = value
        self.position = position


class RemoteCallError(LauncherError):
    """A call to the systemd manager failed at the bus or transport level.
    """

    def __init__(self, message: str, error_name: str | None = None):
        """
        Args:
            message: Human readable description of the failure
            error_name: D-Bus error name, if the peer replied with one
        """
        super().__init__(message)
        self.error_name = error_name


class UnitNotFoundError(LauncherError):
    """The systemd manager does not know the requested unit.
    """

    def __init__(self, unit_name: str):
        super().__init__(f'Unit {unit_name} is not loaded')
        self.unit_name = unit_name
