import asyncio
import logging
import threading
from typing import Self

from dbus_next.aio.message_bus import MessageBus
from dbus_next.constants import BusType
from dbus_next.errors import DBusError

from odlauncher.dbus.constants import ConnectionConfig, DBusConstants


class SingletonMeta(type):
    """Metaclass that creates a singleton instance.
    """

    _instances = {}
    _lock = threading.Lock()

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instances:
            with cls._lock:
                if cls not in cls._instances:
                    instance = super().__call__(*args, **kwargs)
                    cls._instances[cls] = instance
        return cls._instances[cls]


class DBusConnectionManager(metaclass=SingletonMeta):
    """Manages the session bus connection to the user's systemd instance.
    """

    def __init__(
        self,
        bus_type: BusType = BusType.SESSION,
        max_retries: int = ConnectionConfig.DEFAULT_MAX_RETRIES,
        initial_backoff: float = ConnectionConfig.DEFAULT_INITIAL_BACKOFF,
    ):
        """
        Initializes the DBusConnectionManager.

        Args:
            bus_type: The D-Bus bus type to connect to.
            max_retries: The maximum number of connection retries.
            initial_backoff: The initial backoff delay in seconds for retries.
        """
        # Prevent re-initialization of singleton
        if hasattr(self, '_initialized'):
            return

        self._logger = logging.getLogger(__name__)

        self._bus_type = bus_type
        self._bus: MessageBus | None = None
        self._max_retries = max_retries
        self._initial_backoff = initial_backoff
        self._connection_lock: asyncio.Lock | None = None
        self._initialized = True

    def _get_lock(self) -> asyncio.Lock:
        """Return the connection lock, created lazily inside the running loop.
        """
        if self._connection_lock is None:
            self._connection_lock = asyncio.Lock()
        return self._connection_lock

    async def connect(self) -> None:
        """Connects to the D-Bus with an exponential backoff retry mechanism.
        """
        async with self._get_lock():
            if self._is_already_connected():
                self._logger.debug('Already connected to D-Bus.')
                return

            await self._attempt_connection_with_retry()

    def _is_already_connected(self) -> bool:
        return self._bus is not None and self._bus.connected

    async def _attempt_connection_with_retry(self) -> None:
        retries = 0
        backoff = self._initial_backoff

        while retries < self._max_retries:
            if await self._try_single_connection_attempt(retries + 1):
                return

            retries += 1
            if retries < self._max_retries:
                self._logger.info('Retrying in %.2f seconds.', backoff)
                await asyncio.sleep(backoff)
                backoff *= ConnectionConfig.BACKOFF_MULTIPLIER

        self._logger.critical(
            'Could not connect to D-Bus after %d attempts.',
            self._max_retries,
        )
        raise ConnectionError(
            f'Failed to connect to D-Bus after {self._max_retries} attempts.'
        )

    async def _try_single_connection_attempt(
        self,
        attempt_number: int,
    ) -> bool:
        """Try a single connection attempt.

        Args:
            attempt_number: The current attempt number for logging.

        Returns:
            True if connection was successful, False otherwise.
        """
        try:
            self._logger.info(
                'Attempting to connect to D-Bus (attempt %d/%d)...',
                attempt_number,
                self._max_retries,
            )
            self._bus = await MessageBus(bus_type=self._bus_type).connect()
            self._logger.info('Successfully connected to D-Bus.')
            return True
        except (DBusError, OSError) as e:
            self._logger.warning('Failed to connect to D-Bus: %s', e)
            return False

    async def disconnect(self) -> None:
        """Disconnects from the D-Bus if connected.
        """
        async with self._get_lock():
            if self._bus:
                self._logger.info('Disconnecting from D-Bus.')
                self._bus.disconnect()
                self._bus = None
        # the lock is bound to the loop that is about to finish
        self._connection_lock = None

    async def get_bus(self) -> MessageBus:
        """Returns the MessageBus object, ensuring a connection is established.

        If the connection is lost, it will attempt to reconnect.

        Raises:
            ConnectionError: If a connection cannot be established.
        """
        if not await self.health_check():
            self._logger.warning(
                'D-Bus connection is down. Attempting to reconnect.'
            )
            await self.connect()

        if not self._bus:
            raise ConnectionError('Failed to get a valid D-Bus connection.')

        return self._bus

    async def health_check(self) -> bool:
        """Verifies the D-Bus connection status.
        """
        if not self._is_already_connected():
            return False

        try:
            introspection = await self._bus.introspect(  # type: ignore
                DBusConstants.SERVICE_NAME,
                DBusConstants.OBJECT_PATH,
            )
            proxy = self._bus.get_proxy_object(  # type: ignore
                DBusConstants.SERVICE_NAME,
                DBusConstants.OBJECT_PATH,
                introspection,
            )
            interface = proxy.get_interface(DBusConstants.INTERFACE)
            await interface.call_get_id()  # type: ignore
            return True
        except DBusError as e:
            self._logger.warning('D-Bus health check failed: %s', e)
            return False

    @classmethod
    def get_instance(cls) -> Self:
        """Returns the singleton instance of DBusConnectionManager.
        """
        return cls()
