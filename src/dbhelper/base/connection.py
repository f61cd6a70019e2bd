import importlib
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, PrivateAttr, SecretStr

from dbhelper.base.exceptions import ConnectionDriverMissing, ConnectionFailed
from dbhelper.base.interfaces import Driver

logger = logging.getLogger(__name__)

# Driver key -> "module:ClassName"
DRIVERS: Dict[str, str] = {
    "mysql": "dbhelper.db_implementations.mysql_driver:MySQLDriver",
    "sqlite": "dbhelper.db_implementations.sqlite_driver:SQLiteDriver",
}


def load_driver(key: str) -> Driver:
    """
    Instantiates the driver registered under the key.

    The driver module is imported on demand, so the database libraries of
    unused drivers never need to be installed.
    """
    if key not in DRIVERS:
        raise ConnectionDriverMissing(
            "The database driver is not available.",
            f"No driver is registered with the key [{key}]. "
            f"Available drivers are: [{', '.join(sorted(DRIVERS))}].",
        )

    module_name, class_name = DRIVERS[key].split(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConnectionDriverMissing(
            "The database driver is not available.",
            f"The driver [{key}] could not be loaded: {e}",
        ) from e

    return getattr(module, class_name)()


class ConnectionDescriptor(BaseModel):
    """
    Connection settings for one database, plus its lazily opened handle.

    The handle is created on the first call to ``connect()`` and reused
    until ``disconnect()`` is called.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str
    name: str
    host: str = "localhost"
    port: int = 3306
    username: str = "root"
    password: SecretStr = SecretStr("")
    init_command: str = ""
    driver: str = "mysql"

    _handle: Any = PrivateAttr(default=None)
    _driver: Optional[Driver] = PrivateAttr(default=None)

    def set_host(self, host: str) -> "ConnectionDescriptor":
        self.host = host
        return self

    def set_port(self, port: int) -> "ConnectionDescriptor":
        self.port = port
        return self

    def set_username(self, username: str) -> "ConnectionDescriptor":
        self.username = username
        return self

    def set_password(self, password: str) -> "ConnectionDescriptor":
        self.password = SecretStr(password)
        return self

    def set_init_command(self, command: str) -> "ConnectionDescriptor":
        self.init_command = command
        return self

    def get_password(self) -> str:
        return self.password.get_secret_value()

    def get_driver(self) -> Driver:
        if self._driver is None:
            self._driver = load_driver(self.driver)
        return self._driver

    def is_connected(self) -> bool:
        return self._handle is not None

    def connect(self) -> Any:
        if self._handle is not None:
            return self._handle

        driver = self.get_driver()
        logger.debug(f"Connecting to '{self.name}' as {self.describe()} using the {driver.name} driver.")

        try:
            self._handle = driver.connect(self)
        except driver.error_class as e:
            logger.error(f"Connection to {self.describe()} failed: {e}", exc_info=True)
            raise ConnectionFailed(
                "Could not connect to the database.",
                f"Tried connecting to {self.describe()}. Native error message: {e}",
            ) from e

        return self._handle

    def disconnect(self) -> None:
        if self._handle is None:
            return

        handle = self._handle
        self._handle = None
        self.get_driver().disconnect(handle)
        logger.debug(f"Disconnected from '{self.name}'.")

    def describe(self) -> str:
        """Identifies the connection for messages; never includes the password."""
        return f"{self.username}@{self.name} on {self.host}:{self.port}"
