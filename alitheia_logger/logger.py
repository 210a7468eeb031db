"""
Logger Facade
=============
Named logger that forwards messages to the remote logging service.

Usage:
    from alitheia_logger import Logger

    log = Logger(Logger.NAME_SQOOSS_DATABASE)
    log.info("connection pool ready")
"""

from typing import List, Optional

from .transport.log_models import LogLevel
from .transport.remote_client import RemoteLoggerClient, get_remote_logger
from .utils.data_utils import validate_channel_name


class Logger:
    """Forwards debug/info/warn/error calls to a named remote logger channel"""

    NAME_SQOOSS = "sqooss"
    NAME_SQOOSS_SERVICE = "sqooss.service"
    NAME_SQOOSS_DATABASE = "sqooss.database"
    NAME_SQOOSS_SECURITY = "sqooss.security"
    NAME_SQOOSS_MESSAGING = "sqooss.messaging"
    NAME_SQOOSS_WEBSERVICES = "sqooss.webservices"
    NAME_SQOOSS_SCHEDULING = "sqooss.scheduler"
    NAME_SQOOSS_UPDATER = "sqooss.updater"
    NAME_SQOOSS_WEBADMIN = "sqooss.webadmin"
    NAME_SQOOSS_TDS = "sqooss.tds"
    NAME_SQOOSS_FDS = "sqooss.fds"
    NAME_SQOOSS_METRIC = "sqooss.metric"
    NAME_SQOOSS_TESTER = "sqooss.tester"

    __slots__ = ("_name", "_remote")

    def __init__(self, name: str = NAME_SQOOSS, remote: Optional[RemoteLoggerClient] = None):
        """
        Args:
            name (str): Channel to report under
            remote (RemoteLoggerClient): Remote logger handle; the shared
                client is used when omitted. The facade never closes it.
        """
        if not validate_channel_name(name):
            raise ValueError(f"Invalid logger name: {name!r}")

        self._name = name
        self._remote = remote if remote is not None else get_remote_logger()

    def debug(self, message: str) -> None:
        self._remote.log(self._name, LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self._remote.log(self._name, LogLevel.INFO, message)

    def warn(self, message: str) -> None:
        self._remote.log(self._name, LogLevel.WARN, message)

    # Same spelling as logging.Logger
    warning = warn

    def error(self, message: str) -> None:
        self._remote.log(self._name, LogLevel.ERROR, message)

    def name(self) -> str:
        """Channel this logger reports under"""
        return self._name

    @classmethod
    def known_channels(cls) -> List[str]:
        """All predefined channel names"""
        return [value for key, value in vars(cls).items() if key.startswith("NAME_")]

    def __repr__(self) -> str:
        return f"Logger({self._name!r})"
