from typing import Any, Optional

__all__ = (
    "CacheError",
    "ConfigurationError",
    "ConnectionError",
    "ExecutionError",
    "ImproperConfigurationError",
    "MissingDependencyError",
    "SQLBuilderError",
    "SerializationError",
    "SparrowError",
)


class SparrowError(Exception):
    """Base exception class from which all sparrowsql exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SparrowError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class MissingDependencyError(SparrowError, ImportError):
    """Missing optional dependency.

    This exception is raised only when a module depends on a dependency that has not been installed.
    """

    def __init__(self, package: str, install_package: Optional[str] = None) -> None:
        super().__init__(
            f"Package {package!r} is not installed but required. You can install it by running "
            f"'pip install sparrowsql[{install_package or package}]' to install sparrowsql with the required extra "
            f"or 'pip install {install_package or package}' to install the package separately",
        )


class ImproperConfigurationError(SparrowError):
    """Improper Configuration error.

    Raised when the facade is used before it is configured, or when a connection,
    cache or builder argument is outside the supported set.
    """


ConfigurationError = ImproperConfigurationError


class SQLBuilderError(ImproperConfigurationError):
    """Issues Building or Generating SQL statements."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Issues building SQL statement."
        super().__init__(message)


class ConnectionError(SparrowError):  # noqa: A001
    """The backend rejected the credentials or could not be reached."""


class ExecutionError(SparrowError):
    """The backend rejected a SQL statement."""

    sql: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        """Initialize with the native error text and optional SQL context."""
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql


class CacheError(SparrowError):
    """A cache backend operation failed."""


class SerializationError(SparrowError):
    """Encoding or decoding of an object failed."""
