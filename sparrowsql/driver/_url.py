"""Connection descriptors and URL parsing."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final, Optional
from urllib.parse import unquote, urlsplit

from sparrowsql.driver._common import DriverKind
from sparrowsql.exceptions import ImproperConfigurationError

__all__ = ("FILE_SCHEMES", "SCHEME_KINDS", "ConnectionDescriptor", "parse_connection_url")

SCHEME_KINDS: Final[dict[str, DriverKind]] = {
    "sqlite": DriverKind.SQLITE,
    "sqlite3": DriverKind.SQLITE,
    "pgsql": DriverKind.PGSQL,
    "postgres": DriverKind.PGSQL,
    "postgresql": DriverKind.PGSQL,
    "mysql": DriverKind.MYSQL,
    "mysqli": DriverKind.MYSQL,
    "duckdb": DriverKind.DUCKDB,
    "pdosqlite": DriverKind.DBAPI,
    "pdopgsql": DriverKind.DBAPI,
    "pdomysql": DriverKind.DBAPI,
}
FILE_SCHEMES: Final = frozenset({"sqlite", "sqlite3", "duckdb", "pdosqlite"})


@dataclass(frozen=True, slots=True)
class ConnectionDescriptor:
    """How to reach a backend.

    ``kind`` is the normalized scheme (``sqlite``, ``pgsql``, ``pdomysql`` ...);
    :attr:`driver_kind` maps it onto the adapter that serves it. File based
    backends keep their path in ``database``.
    """

    kind: str
    host: Optional[str] = None
    database: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    port: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", self.kind.lower())

    @property
    def driver_kind(self) -> DriverKind:
        """The adapter kind serving this descriptor.

        Raises:
            ImproperConfigurationError: If ``kind`` is not a database scheme.
        """
        try:
            return SCHEME_KINDS[self.kind]
        except KeyError:
            msg = f"Invalid type {self.kind}."
            raise ImproperConfigurationError(msg) from None

    @property
    def is_file_based(self) -> bool:
        return self.kind in FILE_SCHEMES

    @classmethod
    def from_mapping(cls, config: "Mapping[str, Any]") -> "ConnectionDescriptor":
        """Build a descriptor from a configuration mapping.

        ``type``, ``hostname`` and ``username`` are accepted as aliases of
        ``kind``, ``host`` and ``user``.

        Raises:
            ImproperConfigurationError: If no kind is given.
        """
        kind = config.get("kind") or config.get("type")
        if not kind:
            msg = "Connection configuration requires a 'kind'."
            raise ImproperConfigurationError(msg)
        port = config.get("port")
        return cls(
            kind=str(kind),
            host=config.get("host", config.get("hostname")),
            database=config.get("database"),
            user=config.get("user", config.get("username")),
            password=config.get("password"),
            port=int(port) if port not in {None, ""} else None,
        )

    def safe_dict(self) -> "dict[str, Any]":
        """Descriptor fields with the password masked, for logging."""
        return {
            "kind": self.kind,
            "host": self.host,
            "database": self.database,
            "user": self.user,
            "password": "***" if self.password else None,
            "port": self.port,
        }


def parse_connection_url(url: str, kinds: "Optional[frozenset[str]]" = None) -> ConnectionDescriptor:
    """Parse ``scheme://[user[:password]@]host[:port]/database`` or ``scheme://database``.

    File based schemes take everything after ``scheme://`` as a filesystem path
    (``sqlite:///var/db/app.db``, ``sqlite://:memory:``).

    Args:
        url: The connection string. Backslashes are treated as ``/``.
        kinds: Accepted schemes; defaults to the database schemes.

    Raises:
        ImproperConfigurationError: For a malformed string or an unknown scheme.

    Returns:
        The parsed descriptor.
    """
    normalized = url.replace("\\", "/")
    scheme, separator, remainder = normalized.partition("://")
    if not separator or not scheme:
        msg = "Invalid connection string."
        raise ImproperConfigurationError(msg)

    kind = scheme.lower()
    accepted = kinds if kinds is not None else frozenset(SCHEME_KINDS)
    if kind not in accepted:
        msg = f"Invalid type {kind}."
        raise ImproperConfigurationError(msg)

    if kind in FILE_SCHEMES:
        return ConnectionDescriptor(kind=kind, database=remainder or None)

    try:
        parts = urlsplit(f"{kind}://{remainder}")
        port = parts.port
    except ValueError as e:
        msg = f"Invalid connection string: {e}"
        raise ImproperConfigurationError(msg) from e

    database = parts.path[1:] if parts.path.startswith("/") else parts.path
    host = parts.hostname
    if not database and parts.username is None and port is None:
        database, host = parts.netloc, None

    return ConnectionDescriptor(
        kind=kind,
        host=host,
        database=unquote(database) if database else None,
        user=unquote(parts.username) if parts.username is not None else None,
        password=unquote(parts.password) if parts.password is not None else None,
        port=port,
    )
