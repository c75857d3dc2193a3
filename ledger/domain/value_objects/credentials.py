"""Connection credentials value object."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ledger.config import Settings

DEFAULT_PORT = 27017


@dataclass(frozen=True)
class Credentials:
    """Credentials for the MongoDB server holding the ledger.

    Nothing is validated here: bad values only show up once a connection
    attempt is made.
    """

    host: str
    database: str
    username: Optional[str] = None
    password: Optional[str] = None
    auth_source: Optional[str] = None
    port: int = DEFAULT_PORT

    @property
    def has_auth(self) -> bool:
        """True only when username, password and auth source are all set.

        A partial set (e.g. username without password) counts as no auth.
        """
        return (
            self.username is not None
            and self.password is not None
            and self.auth_source is not None
        )

    def to_uri(self) -> str:
        """Build the mongodb:// connection URI."""
        if self.has_auth:
            return (
                f"mongodb://{self.username}:{self.password}"
                f"@{self.host}:{self.port}/{self.database}"
                f"?authSource={self.auth_source}"
            )
        return f"mongodb://{self.host}:{self.port}/{self.database}"

    @classmethod
    def from_settings(cls, settings: "Settings") -> "Credentials":
        """Create Credentials from application settings."""
        return cls(
            host=settings.mongo_host,
            database=settings.mongo_database,
            username=settings.mongo_username,
            password=settings.mongo_password,
            auth_source=settings.mongo_auth_source,
            port=settings.mongo_port,
        )

    def __repr__(self) -> str:
        password = "***" if self.password is not None else None
        return (
            f"Credentials(host={self.host!r}, database={self.database!r}, "
            f"username={self.username!r}, password={password!r}, "
            f"auth_source={self.auth_source!r}, port={self.port!r})"
        )
