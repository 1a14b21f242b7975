from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Dict, Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import sessionmaker, Session, DeclarativeBase

from automation_router.config import MYSQL_DRIVER
if TYPE_CHECKING:  # pragma: no cover
	from automation_router.models.schemas.credentials import MySQLCredentials


class Base(DeclarativeBase):
	pass


def build_mysql_url(credentials: "MySQLCredentials", database: str) -> URL:
	return URL.create(
		MYSQL_DRIVER,
		username=credentials.user,
		password=credentials.password,
		host=credentials.host,
		port=credentials.port,
		database=database,
	)


class StoreConnector:
	"""Lazily builds one engine per database name for a single invocation.

	Sessions are handed out through `session_scope`, which commits on success,
	rolls back on error and always closes. `dispose()` releases every engine.
	"""

	def __init__(
		self,
		credentials: Optional["MySQLCredentials"] = None,
		*,
		url_for: Optional[Callable[[str], "URL | str"]] = None,
	):
		if credentials is None and url_for is None:
			raise ValueError("StoreConnector needs credentials or a url_for factory")
		self._credentials = credentials
		self._url_for = url_for
		self._engines: Dict[str, Engine] = {}

	def _url(self, database: str) -> "URL | str":
		if self._url_for is not None:
			return self._url_for(database)
		if self._credentials is None:
			raise ValueError(f"No credentials or url_for factory to build a URL for database {database!r}")
		return build_mysql_url(self._credentials, database)

	def engine(self, database: str) -> Engine:
		if database not in self._engines:
			self._engines[database] = create_engine(self._url(database), pool_pre_ping=True)
		return self._engines[database]

	@contextmanager
	def session_scope(self, database: str) -> Iterator[Session]:
		session = sessionmaker(bind=self.engine(database), autoflush=False)()
		try:
			yield session
			session.commit()
		except Exception:
			session.rollback()
			raise
		finally:
			session.close()

	def dispose(self) -> None:
		for engine in self._engines.values():
			engine.dispose()
		self._engines.clear()
