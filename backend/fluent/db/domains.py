"""Read-only access to configured domain mappings."""

import logging
import threading
import time
from collections.abc import Callable, Iterable
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from backend.fluent.db.models import Domain

logger = logging.getLogger(__name__)


class DomainRepository(Protocol):
    """Existence queries over domain mappings."""

    def exists(self) -> bool:
        """Return True if any domain mapping is configured."""
        ...

    def matches(self, domain: str) -> bool:
        """Return True if a mapping exists for exactly ``domain``."""
        ...


class InMemoryDomainRepository:
    """In-memory implementation of DomainRepository."""

    def __init__(self, domains: Iterable[str] = ()) -> None:
        self._domains = frozenset(domains)

    def exists(self) -> bool:
        return bool(self._domains)

    def matches(self, domain: str) -> bool:
        return domain in self._domains


class SqlDomainRepository:
    """SQL implementation of DomainRepository with a time-bounded cache.

    All domain names are loaded in one query and reused until the cache
    expires or ``invalidate()`` is called. A failed load is logged and
    treated as "no domains" (or the last good list, if any) without being
    cached, so the next lookup tries the database again.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        ttl_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session_factory = session_factory
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._cached: frozenset[str] | None = None
        self._loaded_at = 0.0
        self._lock = threading.Lock()

    def exists(self) -> bool:
        return bool(self._domains())

    def matches(self, domain: str) -> bool:
        return domain in self._domains()

    def invalidate(self) -> None:
        """Drop the cached domain list."""
        with self._lock:
            self._cached = None

    def _domains(self) -> frozenset[str]:
        with self._lock:
            now = self._clock()
            if self._cached is not None and now - self._loaded_at < self._ttl_seconds:
                return self._cached

            try:
                with self._session_factory() as session:
                    rows = session.execute(select(Domain.domain)).scalars().all()
            except SQLAlchemyError as e:
                logger.warning(
                    "Failed to load domain mappings",
                    extra={"structured": {"error": str(getattr(e, "orig", None) or e)}},
                )
                return self._cached if self._cached is not None else frozenset()

            self._cached = frozenset(rows)
            self._loaded_at = now
            return self._cached
