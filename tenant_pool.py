"""
Tenant connection pool.

Maps a tenant database URL to a bounded list of lazily created async engines.
Selection policy:

- while the tenant's pool holds fewer than ``max_connections_per_tenant``
  handles, every acquisition creates a new one;
- once the pool is full, the least recently used handle is returned and its
  timestamp refreshed. No other entry is touched.

Handles idle for longer than ``connection_ttl_seconds`` are disposed by a
periodic eviction job; a tenant whose pool becomes empty is dropped from the
map. The pool is owned by the application (see ``main.lifespan``): callers
borrow engines and must never dispose them.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

logger = logging.getLogger(__name__)

EVICTION_JOB_ID = "tenant_pool_eviction"


@dataclass
class PooledConnection:
    """One live handle owned by the pool."""

    tenant_id: int
    engine: AsyncEngine
    last_used: float


def default_engine_factory(connection_string: str, *, echo: bool = False) -> AsyncEngine:
    return create_async_engine(connection_string, echo=echo, pool_pre_ping=True)


def mask_connection_string(connection_string: str) -> str:
    """Hide the password part of a database URL."""
    try:
        return make_url(connection_string).render_as_string(hide_password=True)
    except ArgumentError:
        return "<unparseable url>"


class TenantConnectionPool:
    """Bounded, LRU-recycled pool of per-tenant database engines."""

    def __init__(
        self,
        *,
        max_connections_per_tenant: int = 5,
        connection_ttl_seconds: float = 30 * 60,
        cleanup_interval_seconds: float = 10 * 60,
        engine_factory: Callable[[str], AsyncEngine] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_connections_per_tenant < 1:
            raise ValueError("max_connections_per_tenant must be at least 1")

        self.max_connections_per_tenant = max_connections_per_tenant
        self.connection_ttl_seconds = connection_ttl_seconds
        self.cleanup_interval_seconds = cleanup_interval_seconds
        self._engine_factory = engine_factory or default_engine_factory
        self._clock = clock

        # key = tenant connection string
        self._pools: dict[str, list[PooledConnection]] = {}
        # Guards every mutation of _pools and of the entries it holds
        self._lock = asyncio.Lock()
        self._scheduler: AsyncIOScheduler | None = None
        self._owns_scheduler = False

    @classmethod
    def from_settings(cls, settings) -> "TenantConnectionPool":
        """Build a pool from application settings."""
        echo = settings.TENANT_DB_ECHO
        return cls(
            max_connections_per_tenant=settings.MAX_CONNECTIONS_PER_TENANT,
            connection_ttl_seconds=settings.CONNECTION_TTL_SECONDS,
            cleanup_interval_seconds=settings.POOL_CLEANUP_INTERVAL_SECONDS,
            engine_factory=lambda url: default_engine_factory(url, echo=echo),
        )

    async def acquire(self, connection_string: str, tenant_id: int) -> AsyncEngine:
        """
        Get an engine for a tenant database.

        Args:
            connection_string: Tenant database URL (pool key)
            tenant_id: Owning tenant, recorded on newly created handles

        Returns:
            AsyncEngine borrowed from the pool

        Raises:
            SQLAlchemyError: The engine factory rejected the connection string
        """
        async with self._lock:
            pool = self._pools.get(connection_string, [])
            now = self._clock()

            if len(pool) < self.max_connections_per_tenant:
                # Key is only inserted once a handle exists
                engine = self._engine_factory(connection_string)
                pool.append(PooledConnection(tenant_id=tenant_id, engine=engine, last_used=now))
                self._pools[connection_string] = pool
                logger.info(
                    "Created connection for tenant %s. Pool size: %d/%d",
                    tenant_id,
                    len(pool),
                    self.max_connections_per_tenant,
                )
                return engine

            # Pool is full, recycle the least recently used handle
            lru = min(pool, key=lambda conn: conn.last_used)
            lru.last_used = now
            return lru.engine

    async def evict_expired(self) -> int:
        """
        Dispose handles idle for longer than the TTL.

        Returns:
            Number of handles evicted
        """
        expired: list[PooledConnection] = []

        async with self._lock:
            now = self._clock()
            for connection_string in list(self._pools):
                pool = self._pools[connection_string]
                valid = [c for c in pool if now - c.last_used <= self.connection_ttl_seconds]
                stale = [c for c in pool if now - c.last_used > self.connection_ttl_seconds]

                if stale:
                    logger.info(
                        "Cleaned %d expired connections for tenant %s",
                        len(stale),
                        stale[0].tenant_id,
                    )
                    expired.extend(stale)

                if valid:
                    self._pools[connection_string] = valid
                else:
                    del self._pools[connection_string]

        await self._dispose_all(expired)
        return len(expired)

    async def shutdown(self) -> None:
        """Stop the eviction job and close every handle across all tenants."""
        if self._scheduler is not None:
            if self._owns_scheduler:
                self._scheduler.shutdown(wait=False)
            else:
                self._scheduler.remove_job(EVICTION_JOB_ID)
            self._scheduler = None
            self._owns_scheduler = False

        async with self._lock:
            connections = [conn for pool in self._pools.values() for conn in pool]
            self._pools.clear()

        await self._dispose_all(connections)
        logger.info("All tenant connections closed (%d)", len(connections))

    def start(self, scheduler: AsyncIOScheduler | None = None) -> None:
        """
        Schedule the periodic eviction pass.

        Args:
            scheduler: Shared scheduler to register the job on. When omitted the
                pool creates, starts and later shuts down its own scheduler.
                Must be called from within a running event loop.
        """
        if self._scheduler is not None:
            return

        if scheduler is None:
            scheduler = AsyncIOScheduler()
            self._owns_scheduler = True

        scheduler.add_job(
            self.evict_expired,
            trigger=IntervalTrigger(seconds=self.cleanup_interval_seconds),
            id=EVICTION_JOB_ID,
            replace_existing=True,
            max_instances=1,
        )
        if self._owns_scheduler:
            scheduler.start()

        self._scheduler = scheduler
        logger.info(
            "Tenant pool eviction installed (interval=%ss, ttl=%ss)",
            self.cleanup_interval_seconds,
            self.connection_ttl_seconds,
        )

    def size(self, connection_string: str) -> int:
        """Number of live handles for one tenant database."""
        return len(self._pools.get(connection_string, ()))

    def entries(self, connection_string: str) -> list[PooledConnection]:
        """Snapshot of the handles held for one tenant database."""
        return list(self._pools.get(connection_string, ()))

    def stats(self) -> list[dict]:
        """Per-tenant pool statistics with passwords masked."""
        return [
            {
                "db": mask_connection_string(connection_string),
                "tenant_id": pool[0].tenant_id if pool else None,
                "connections": len(pool),
                "max_connections": self.max_connections_per_tenant,
            }
            for connection_string, pool in self._pools.items()
        ]

    async def _dispose_all(self, connections: list[PooledConnection]) -> None:
        if not connections:
            return
        results = await asyncio.gather(
            *(conn.engine.dispose() for conn in connections),
            return_exceptions=True,
        )
        for conn, result in zip(connections, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Failed to close connection for tenant %s: %s", conn.tenant_id, result
                )
