"""PostgreSQL async connection pool."""

from psycopg_pool import AsyncConnectionPool

from permset.config import Settings


def create_pool(settings: Settings) -> AsyncConnectionPool:
    """Build the pool from settings, unopened.

    The ASGI lifespan opens it on startup (PoolLifespanMiddleware); creating
    it here never touches the network.
    """
    return AsyncConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.database_pool_min_size,
        max_size=settings.database_pool_max_size,
        timeout=settings.database_pool_timeout,
        open=False,
    )
