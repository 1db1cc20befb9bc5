"""Health check endpoints."""

from typing import Protocol

import falcon.asgi


class Pingable(Protocol):
    async def ping(self) -> bool: ...


class HealthResource:
    """Liveness and readiness endpoints."""

    def __init__(self, store: Pingable | None = None) -> None:
        self._store = store

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health - liveness."""
        resp.media = {"status": "ok"}
        resp.status = falcon.HTTP_200

    async def on_get_ready(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health/ready - readiness (database reachable)."""
        if self._store is not None and not await self._store.ping():
            resp.media = {"status": "unavailable"}
            resp.status = falcon.HTTP_503
            return
        resp.media = {"status": "ready"}
        resp.status = falcon.HTTP_200
