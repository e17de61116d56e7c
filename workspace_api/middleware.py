import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

SANDBOX_ROUTES = frozenset({"/api/execute", "/api/install-packages"})


class HTTPLogMiddleware(BaseHTTPMiddleware):
    """Request logging for the workspace API.

    Every request logs its workspace target (the ``path`` query argument)
    at DEBUG. Sandbox routes also log their wall time at INFO, since they
    hold a child process for the length of the request.
    """

    def __init__(self, app, logger_name: str = "workspace_api.http"):
        super().__init__(app)
        self._logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        route = request.url.path
        method = request.method
        target = request.query_params.get("path") or "-"
        self._logger.debug("workspace.request start method=%s route=%s target=%s",
                           method, route, target)
        try:
            response: Response = await call_next(request)
        except Exception as e:
            dur_ms = int((time.perf_counter() - start) * 1000)
            self._logger.warning("workspace.request error method=%s route=%s target=%s dur_ms=%s err=%r",
                                 method, route, target, dur_ms, e)
            raise

        dur_ms = int((time.perf_counter() - start) * 1000)
        if route in SANDBOX_ROUTES:
            self._logger.info("sandbox.request route=%s status=%s dur_ms=%s",
                              route, response.status_code, dur_ms)
        else:
            self._logger.debug("workspace.request end method=%s route=%s target=%s status=%s dur_ms=%s",
                               method, route, target, response.status_code, dur_ms)
        return response
