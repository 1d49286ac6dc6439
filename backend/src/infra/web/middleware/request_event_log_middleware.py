import logging
from time import perf_counter
from typing import Any
from uuid import uuid4

import structlog
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from structlog.contextvars import bind_contextvars, clear_contextvars

request_logger = structlog.stdlib.get_logger("infra.web.request")


def _status_to_outcome(status_code: int) -> str:
    if status_code < 400:
        return "success"

    if status_code < 500:
        return "client_error"

    return "server_error"


class RequestEventLogMiddleware:
    """Binds a request id to the log context and emits one ``http_request_summary`` per request."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        request_id_header: str = "x-request-id",
        excluded_path_suffixes: set[str] | None = None,
    ) -> None:
        self.app = app
        self.request_id_header = request_id_header.lower()
        self.excluded_path_suffixes = excluded_path_suffixes or set()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        path = str(scope.get("path", ""))

        if scope["type"] != "http" or any(path.endswith(suffix) for suffix in self.excluded_path_suffixes):
            await self.app(scope, receive, send)
            return

        started_at = perf_counter()
        method = str(scope.get("method", ""))
        request_id = self._header(scope, self.request_id_header) or str(uuid4())
        status_code: int | None = None

        bind_contextvars(request_id=request_id, http_method=method, http_path=path)

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code

            if message["type"] == "http.response.start":
                status_code = int(message.get("status", 200))
                headers = [
                    (key, value)
                    for key, value in message.get("headers", [])
                    if key.lower() != self.request_id_header.encode("latin-1")
                ]
                headers.append((self.request_id_header.encode("latin-1"), request_id.encode("latin-1")))
                message = {**message, "headers": headers}

            await send(message)

        summary: dict[str, Any] = {
            "request_id": request_id,
            "method": method,
            "path": path,
            "client_ip": scope["client"][0] if scope.get("client") else None,
            "user_agent": self._header(scope, "user-agent"),
        }

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as error:
            if status_code is None:
                await send_wrapper({"type": "http.response.start", "status": 500, "headers": []})
                await send_wrapper({"type": "http.response.body", "body": b"Internal Server Error"})

            request_logger.exception(
                "http_request_summary",
                **summary,
                **self._route(scope),
                status_code=status_code or 500,
                outcome="unhandled_exception",
                duration_ms=self._elapsed_ms(started_at),
                error={"error_class": error.__class__.__name__, "error_message": str(error)},
            )
            raise
        else:
            final_status = status_code or 200
            request_logger.log(
                self._status_to_log_level(final_status),
                "http_request_summary",
                **summary,
                **self._route(scope),
                status_code=final_status,
                outcome=_status_to_outcome(final_status),
                duration_ms=self._elapsed_ms(started_at),
            )
        finally:
            clear_contextvars()

    def _header(self, scope: Scope, header_name: str) -> str | None:
        lookup = header_name.lower().encode("latin-1")

        for raw_key, raw_value in scope.get("headers", []):
            if raw_key.lower() == lookup:
                return raw_value.decode("latin-1")

        return None

    def _route(self, scope: Scope) -> dict[str, str | None]:
        route = scope.get("route")

        return {
            "route_path": getattr(route, "path", None),
            "route_name": getattr(route, "name", None),
        }

    def _status_to_log_level(self, status_code: int) -> int:
        if status_code < 400:
            return logging.INFO

        if status_code < 500:
            return logging.WARNING

        return logging.ERROR

    def _elapsed_ms(self, started_at: float) -> float:
        return round((perf_counter() - started_at) * 1000, 3)
