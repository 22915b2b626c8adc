"""Request sanitization that runs before every route handler.

Path params, query string and JSON body are each sanitized in place before
FastAPI parses them into handler arguments. Responses are left untouched.
"""

import json
from typing import Callable
from urllib.parse import parse_qsl, urlencode

from fastapi import Request, Response
from fastapi.routing import APIRoute

from otp_auth.config import settings
from otp_auth.errors import PayloadTooDeep
from otp_auth.services.sanitizer import sanitize, sanitize_pairs


def _is_json(content_type: str) -> bool:
    if not content_type:
        return True
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


class SanitizedRequest(Request):
    max_depth: int = settings.sanitize_max_depth

    async def body(self) -> bytes:
        if not hasattr(self, "_sanitized"):
            raw = await super().body()
            self._body = self._sanitize_body(raw)
            self._sanitized = True
        return self._body

    def _sanitize_body(self, raw: bytes) -> bytes:
        if not raw or not _is_json(self.headers.get("content-type", "")):
            return raw
        try:
            payload = json.loads(raw)
        except RecursionError as e:
            raise PayloadTooDeep() from e
        except ValueError:
            # not JSON; leave it for request validation to reject
            return raw
        return json.dumps(sanitize(payload, self.max_depth)).encode("utf-8")


def sanitize_scope(scope: dict) -> None:
    """Sanitize path params and the query string of an ASGI scope in place."""
    path_params = scope.get("path_params")
    if path_params:
        sanitize(path_params)

    query_string = scope.get("query_string", b"")
    if query_string:
        pairs = parse_qsl(query_string.decode("latin-1"), keep_blank_values=True)
        scope["query_string"] = urlencode(sanitize_pairs(pairs)).encode("latin-1")


class SanitizedRoute(APIRoute):
    """APIRoute whose handler only ever sees sanitized input."""

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def sanitized_route_handler(request: Request) -> Response:
            sanitize_scope(request.scope)
            sanitized = SanitizedRequest(request.scope, request.receive)
            # read the body here so PayloadTooDeep reaches the app's exception handlers
            await sanitized.body()
            return await original_route_handler(sanitized)

        return sanitized_route_handler
