from typing import Iterable, Optional

from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send


def is_origin_allowed(origin: Optional[str], allow_list: Iterable[str]) -> bool:
    # Requests without an Origin header (curl, server-to-server, health probes) pass
    if not origin:
        return True
    allowed = {item.rstrip("/") for item in allow_list}
    return "*" in allowed or origin.rstrip("/") in allowed


class OriginPolicyMiddleware(CORSMiddleware):
    """CORSMiddleware whose origin check is ``is_origin_allowed``.

    Simple (non-preflight) requests from an origin outside the allow-list are
    answered with 403 instead of reaching the routes.
    """

    def __init__(self, app: ASGIApp, allow_origins: Iterable[str] = (), **kwargs) -> None:
        self.allow_list = list(allow_origins)
        super().__init__(app, allow_origins=self.allow_list, **kwargs)

    def is_allowed_origin(self, origin: str) -> bool:
        return is_origin_allowed(origin, self.allow_list)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] != "OPTIONS":
            origin = _header(scope, b"origin")
            if origin is not None and not self.is_allowed_origin(origin):
                response = JSONResponse(status_code=403, content={"error": "Not allowed by CORS"})
                await response(scope, receive, send)
                return
        await super().__call__(scope, receive, send)


def _header(scope: Scope, name: bytes) -> Optional[str]:
    for key, value in scope.get("headers", []):
        if key == name:
            return value.decode("latin-1")
    return None
