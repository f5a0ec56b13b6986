from __future__ import annotations

import logging
import re

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from portal.auth.identity import Identity
from portal.auth.policy import PathClass, classify, decide
from portal.auth.providers import IdentityProvider
from portal.core.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

AUTH_BYPASS_PATHS = frozenset(
    [
        "/health",
        "/docs",
        "/openapi.json",
        "/redoc",
    ]
)

# Static assets on public paths never need an identity lookup.
_STATIC_ASSET_RE = re.compile(
    r"\.(?:html?|css|js(?!on)|jpe?g|webp|png|gif|svg|ttf|woff2?|ico|csv|docx?|xlsx?|zip|webmanifest)$",
    re.IGNORECASE,
)


def _is_auth_bypass_path(path: str) -> bool:
    path = path.rstrip("/")
    if path in AUTH_BYPASS_PATHS:
        return True
    # Guarded paths always go through the policy, whatever their extension.
    return classify(path) is PathClass.PUBLIC and bool(_STATIC_ASSET_RE.search(path))


def _redirect(request: Request, location: str) -> RedirectResponse:
    # Same-origin absolute URL; the incoming query string is dropped.
    url = request.url.replace(path=location, query="", fragment="")
    return RedirectResponse(url=str(url), status_code=307)


def register_access_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def access_middleware(request: Request, call_next):
        """
        Resolve the caller through the configured identity provider and apply
        the routing policy before any route handler runs.

        The resulting identity is stored on request.state.identity so routes
        never resolve it twice.
        """
        request.state.identity = Identity.unauthenticated()

        # Allow CORS preflight to flow through CORSMiddleware unchanged
        if request.method.upper() == "OPTIONS":
            return await call_next(request)

        if _is_auth_bypass_path(request.url.path):
            return await call_next(request)

        provider: IdentityProvider = request.app.state.identity_provider
        try:
            identity = await run_in_threadpool(provider.authenticate, request)
        except StorageUnavailableError:
            logger.exception("Identity lookup failed for %s", request.url.path)
            return JSONResponse(
                status_code=500,
                content={"error": "INTERNAL_ERROR", "message": "Internal server error"},
            )

        request.state.identity = identity

        decision = decide(identity, request.url.path)
        if not decision.passes:
            logger.debug(
                "Redirecting %s -> %s (authenticated=%s, role=%s)",
                request.url.path,
                decision.redirect_to,
                identity.is_authenticated,
                identity.role.value if identity.role else None,
            )
            return _redirect(request, decision.redirect_to)

        return await call_next(request)
