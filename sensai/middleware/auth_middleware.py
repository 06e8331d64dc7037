"""Identity middleware: requires an upstream identity on every non-public route."""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from sensai.errors import ValidationError
from sensai.models.base import SessionLocal
from sensai.services.identity import identity_from_headers
from sensai.services.user_service import UserService
from sensai.utils.logger import log

# Paths that never require authentication
PUBLIC_PREFIXES = (
    "/health",
    "/status",
    "/docs",
    "/openapi.json",
    "/redoc",
)

# User-facing areas; the user row is provisioned on first visit
PROTECTED_PREFIXES = (
    "/dashboard",
    "/resume",
    "/interview",
    "/user",
)


class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        # Allow public paths through
        if path == "/" or any(path.startswith(p) for p in PUBLIC_PREFIXES):
            return await call_next(request)

        identity = identity_from_headers(request.headers)
        if identity is None:
            return JSONResponse(
                status_code=401,
                content={"detail": "Unauthorized"},
            )

        # Attach identity to request state for downstream use
        request.state.identity = identity

        if any(path.startswith(p) for p in PROTECTED_PREFIXES):
            db = SessionLocal()
            try:
                UserService(db).ensure_user(identity)
            except ValidationError as e:
                # Identity without the fields needed to provision a user
                return JSONResponse(status_code=400, content={"detail": e.message})
            except Exception as e:
                # Provisioning is retried on the next request; don't block this one
                log.error(f"User provisioning failed for {identity.user_id}: {str(e)}")
            finally:
                db.close()

        return await call_next(request)
