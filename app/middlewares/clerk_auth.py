from typing import List, Optional
from fastapi import Request, HTTPException, status, Depends
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from sqlalchemy.future import select
from clerk_backend_api import Clerk
from clerk_backend_api.security.types import AuthenticateRequestOptions
from httpx import Request as HttpxRequest
from app.core.config import settings
from app.database import AsyncSessionLocal
from app.enums import UserRole
from app.exceptions.errors import PermissionDeniedError
from app.models.user import User
from app.core.logger import get_logger

logger = get_logger("clerk_auth_middleware")

DEV_USER_HEADER = "X-Development-User"

whitelisted_routes = [
    "/docs", "/openapi.json", "/redoc", "/favicon.ico",
    "/api/v1/health", "/api/v1/ready", "/api/v1/config",
]


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": message}
    )


class ClerkAuthMiddleware(BaseHTTPMiddleware):
    """Resolves the caller to a local User and stores it on request.state.user."""

    def __init__(self, app, whitelisted_routes: List[str] = None):
        super().__init__(app)
        self.clerk_sdk = Clerk(bearer_auth=settings.CLERK_SECRET_KEY) if settings.CLERK_SECRET_KEY else None
        self.whitelisted_routes = whitelisted_routes or []
        self.dev_bypass = settings.AUTH_DEV_BYPASS and not settings.IS_PRODUCTION
        if self.dev_bypass:
            logger.warning(f"Development auth bypass enabled via {DEV_USER_HEADER} header")

    def _is_whitelisted(self, path: str) -> bool:
        if path == "/":
            return True
        for route in self.whitelisted_routes:
            if path.startswith(route):
                return True
        return False

    async def _load_dev_user(self, user_id: str) -> Optional[User]:
        async with AsyncSessionLocal() as db:
            return await db.get(User, user_id)

    async def _resolve_clerk_user(self, request: Request) -> Optional[User]:
        httpx_request = HttpxRequest(
            method=request.method,
            url=str(request.url),
            headers=dict(request.headers)
        )
        request_state = self.clerk_sdk.authenticate_request(
            httpx_request,
            AuthenticateRequestOptions()
        )
        if not request_state.is_signed_in:
            logger.warning(f"Invalid Clerk token: {request_state.reason}")
            return None

        clerk_user_id = request_state.payload.get("sub") if request_state.payload else None
        if not clerk_user_id:
            logger.warning("No user_id in token payload")
            return None

        async with AsyncSessionLocal() as db:
            result = await db.execute(select(User).where(User.clerk_id == clerk_user_id))
            user = result.scalar_one_or_none()
            if user:
                return user

            # First sign-in: link by email if staff created the account, else provision a client
            clerk_user = self.clerk_sdk.users.get(user_id=clerk_user_id)
            email = clerk_user.email_addresses[0].email_address if clerk_user.email_addresses else None
            if not email:
                logger.warning(f"Clerk user {clerk_user_id} has no email address")
                return None

            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
            if user:
                user.clerk_id = clerk_user_id
                logger.info(f"Linked existing user {email} to Clerk ID {clerk_user_id}")
            else:
                user = User(
                    clerk_id=clerk_user_id,
                    email=email,
                    first_name=clerk_user.first_name,
                    last_name=clerk_user.last_name,
                    role=UserRole.CLIENT,
                    is_active=True
                )
                db.add(user)
                logger.info(f"Created new user {email} (Clerk ID: {clerk_user_id})")
            await db.commit()
            await db.refresh(user)
            return user

    async def dispatch(self, request: Request, call_next):
        if self._is_whitelisted(request.url.path) or request.method == "OPTIONS":
            return await call_next(request)

        user = None
        dev_user_id = request.headers.get(DEV_USER_HEADER)
        if self.dev_bypass and dev_user_id:
            user = await self._load_dev_user(dev_user_id)
            if not user:
                return _unauthorized("Unknown development user")
        else:
            auth_header = request.headers.get("Authorization")
            if not auth_header or not auth_header.startswith("Bearer "):
                logger.warning(f"Missing or invalid Authorization header for: {request.url.path}")
                return _unauthorized("Missing or invalid authorization token")
            if self.clerk_sdk is None:
                logger.error("CLERK_SECRET_KEY is not configured")
                return _unauthorized("Authentication is not configured")
            try:
                user = await self._resolve_clerk_user(request)
            except Exception as e:
                logger.error(f"Authentication error: {e}")
                return _unauthorized("Authentication failed")
            if not user:
                return _unauthorized("Invalid authentication token")

        if not user.is_active:
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={"error": "Account is deactivated"}
            )

        request.state.user = user
        logger.debug(f"Authenticated {user.email} ({user.role.value}) for {request.url.path}")
        return await call_next(request)


def get_current_user_from_request(request: Request) -> User:
    """Extract authenticated user from request state"""
    if not hasattr(request.state, "user"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated"
        )
    return request.state.user


async def get_authenticated_user(request: Request) -> User:
    """FastAPI dependency to get authenticated user"""
    return get_current_user_from_request(request)


async def require_staff(user: User = Depends(get_authenticated_user)) -> User:
    if not user.is_staff:
        raise PermissionDeniedError("Staff access required")
    return user


async def require_admin(user: User = Depends(get_authenticated_user)) -> User:
    if not user.is_admin:
        raise PermissionDeniedError("Admin access required")
    return user
