# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Resolves the caller's Supabase session for each request.
#
# The access token is taken from (in order):
# - the Authorization: Bearer header (API clients)
# - the Supabase SSR auth cookie (browser requests)
#
# Token verification supports both:
# - ES256/RS256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret)
#
# Usage:
#   from app.auth import get_current_session, AuthSession
#
#   @router.get("/protected")
#   async def protected(session: AuthSession = Depends(get_current_session)):
#       return {"user_id": session.user_id}
# =============================================================================

import base64
import json
import logging
import time
from typing import Mapping, Optional
from uuid import UUID

import httpx
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthSession, AuthUser, TokenPayload
from app.exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor (optional: browsers send a cookie instead)
security_optional = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour

# Chunked cookies are split into name.0, name.1, ...
MAX_COOKIE_CHUNKS = 10
BASE64_COOKIE_PREFIX = "base64-"


def _get_jwks_url() -> str:
    """Get the JWKS URL from Supabase URL."""
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        jwks = response.json()
        if not isinstance(jwks, dict):
            raise ValueError("JWKS response is not a JSON object")
        _jwks_cache = jwks
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except (httpx.HTTPError, ValueError) as e:
        # ValueError: the body is not a JSON object
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Stale keys are better than none
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _get_signing_key(token: str) -> tuple[str | dict, str]:
    """
    Get the appropriate signing key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    if kid:
        jwks = _fetch_jwks()
        for key in jwks.get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return settings.SUPABASE_JWT_SECRET, "HS256"


# =============================================================================
# Token Extraction
# =============================================================================

def _decode_cookie_value(raw: str) -> Optional[str]:
    """
    Pull the access token out of a Supabase auth cookie value.

    @supabase/ssr stores the session JSON, optionally base64url encoded
    with a "base64-" prefix. Older auth helpers stored a JSON array whose
    first element is the access token.
    """
    value = raw
    if value.startswith(BASE64_COOKIE_PREFIX):
        encoded = value[len(BASE64_COOKIE_PREFIX):]
        padded = encoded + "=" * (-len(encoded) % 4)
        try:
            value = base64.urlsafe_b64decode(padded).decode("utf-8")
        except (ValueError, UnicodeDecodeError):
            logger.debug("Auth cookie is not valid base64")
            return None

    try:
        session_data = json.loads(value)
    except json.JSONDecodeError:
        logger.debug("Auth cookie is not valid JSON")
        return None

    if isinstance(session_data, dict):
        token = session_data.get("access_token")
    elif isinstance(session_data, list) and session_data:
        token = session_data[0]
    else:
        token = None

    return token if isinstance(token, str) and token else None


def extract_token_from_cookies(cookies: Mapping[str, str]) -> Optional[str]:
    """
    Find the access token in the request cookies.

    Handles both a single cookie and one split into numbered chunks.
    """
    name = settings.auth_cookie_name

    raw = cookies.get(name)
    if raw is None:
        chunks = []
        for index in range(MAX_COOKIE_CHUNKS):
            chunk = cookies.get(f"{name}.{index}")
            if chunk is None:
                break
            chunks.append(chunk)
        if not chunks:
            return None
        raw = "".join(chunks)

    return _decode_cookie_value(raw)


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and return the user it identifies.

    Raises:
        UnauthenticatedError: If the token is invalid, expired or malformed
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience="authenticated"
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise UnauthenticatedError("Session has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise UnauthenticatedError("Invalid session token")

    try:
        claims = TokenPayload.model_validate(payload)
    except ValueError:
        logger.warning("JWT token is missing required claims")
        raise UnauthenticatedError("Invalid session token")

    try:
        user_uuid = UUID(claims.sub)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {claims.sub}")
        raise UnauthenticatedError("Invalid session token: malformed user ID")

    return AuthUser(id=user_uuid, email=claims.email)


# =============================================================================
# Dependencies
# =============================================================================

async def get_session_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> Optional[AuthSession]:
    """
    Resolve the caller's session, or None.

    A missing or invalid token is treated as "no session"; callers that
    need one decide how to fail (401 for APIs, redirect for pages).
    """
    token = credentials.credentials if credentials else extract_token_from_cookies(request.cookies)
    if not token:
        return None

    try:
        user = decode_access_token(token)
    except UnauthenticatedError:
        return None

    logger.debug(f"Authenticated user: {user.id}")
    return AuthSession(user=user, access_token=token)


async def get_current_session(
    session: Optional[AuthSession] = Depends(get_session_optional),
) -> AuthSession:
    """
    Require a signed-in caller.

    Raises:
        UnauthenticatedError: 401 if no valid session is present
    """
    if session is None:
        raise UnauthenticatedError()
    return session

