import logging
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...application.services.token_service import Claims, TokenService
from ...core.dependencies import get_token_service
from ...domain.errors import RequestValidationFailed, TokenError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)

AUTHENTICATION_REQUIRED = "Authentication is required to access this resource."


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=AUTHENTICATION_REQUIRED,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_authenticated_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> Claims:
    """Gate for mutating routes: a valid bearer token or 401, whatever the cause."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise _unauthenticated()
    try:
        claims = token_service.verify(credentials.credentials)
    except TokenError as exc:
        logger.info("Rejected bearer token on %s: %s", request.url.path, type(exc).__name__)
        raise _unauthenticated() from exc
    request.state.principal = claims
    return claims


async def json_object_body(request: Request) -> Dict[str, Any]:
    """Read the request body as a JSON object; declared after the gate so it runs second."""
    try:
        payload = await request.json()
    except ValueError as exc:
        raise RequestValidationFailed({"body": ["The request body must be valid JSON."]}) from exc
    if not isinstance(payload, dict):
        raise RequestValidationFailed({"body": ["The request body must be a JSON object."]})
    return payload
