import asyncio
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from ....application.services.credential_service import CredentialService
from ....application.services.token_service import TokenService
from ....core.dependencies import get_credential_service, get_token_service
from ....domain.errors import DuplicateEmailError, InvalidCredentialsError, RequestValidationFailed
from ....domain.validation import LOGIN_RULES, REGISTRATION_RULES, parse_credentials
from ...api.dependencies import json_object_body
from ...api.schemas.auth import LoginResponse, RegisterResponse

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse)
async def register(
    payload: Dict[str, Any] = Depends(json_object_body),
    credential_service: CredentialService = Depends(get_credential_service),
) -> RegisterResponse:
    email, password = parse_credentials(payload, REGISTRATION_RULES)
    try:
        await asyncio.to_thread(credential_service.register, email, password)
    except DuplicateEmailError as exc:
        raise RequestValidationFailed({"email": [exc.message]}) from exc
    return RegisterResponse(message="User registered successfully!")


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: Dict[str, Any] = Depends(json_object_body),
    credential_service: CredentialService = Depends(get_credential_service),
    token_service: TokenService = Depends(get_token_service),
) -> LoginResponse:
    email, password = parse_credentials(payload, LOGIN_RULES)
    try:
        user = await asyncio.to_thread(credential_service.verify, email, password)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message) from exc
    return LoginResponse(token=token_service.issue(user.id, user.email))
