from fastapi import APIRouter, Depends
from framework.exceptions.errors import ValidationError
from framework.response import ResponseModel
from apps.deps import get_auth_service
from ..schemas import RegisterSchema, LoginSchema, RefreshTokenSchema
from ..service import AuthService

router = APIRouter()


@router.post("/register")
async def register(
    data: RegisterSchema,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user and return a token pair."""
    result = await service.register(data.username, data.email, data.password)
    return ResponseModel.success(data=result.model_dump(mode="json"))


@router.post("/login")
async def login(
    data: LoginSchema,
    service: AuthService = Depends(get_auth_service)
):
    """Login: return JWT and refresh token."""
    result = await service.login(data.email, data.password)
    return ResponseModel.success(data=result.model_dump(mode="json"))


@router.post("/refresh")
async def refresh(
    data: RefreshTokenSchema,
    service: AuthService = Depends(get_auth_service)
):
    """Exchange a refresh token for a new token pair."""
    result = await service.refresh(data.refresh_token)
    return ResponseModel.success(data=result.model_dump(mode="json"))


@router.post("/revoke")
async def revoke(
    data: RefreshTokenSchema,
    service: AuthService = Depends(get_auth_service)
):
    """Revoke a refresh token."""
    if not await service.revoke(data.refresh_token):
        raise ValidationError("Invalid refresh token")
    return ResponseModel.success(data={"message": "Token revoked successfully"})
