from fastapi import APIRouter, Depends, Response

from app.dependencies import get_current_user, get_user_service
from app.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    UserRead,
)
from app.security import create_access_token
from app.services.users import UserService

router = APIRouter()


@router.post("/register", response_model=RegisterResponse)
async def register(payload: RegisterRequest, users: UserService = Depends(get_user_service)):
    user = await users.create_user(payload)
    return RegisterResponse(user_id=user.id, username=user.username)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    users: UserService = Depends(get_user_service),
):
    user = await users.authenticate(payload.username, payload.password)
    token = create_access_token(user.username)
    response.headers["Authorization"] = f"Bearer {token}"
    return LoginResponse(username=user.username, token=token)


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: UserRead = Depends(get_current_user)):
    # Tokens são stateless: o cliente só precisa descartá-lo
    return MessageResponse(message="User logged out successfully")
