from fastapi import APIRouter, status

from ..config import SettingsDep
from ..database import SessionDep
from ..users.schema import UserCreate, UserOut
from .dependencies import CurrentUserDep
from .schema import AuthResponse, LoginRequest, MeResponse
from . import service as auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: UserCreate, db: SessionDep, settings: SettingsDep):
    user, token = await auth_service.signup(db, body, settings)
    return AuthResponse(user=UserOut.model_validate(user), token=token)

@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: SessionDep, settings: SettingsDep):
    user, token = await auth_service.login(db, body.login_value, body.password, settings)
    return AuthResponse(user=UserOut.model_validate(user), token=token)

@router.get("/me", response_model=MeResponse)
async def read_me(current_user: CurrentUserDep):
    return MeResponse(user=UserOut.model_validate(current_user))
