from pydantic import BaseModel
from app.schemas.user import UserResponse


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # секунды до истечения access_token
    user: UserResponse


class RefreshRequest(BaseModel):
    refresh_token: str


class RefreshResponse(LoginResponse):
    pass


class LogoutRequest(BaseModel):
    refresh_token: str


class MessageResponse(BaseModel):
    message: str
