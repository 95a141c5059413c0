import re
from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator


class UserBase(BaseModel):
    name: str
    email: EmailStr


class UserCreate(UserBase):
    password: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError('name must be at least 2 characters')
        return v

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError('password must be at least 8 characters')
        if not re.search(r'[A-Z]', v):
            raise ValueError('password must contain an uppercase letter')
        if not re.search(r'[a-z]', v):
            raise ValueError('password must contain a lowercase letter')
        if not re.search(r'[0-9]', v):
            raise ValueError('password must contain a digit')
        if not re.search(r'[^A-Za-z0-9]', v):
            raise ValueError('password must contain a special character')
        return v


class UserResponse(UserBase):
    id: str
    avatar: Optional[str] = None
    created_at: str

    class Config:
        from_attributes = True
