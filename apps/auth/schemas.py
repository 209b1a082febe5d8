"""Request and response schemas for the auth endpoints."""

import re
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

_PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).*$")


class RegisterSchema(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=6, max_length=100)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        if not _PASSWORD_RULE.match(value):
            raise ValueError(
                "Password must contain at least one lowercase letter, one uppercase letter, and one digit"
            )
        return value


class LoginSchema(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshTokenSchema(BaseModel):
    refresh_token: str = Field(min_length=1)


class AuthResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires: datetime
    username: str
    email: str
