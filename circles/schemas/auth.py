import re
from typing import Annotated
from pydantic import BaseModel, EmailStr, StringConstraints, field_validator

from circles.schemas.common import CamelModel

Username = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=3, max_length=120)]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=120)]

PASSWORD_RULES = [
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"\d"), "Password must contain at least one number"),
    (re.compile(r"[@$!%*?&#]"), "Password must contain at least one special character"),
]


def check_password_strength(password: str) -> str:
    if not 8 <= len(password) <= 20:
        raise ValueError("Password must be between 8 and 20 characters")
    for pattern, message in PASSWORD_RULES:
        if not pattern.search(password):
            raise ValueError(message)
    return password


class RegisterRequest(CamelModel):
    username: Username
    email: EmailStr
    password: str
    name: Name

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v)


class LoginRequest(BaseModel):
    username: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=1)]
    password: Annotated[str, StringConstraints(min_length=1)]


class ChangePasswordRequest(CamelModel):
    password: Annotated[str, StringConstraints(min_length=1)]
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return check_password_strength(v)


class Token(CamelModel):
    access_token: str
