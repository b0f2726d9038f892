from __future__ import annotations
from pydantic import BaseModel, EmailStr, Field
from viemind.schemas.user import UserMe

class RegisterRequest(BaseModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6, max_length=128)
    full_name: str = Field(min_length=2, max_length=100)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class AuthResponse(BaseModel):
    user: UserMe
    token: str

class MessageResponse(BaseModel):
    message: str
