from pydantic import BaseModel, EmailStr

from .user import User

class Token(BaseModel):
    access_token: str
    token_type: str

class TokenPayload(BaseModel):
    user_id: int | None = None
    sub: str | None = None
    jti: str | None = None
    exp: int | None = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class LoginResponse(BaseModel):
    """Response for the login endpoint."""
    token: Token
    user: User
