from pydantic import BaseModel


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    role: str | None = "hr"


class SessionUser(BaseModel):
    id: str
    email: str
    name: str
    role: str


class LoginResponse(BaseModel):
    token: str
    expires_in_seconds: int
    user: SessionUser
    home: str


class SessionStatusResponse(BaseModel):
    logged_in: bool
    user: SessionUser | None = None
    home: str
