from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class RegisterUser(BaseModel):
    email: EmailStr
    full_name: str = Field(alias="fullName")
    password: str

    class Config:
        populate_by_name = True


class LoginUser(BaseModel):
    email: EmailStr
    password: str


class Session(BaseModel):
    """Identity of a signed-in caller, as handed out by the auth subsystem."""
    user_id: str
    email: Optional[str] = None
    access_token: str
    token_type: str = "bearer"
