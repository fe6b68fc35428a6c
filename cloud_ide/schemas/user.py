from pydantic import BaseModel, EmailStr
from datetime import datetime
from typing import List, Optional


class UserBase(BaseModel):
    name: str
    email: EmailStr


class UserResponse(UserBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RegisterResponse(BaseModel):
    user: UserResponse
    message: str


class RegisteredUser(BaseModel):
    id: int
    email: str
    name: str

    class Config:
        from_attributes = True


class RegisteredUsersResponse(BaseModel):
    success: bool = True
    users: List[RegisteredUser]
