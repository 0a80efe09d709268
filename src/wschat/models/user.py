"""
User and auth response models for the REST collaborators.
"""

from typing import Optional

from pydantic import BaseModel


class UserInfo(BaseModel):
    id: str
    username: str
    email: Optional[str] = None


class AuthResponse(BaseModel):
    token: str
    user: UserInfo
