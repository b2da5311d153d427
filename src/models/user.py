"""
User Pydantic models
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class UserWrite(BaseModel):
    """Body for creating or replacing a user; every field must be sent, null is allowed"""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(..., description="Full name")
    department: Optional[str] = Field(..., description="Department the user belongs to")
    dob: Optional[str] = Field(..., description="Date of birth, stored as given")


class UserCreate(UserWrite):
    pass


class UserUpdateRequest(UserWrite):
    pass


class UserResponse(BaseModel):
    id: int
    name: Optional[str]
    department: Optional[str]
    dob: Optional[str]


class UserListData(BaseModel):
    users: List[UserResponse]


class UserListResponse(BaseModel):
    message: str
    data: UserListData
