from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

# bcrypt ignores everything past 72 bytes
PASSWORD_MAX_BYTES = 72

class UserSummary(BaseModel):
    username: str
    first_name: str
    last_name: str
    phone: str

    class Config:
        from_attributes = True

class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    first_name: str
    last_name: str
    phone: str

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes")
        return value

class UserLogin(BaseModel):
    username: str
    password: str

class UserProfile(UserSummary):
    joined_at: datetime
    last_login_at: Optional[datetime] = None

class LoginStamp(BaseModel):
    username: str
    last_login_at: datetime

class SessionClaims(BaseModel):
    username: str
    login_timestamp: datetime

class Token(BaseModel):
    token: str
