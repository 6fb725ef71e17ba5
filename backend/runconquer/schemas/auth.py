from pydantic import BaseModel, Field

from runconquer.schemas.user import EMAIL_PATTERN


class VerificationRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)


class VerifyCode(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    code: str = Field(pattern=r"^\d{6}$")


class SessionToken(BaseModel):
    token: str
    email: str
    verified: bool = True
