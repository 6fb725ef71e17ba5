from fastapi import APIRouter, Header, HTTPException

from runconquer.core.errors import InvalidToken, VerificationFailed
from runconquer.schemas.auth import SessionToken, VerificationRequest, VerifyCode
from runconquer.services.verification import issue_token, read_token, verification_codes


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/send-verification")
def send_verification(payload: VerificationRequest):
    verification_codes.issue(payload.email)
    return {"message": "Verification code sent successfully", "email": payload.email}


@router.post("/verify", response_model=SessionToken)
def verify(payload: VerifyCode):
    try:
        verification_codes.verify(payload.email, payload.code)
    except VerificationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SessionToken(token=issue_token(payload.email), email=payload.email)


@router.get("/me")
def whoami(authorization: str | None = Header(default=None)):
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Access token required")
    try:
        email = read_token(authorization.split(" ", 1)[1])
    except InvalidToken as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {"email": email}
