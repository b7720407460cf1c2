from datetime import datetime, timedelta
from typing import Optional
from jose import jwt, JWTError
from pydantic import BaseModel
from app.core.config import settings

# Tokens are issued by the account service; this module only needs to read
# them (and mint them in tests and local tooling). Only ``sub`` is used.
ALGORITHM = "HS256"

class TokenData(BaseModel):
    sub: Optional[str] = None

def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.utcnow()
    exp = now + (expires_delta if expires_delta else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": subject, "iat": now, "exp": exp}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)

def decode_access_token(token: str) -> TokenData:
    """Raises jose.JWTError for invalid or expired tokens."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    return TokenData(sub=payload.get("sub"))

__all__ = ["TokenData", "JWTError", "create_access_token", "decode_access_token"]
