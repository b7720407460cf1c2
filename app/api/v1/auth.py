# app/api/v1/auth.py
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.services.auth import decode_access_token, JWTError

security = HTTPBearer()

# Dependency resolving the caller's job seeker / user id from the bearer token
async def get_current_user_id(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    token = credentials.credentials
    try:
        td = decode_access_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if not td.sub:
        raise HTTPException(status_code=401, detail="Invalid token")
    return td.sub
