from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Request, HTTPException, status
from jose import JWTError, jwt
from jobtrackr.config import get_settings

ALGORITHM = "HS256"
TOKEN_EXPIRE_DAYS = 30
COOKIE_NAME = "session_token"


def create_session_token(user_id: str, expires_in: timedelta = timedelta(days=TOKEN_EXPIRE_DAYS)) -> str:
    expire = datetime.now(timezone.utc) + expires_in
    to_encode = {"sub": user_id, "exp": expire}
    return jwt.encode(to_encode, get_settings().secret_key, algorithm=ALGORITHM)


def decode_session_token(token: str) -> Optional[str]:
    """Return the user id carried by ``token``, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
        return payload.get("sub")
    except JWTError:
        return None


def _extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token

    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


async def get_current_user(request: Request) -> str:
    token = _extract_token(request)
    user_id = decode_session_token(token) if token else None
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user_id
