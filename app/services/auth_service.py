from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from starlette import status

from app.config import settings
from app.models.user import User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_bearer = OAuth2PasswordBearer(tokenUrl="auth/login")

_credentials_error = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not authenticate user",
    headers={"WWW-Authenticate": "Bearer"},
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(email: str, user_id: int, role: str, expires_delta: timedelta) -> str:
    claims = {
        "sub": email,
        "id": user_id,
        "role": role,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def authenticate_user(email: str, password: str, db: Session) -> Optional[User]:
    user = db.query(User).filter(User.email == email).first()
    if user is None or not pwd_context.verify(password, user.password_hash):
        return None
    return user


def decode_access_token(token: str) -> dict:
    """Return the `{email, id, role}` claims of a valid token or raise 401."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise _credentials_error
    if not payload.get("sub") or not payload.get("id"):
        raise _credentials_error
    return {"email": payload["sub"], "id": payload["id"], "role": payload.get("role")}


async def get_current_user(token: Annotated[str, Depends(oauth2_bearer)]) -> dict:
    return decode_access_token(token)
