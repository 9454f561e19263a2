"""
Authentication and authorization.

Tokens are HS256 JWTs carrying the user id in ``sub``. They are accepted from
the ``Authorization: Bearer`` header or, failing that, the ``token`` cookie.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from fastapi import Cookie, Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pymongo.database import Database

import config
from database import get_db
from errors import Forbidden, NotFound, Unauthorized
from helpers import same_id, to_obj_id

RESET_TOKEN_TTL = timedelta(minutes=10)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{config.API_PREFIX}/auth/login", auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(password, hashed)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=config.JWT_EXPIRE_DAYS))
    return jwt.encode({"sub": user_id, "exp": expire}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def new_reset_token() -> Tuple[str, str, datetime]:
    """Return (plain token, stored digest, expiry). Only the digest is persisted."""
    token = secrets.token_hex(20)
    return token, hash_reset_token(token), datetime.now(timezone.utc) + RESET_TOKEN_TTL


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def get_current_user(
    bearer: Optional[str] = Depends(oauth2_scheme),
    token_cookie: Optional[str] = Cookie(None, alias="token"),
    db: Database = Depends(get_db),
) -> Dict:
    token = bearer or token_cookie
    credentials_exception = Unauthorized("Not authorized to access this route")
    if not token or token == "none":
        raise credentials_exception
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise credentials_exception
    user_id = payload.get("sub")
    if user_id is None:
        raise credentials_exception
    try:
        oid = to_obj_id(user_id)
    except NotFound:
        raise credentials_exception
    user = db["user"].find_one({"_id": oid})
    if not user:
        raise credentials_exception
    return user


def authorize(*roles: str):
    def role_dep(current_user: Dict = Depends(get_current_user)) -> Dict:
        if current_user.get("role") not in roles:
            raise Forbidden(f"User role {current_user.get('role')} is not authorized to access this route")
        return current_user
    return role_dep


def is_owner_or_admin(owner_id, user: Dict) -> bool:
    return user.get("role") == "admin" or same_id(owner_id, user.get("_id"))


def ensure_owner(resource: Dict, user: Dict, action: str) -> None:
    if not is_owner_or_admin(resource.get("user"), user):
        raise Forbidden(f"User {user['_id']} is not authorized to {action}")
