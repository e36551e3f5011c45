"""Auth - verify bearer tokens issued by the identity provider.

Đăng ký / đăng nhập do identity provider bên ngoài xử lý; service này chỉ
giải mã JWT và lấy learner id từ claim `sub`.
"""

from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .settings import JWT_ALGORITHM, SECRET_KEY

ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Ký token với cùng secret (dùng cho dev tooling và test)."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)
    return encoded_jwt


def decode_user_id(token: str) -> Optional[str]:
    try:
        payload = jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError:
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Giải mã JWT token và trả về learner id hiện tại"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise credentials_exception

    user_id = decode_user_id(credentials.credentials)
    if user_id is None:
        raise credentials_exception
    return user_id


def get_user_id_from_authorization_header(authorization: Optional[str]) -> Optional[str]:
    """Trích `user_id` từ header Authorization (Bearer token).

    Dùng cho các endpoint **cho phép anonymous** (không bắt buộc đăng nhập).
    Trả về `None` nếu không có/không hợp lệ, không raise lỗi.
    """
    if not authorization:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return decode_user_id(parts[1])


__all__ = [
    "get_current_user_id",
    "get_user_id_from_authorization_header",
    "create_access_token",
    "decode_user_id",
]
