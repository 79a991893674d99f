# fims/core/security.py

"""
호출자(caller) 식별을 담당하는 모듈입니다.

- JWT(JSON Web Token) 생성 및 검증.
- OAuth2 Bearer 스키마(선택적)를 사용하여 현재 호출자를 획득합니다.

쓰기 작업의 거부 여부는 HierarchyStore가 판단합니다.
여기서는 토큰이 없거나 유효하지 않으면 None을 반환할 뿐입니다.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from jose import jwt, JWTError
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel

from fims.core.config import settings
from fims import API_PREFIX

logger = logging.getLogger(__name__)


class Caller(BaseModel):
    """토큰에서 확인된 호출자 정보"""
    subject: str


# --- OAuth2 스키마 설정 ---
# 로그인 엔드포인트는 제공하지 않으므로 auto_error=False로 두고 토큰이 없으면 None을 받습니다.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/auth/token", auto_error=False)


# --- JWT 토큰 생성 및 검증 ---
def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Access Token을 생성합니다.
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": subject, "exp": expire}
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)
    logger.debug(f"Access token created for {subject}, expires at: {expire}")
    return encoded_jwt


def decode_caller(token: Optional[str]) -> Optional[Caller]:
    """토큰을 검증해 호출자를 반환합니다. 없거나 유효하지 않으면 None."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        return None
    subject = payload.get("sub")
    if not subject:
        return None
    return Caller(subject=subject)


async def get_current_caller(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[Caller]:
    """
    요청의 Bearer 토큰에서 현재 호출자를 가져옵니다.
    """
    return decode_caller(token)
