"""
security.py

비밀번호 해싱 및 JWT 토큰 생성/검증을 담당하는 보안 유틸리티 모음.

이 파일은 인증(auth) 로직에서 사용하는
저수준(low-level) 보안 기능만을 제공하며,
라우터나 비즈니스 로직은 포함하지 않는다.

주요 기능:
- 비밀번호 해싱 및 검증 (bcrypt)
- JWT Access Token 생성
- Access Token 디코딩 및 검증

설계 원칙:
- 모든 사용자 비밀번호는 사용자별 salt가 포함된 bcrypt 해시로만 저장
- 가입 요청 시점에 해싱하고, 승인 시 해시를 그대로 사용자에게 옮김
- 시간 기반(exp) 만료는 UTC 기준으로 처리

관련 파일:
- app.core.config        : JWT 시크릿 키 / 만료 / bcrypt rounds 설정
- app.core.deps          : 토큰을 실제로 검증하는 인증 의존성
- app.services.identity  : 로그인 / 가입 요청

"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings


# bcrypt 기반 비밀번호 해싱 컨텍스트
# deprecated="auto"로 향후 알고리즘 교체 가능하도록 설정

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


"""
비밀번호 해싱 함수

- 평문 비밀번호를 bcrypt 해시로 변환
- 저장소에는 해시 값만 저장

"""

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


"""
비밀번호 검증 함수

- 사용자가 입력한 평문 비밀번호와
  저장된 해시 값을 비교
- 해시가 비어 있는(레거시) 계정은 항상 실패

"""

def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


"""
Access Token 생성 함수

- subject(sub): 사용자 식별자(user_id, 정수를 문자열로)
- type: access
- exp: 만료 시각 (UTC timestamp)

"""

def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {
        "sub": subject,
        "type": "access",
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


"""
Access Token 디코딩 및 검증 함수

- 서명 / 만료 검증
- 토큰 타입(access) 확인
- subject(user_id)를 정수로 변환하여 반환
- 유효하지 않을 경우 JWTError 발생

"""

def decode_access_token(token: str) -> int:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != "access":
        raise JWTError("Not an access token")
    sub = payload.get("sub")
    if not sub:
        raise JWTError("Missing subject")
    try:
        return int(sub)
    except ValueError:
        raise JWTError("Invalid subject")
