"""
deps.py

FastAPI 의존성(Dependency) 모음.

- get_db            : 요청 단위 DB 세션
- get_store         : 세션 위의 key/value 저장소
- get_current_user  : Bearer 토큰 → 로그인 가능한 사용자
- get_optional_user : 토큰이 없거나 잘못되어도 None 으로 통과 (방문 기록용)
- require_min_role  : 최소 권한 확인 (user < admin < super_admin)
- read_scope        : ?scope=mine|all 조회 범위 → owner_id

"""

from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.security import decode_access_token
from app.db.session import SessionLocal
from app.db.store import Store
from app.models.user import User, Role
from app.services.users import get_user

# Swagger Authorize에서 "Bearer 토큰" 입력받는 스키마
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> Store:
    return Store(db)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    store: Store = Depends(get_store),
) -> User:
    if cred is None:
        raise _unauthorized("Not authenticated")

    try:
        user_id = decode_access_token(cred.credentials)
    except JWTError:
        raise _unauthorized("Could not validate credentials")

    user = get_user(store, user_id)
    if not user:
        raise _unauthorized("User not found")

    # 비활성화 / 미승인 사용자는 기존 토큰도 사용 불가
    if not user.can_login:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is not active")

    return user


def get_optional_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    store: Store = Depends(get_store),
) -> User | None:
    if cred is None:
        return None
    try:
        user = get_user(store, decode_access_token(cred.credentials))
    except JWTError:
        return None
    return user if user and user.can_login else None


ROLE_LEVEL = {
    Role.USER: 1,
    Role.ADMIN: 2,
    Role.SUPER_ADMIN: 3,
}


def is_admin(user: User) -> bool:
    return ROLE_LEVEL[user.role] >= ROLE_LEVEL[Role.ADMIN]


def require_min_role(min_role: Role):
    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if ROLE_LEVEL[current_user.role] < ROLE_LEVEL[min_role]:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role >= {min_role.value}",
            )
        return current_user
    return _checker

get_current_admin = require_min_role(Role.ADMIN)


"""
조회 범위 결정 (?scope=)

- 기본(mine): 본인 데이터만 (owner_id = 현재 사용자)
- all: 관리자만 허용, 전체 데이터 (owner_id = None)

"""

def read_scope(scope: str | None, user: User) -> int | None:
    if scope is None or scope == "mine":
        return user.id
    if scope != "all":
        raise HTTPException(status_code=400, detail="scope must be 'mine' or 'all'")
    if not is_admin(user):
        raise HTTPException(status_code=403, detail=f"Requires role >= {Role.ADMIN.value}")
    return None
