"""
auth.py

인증(Authentication) 및 가입 요청 API 모음.

이 파일은 셀프 가입 요청, 로그인, 내 정보 조회와 같이
사용자 인증 흐름 전반을 담당한다.
JWT Access Token 기반 인증 방식을 사용한다.

주요 기능:
- 가입 요청 (관리자 승인 전까지 로그인 불가)
- 로그인 및 Access Token 발급
- 현재 로그인 사용자 정보 조회

설계 원칙:
- Access Token은 Authorization Header로 전달
- 가입 요청은 사용자 계정이 아니라 "요청" 레코드를 만든다
- 로그인 실패 사유(없는 계정 / 비밀번호 불일치 / 미승인)는 구분하지 않음

관련 파일:
- app.core.security        : 비밀번호 해시 / JWT 생성·검증
- app.core.deps            : 인증 의존성(get_current_user)
- app.services.identity    : 로그인 / 가입 정책
- app.schemas.auth         : 인증 관련 요청/응답

"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_store, get_current_user
from app.core.errors import ServiceError
from app.core.security import create_access_token
from app.db.store import Store
from app.models.user import User
from app.schemas.auth import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse
from app.schemas.user import UserResponse
from app.services.identity import authenticate, register as register_request

router = APIRouter(prefix="/auth", tags=["auth"])


"""
가입 요청 API

- username / email 이 기존 사용자나 대기 중인 요청과 겹치면 400
- 성공 시 PENDING 상태의 가입 요청 생성 (관리자 승인 필요)

"""

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
):
    try:
        request = register_request(
            store,
            username=data.username,
            email=data.email,
            password=data.password,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            reason=data.reason,
        )
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {
        "data": RegisterResponse(
            id=request.id,
            username=request.username,
            email=request.email,
            status=request.status.value,
        )
    }


"""
로그인 API

- username / 비밀번호 인증
- 승인되지 않았거나 비활성화된 계정은 로그인 불가
- Access Token은 응답 바디로 반환

"""

@router.post("/login")
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
):
    try:
        user = authenticate(store, data.username, data.password)
        # 성공 시 last_login_at / LOGIN 로그가 기록되므로 커밋
        db.commit()
    except Exception:
        db.rollback()
        raise

    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return {"data": TokenResponse(access_token=create_access_token(subject=str(user.id)))}


# 현재 로그인 사용자 정보
@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return {"data": UserResponse.model_validate(current_user)}
