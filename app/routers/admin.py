"""
admin.py

관리자 전용 API 모음.

이 파일은 가입 요청 처리, 사용자 관리, 전체 활동 기록 / 통계 /
방문자 현황 조회와 같이 "관리자 권한" 기능만을 담당한다.

주요 기능:
- 가입 요청 목록 조회 / 승인 / 거절
- 사용자 목록 조회, 활성화 토글, 톤틴 생성 한도(quota) 변경
- 전체 활동 기록 / 통계 조회
- 방문자 기록 / 방문 통계 조회

설계 원칙:
- 모든 엔드포인트는 관리자 권한(get_current_admin)을 요구
- 비즈니스 로직은 service 계층(app.services.identity 등)에 위임
- 상태 변경은 모두 활동 기록으로 남김 (서비스 계층에서 처리)

관련 파일:
- app.services.identity      : 승인 / 거절 / 사용자 관리 정책
- app.services.activity_log  : 활동 기록 조회
- app.services.visitors      : 방문자 기록 / 통계
- app.schemas.user           : 요청/응답 스키마

"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_store, get_current_admin
from app.core.errors import ServiceError
from app.db.store import Store
from app.models.registration import RequestStatus
from app.models.user import User
from app.schemas.activity import ActivityLogResponse, VisitorResponse, VisitorStatsResponse
from app.schemas.report import StatisticsResponse
from app.schemas.user import (
    ActiveUpdate,
    ApproveRequest,
    QuotaUpdate,
    RegistrationRequestResponse,
    RejectRequest,
    UserResponse,
)
from app.services import identity, ledger
from app.services.activity_log import list_activity_logs
from app.services.visitors import list_visitors, visitor_stats

router = APIRouter(prefix="/admin", tags=["admin"])


# 가입 요청 목록 (status 미지정 시 전체, 최신순)
@router.get("/requests")
def list_requests(
    status: RequestStatus | None = Query(default=None),
    store: Store = Depends(get_store),
    _: User = Depends(get_current_admin),
):
    requests = identity.list_registration_requests(store, status)
    return {
        "data": [RegistrationRequestResponse.model_validate(r) for r in requests],
        "meta": {"count": len(requests)},
    }


"""
가입 요청 승인 API

- 대기 중(PENDING) 요청만 승인 가능 (이미 처리된 요청은 400)
- 승인 시 사용자 계정 생성 (role=user, 기본 quota 또는 지정 quota)

"""

@router.post("/requests/{request_id}/approve")
def approve_request(
    request_id: int,
    body: ApproveRequest | None = None,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    current_admin: User = Depends(get_current_admin),
):
    quota = body.tontine_quota if body else None
    try:
        user = identity.approve_request(store, request_id, current_admin.id, quota)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {
        "message": "User approved",
        "data": UserResponse.model_validate(user),
    }


@router.post("/requests/{request_id}/reject")
def reject_request(
    request_id: int,
    body: RejectRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    current_admin: User = Depends(get_current_admin),
):
    try:
        request = identity.reject_request(store, request_id, current_admin.id, body.reason)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {
        "message": "Registration rejected",
        "data": RegistrationRequestResponse.model_validate(request),
    }


@router.get("/users")
def list_users(
    store: Store = Depends(get_store),
    _: User = Depends(get_current_admin),
):
    users = identity.list_users(store)
    return {
        "data": [UserResponse.model_validate(u) for u in users],
        "meta": {"count": len(users)},
    }


"""
사용자 활성화 / 비활성화 API

- active 를 생략하면 현재 상태를 반전
- 비활성화된 사용자는 로그인 및 기존 토큰 사용 불가

"""

@router.patch("/users/{user_id}/active")
def set_user_active(
    user_id: int,
    body: ActiveUpdate | None = None,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    current_admin: User = Depends(get_current_admin),
):
    # 자기 자신 비활성화 금지
    if user_id == current_admin.id:
        raise HTTPException(status_code=400, detail="Cannot change your own active state")

    try:
        user = identity.set_user_active(store, user_id, current_admin.id, body.active if body else None)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {
        "message": "User activated" if user.active else "User deactivated",
        "data": UserResponse.model_validate(user),
    }


@router.patch("/users/{user_id}/quota")
def set_user_quota(
    user_id: int,
    body: QuotaUpdate,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    current_admin: User = Depends(get_current_admin),
):
    try:
        user = identity.set_user_quota(store, user_id, body.tontine_quota, current_admin.id)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {
        "message": "Quota updated",
        "data": UserResponse.model_validate(user),
    }


@router.get("/logs")
def list_logs(
    limit: int = Query(default=50, ge=1, le=100),
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    _: User = Depends(get_current_admin),
):
    try:
        logs = list_activity_logs(store, limit=limit)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return {
        "data": [ActivityLogResponse.model_validate(log) for log in logs],
        "meta": {"count": len(logs), "limit": limit},
    }


@router.get("/statistics")
def statistics(
    store: Store = Depends(get_store),
    _: User = Depends(get_current_admin),
):
    return {"data": StatisticsResponse(**ledger.get_statistics(store))}


@router.get("/visitors")
def visitors(
    limit: int = Query(default=50, ge=1, le=100),
    store: Store = Depends(get_store),
    _: User = Depends(get_current_admin),
):
    rows = list_visitors(store, limit)
    return {
        "data": [VisitorResponse.model_validate(v) for v in rows],
        "meta": {"count": len(rows), "limit": limit},
    }


@router.get("/visitors/stats")
def visitors_stats(
    store: Store = Depends(get_store),
    _: User = Depends(get_current_admin),
):
    return {"data": VisitorStatsResponse(**visitor_stats(store))}
