"""
reports.py

리포트 / 통계 / 활동 기록 조회 API 모음.

주요 기능:
- 톤틴 월별 리포트 (참가자별 납부 현황 + 수혜자 + 합계)
- 톤틴 통계 (본인 기준, 관리자는 ?scope=all 로 전체)
- 활동 기록 조회 (본인 기준, 관리자는 ?scope=all 로 전체)

관련 파일:
- app.services.reports       : 월별 리포트 생성
- app.services.ledger        : 통계 계산
- app.services.activity_log  : 활동 기록 조회

"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_store, get_current_user, read_scope
from app.core.errors import ServiceError
from app.db.store import Store
from app.models.user import User
from app.schemas.activity import ActivityLogResponse
from app.schemas.report import MonthlyReportResponse, StatisticsResponse
from app.services import ledger
from app.services.activity_log import list_activity_logs
from app.services.reports import generate_monthly_report

router = APIRouter(prefix="/reports", tags=["reports"])


"""
월별 리포트 API

- 톤틴이 없거나 본인 소유가 아니면 404 (scope=all 관리자는 전체)
- 범위를 벗어난 month 는 400

"""

@router.get("/monthly/{tontine_id}/{month}")
def monthly_report(
    tontine_id: str,
    month: int,
    scope: str | None = Query(default=None),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        report = generate_monthly_report(store, tontine_id, month, read_scope(scope, user))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    if report is None:
        raise HTTPException(status_code=404, detail="Tontine not found")

    return {"data": MonthlyReportResponse(**report)}


@router.get("/statistics")
def statistics(
    scope: str | None = Query(default=None),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return {"data": StatisticsResponse(**ledger.get_statistics(store, read_scope(scope, user)))}


@router.get("/logs")
def activity_logs(
    limit: int = Query(default=50, ge=1, le=100),
    scope: str | None = Query(default=None),
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        logs = list_activity_logs(store, limit=limit, owner_id=read_scope(scope, user))
        # 전체 조회 시 예시 로그가 채워질 수 있으므로 커밋
        db.commit()
    except Exception:
        db.rollback()
        raise

    return {
        "data": [ActivityLogResponse.model_validate(log) for log in logs],
        "meta": {"count": len(logs), "limit": limit},
    }
