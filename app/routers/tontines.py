"""
tontines.py

톤틴(Tontine) 관리 API 모음.

이 파일은 로그인한 사용자가 본인 톤틴을 만들고 운영하는
모든 엔드포인트를 담당한다.

주요 기능:
- 톤틴 목록 / 생성 / 조회 / 수정 / 삭제
- 월 일정(schedule) 조회
- 참가자 추가 / 삭제
- 참가자별 월 납부 상태 변경 / 조회, 월 일괄 납부 처리
- 월 수혜자 지정 / 조회, 월 요약, 월 정산

설계 원칙:
- 변경 API는 항상 본인 소유 톤틴만 허용 (다른 사용자 소유면 403)
- 조회 API는 기본적으로 본인 톤틴 기준
  - 관리자는 ?scope=all 로 전체 톤틴 조회 가능
- 비즈니스 로직은 service 계층(app.services.ledger)에 위임
- 서비스 예외(ServiceError)는 status_code 그대로 HTTP 오류로 변환

관련 파일:
- app.services.ledger      : 톤틴 장부 규칙
- app.services.schedule    : 월 일정 / 진행 상태 계산
- app.schemas.tontine      : 요청/응답 스키마

"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_store, get_current_user, read_scope
from app.core.errors import ServiceError
from app.db.store import Store
from app.models.tontine import Tontine
from app.models.user import User
from app.schemas.tontine import (
    BeneficiaryUpdateRequest,
    FinalizedMonthResponse,
    MonthPaymentsUpdateRequest,
    MonthSummaryResponse,
    ParticipantCreateRequest,
    ParticipantResponse,
    PaymentUpdateRequest,
    ScheduleEntryResponse,
    TontineCreateRequest,
    TontineResponse,
    TontineUpdateRequest,
)
from app.services import ledger
from app.services.schedule import (
    build_schedule,
    current_month_number,
    progress_percentage,
    tontine_status,
)

router = APIRouter(prefix="/tontines", tags=["tontines"])


def _tontine_response(tontine: Tontine) -> TontineResponse:
    return TontineResponse(
        **tontine.model_dump(exclude={"participants", "finalized_months"}),
        participants=[ParticipantResponse.model_validate(p) for p in tontine.participants],
        finalized_months=[
            FinalizedMonthResponse(month=month, **record.model_dump())
            for month, record in sorted(tontine.finalized_months.items())
        ],
        status=tontine_status(tontine),
        current_month=current_month_number(tontine),
        progress_percentage=progress_percentage(tontine),
        total_to_collect=ledger.total_to_collect(tontine),
    )


def _get_for_read(store: Store, tontine_id: str, owner_id: int | None) -> Tontine:
    try:
        return ledger.get_tontine(store, tontine_id, owner_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("")
def list_tontines(
    scope: str | None = Query(default=None, description="mine(기본) / all(관리자)"),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    tontines = ledger.list_tontines(store, read_scope(scope, user))
    return {
        "data": [_tontine_response(t) for t in tontines],
        "meta": {"count": len(tontines)},
    }


"""
톤틴 생성 API

- 생성 한도(quota)에 도달했으면 409
- 참가자 / 납부 기록은 빈 상태로 생성
- end_date 는 start_date + duration_months 로 자동 계산

"""

@router.post("", status_code=status.HTTP_201_CREATED)
def create_tontine(
    body: TontineCreateRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        tontine = ledger.create_tontine(store, body.model_dump(), user.id)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {"data": _tontine_response(tontine)}


@router.get("/{tontine_id}")
def get_tontine(
    tontine_id: str,
    scope: str | None = Query(default=None),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    tontine = _get_for_read(store, tontine_id, read_scope(scope, user))
    return {"data": _tontine_response(tontine)}


"""
톤틴 수정 API

- 전달된 필드만 수정 (부분 수정)
- 시작일 / 기간이 바뀌면 종료일 재계산
- 정원을 현재 참가자 수보다 작게 줄이면 400

"""

@router.patch("/{tontine_id}")
def update_tontine(
    tontine_id: str,
    body: TontineUpdateRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No changes provided")

    try:
        tontine = ledger.update_tontine(store, tontine_id, changes, user.id)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {"data": _tontine_response(tontine)}


@router.delete("/{tontine_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tontine(
    tontine_id: str,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        ledger.delete_tontine(store, tontine_id, user.id)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return Response(status_code=status.HTTP_204_NO_CONTENT)


# 월 일정 (달 번호 / 날짜 / future·current·completed)
@router.get("/{tontine_id}/schedule")
def get_schedule(
    tontine_id: str,
    scope: str | None = Query(default=None),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    tontine = _get_for_read(store, tontine_id, read_scope(scope, user))
    entries = build_schedule(tontine)
    return {
        "data": [ScheduleEntryResponse.model_validate(e) for e in entries],
        "meta": {
            "current_month": current_month_number(tontine),
            "progress_percentage": progress_percentage(tontine),
            "status": tontine_status(tontine).value,
        },
    }


"""
참가자 추가 API

- 정원에 도달한 톤틴이면 409
- 추가된 참가자는 기본 수혜 순서의 마지막에 들어감

"""

@router.post("/{tontine_id}/participants", status_code=status.HTTP_201_CREATED)
def add_participant(
    tontine_id: str,
    body: ParticipantCreateRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        participant = ledger.add_participant(store, tontine_id, body.model_dump(), user.id)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {"data": ParticipantResponse.model_validate(participant)}


@router.delete("/{tontine_id}/participants/{participant_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_participant(
    tontine_id: str,
    participant_id: str,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        ledger.remove_participant(store, participant_id, tontine_id, user.id)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return Response(status_code=status.HTTP_204_NO_CONTENT)


"""
참가자 월 납부 상태 변경 API

- status: paid / unpaid
- month 는 1 ~ duration_months

"""

@router.put("/{tontine_id}/payments")
def set_payment(
    tontine_id: str,
    body: PaymentUpdateRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        ledger.set_payment_status(store, tontine_id, body.participant_id, body.month, body.status, user.id)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {
        "data": {
            "participant_id": body.participant_id,
            "month": body.month,
            "status": body.status.value,
        }
    }


@router.get("/{tontine_id}/payments")
def get_payment(
    tontine_id: str,
    participant_id: str = Query(...),
    month: int = Query(..., ge=1),
    scope: str | None = Query(default=None),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        payment_status = ledger.get_payment_status(
            store, tontine_id, participant_id, month, read_scope(scope, user)
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return {
        "data": {
            "participant_id": participant_id,
            "month": month,
            "status": payment_status.value,
        }
    }


# 한 달 전체 참가자 일괄 납부 / 초기화
@router.put("/{tontine_id}/months/{month}/payments")
def set_month_payments(
    tontine_id: str,
    month: int,
    body: MonthPaymentsUpdateRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        tontine = ledger.set_month_payments(store, tontine_id, month, body.status, user.id)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {"data": MonthSummaryResponse(**ledger.month_summary(tontine, month))}


@router.get("/{tontine_id}/months/{month}/beneficiary")
def get_beneficiary(
    tontine_id: str,
    month: int,
    scope: str | None = Query(default=None),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        participant_id = ledger.get_beneficiary(store, tontine_id, month, read_scope(scope, user))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return {"data": {"month": month, "participant_id": participant_id}}


"""
월 수혜자 지정 API

- 한 달에 수혜자는 한 명 (다시 지정하면 덮어씀)
- 지정이 없으면 기본 수혜 순서(participant_order)를 따름

"""

@router.put("/{tontine_id}/months/{month}/beneficiary")
def set_beneficiary(
    tontine_id: str,
    month: int,
    body: BeneficiaryUpdateRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        ledger.set_beneficiary(store, tontine_id, body.participant_id, month, user.id)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {"data": {"month": month, "participant_id": body.participant_id}}


@router.get("/{tontine_id}/months/{month}/summary")
def get_month_summary(
    tontine_id: str,
    month: int,
    scope: str | None = Query(default=None),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    tontine = _get_for_read(store, tontine_id, read_scope(scope, user))
    try:
        summary = ledger.month_summary(tontine, month)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return {"data": MonthSummaryResponse(**summary)}


"""
월 정산 API

- 수혜자가 정해지지 않았거나 이미 정산된 달이면 400
- 정산 시점에 모인 금액을 지급액으로 기록

"""

@router.post("/{tontine_id}/months/{month}/finalize")
def finalize_month(
    tontine_id: str,
    month: int,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    user: User = Depends(get_current_user),
):
    try:
        finalized = ledger.finalize_month(store, tontine_id, month, user.id)
        db.commit()
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        db.rollback()
        raise

    return {
        "data": {
            "month": month,
            "beneficiary_id": finalized.beneficiary_id,
            "amount": finalized.amount,
            "finalized_at": finalized.finalized_at,
        }
    }
