"""
services/ledger.py

톤틴(Tontine) 도메인의 비즈니스 로직 모음.

이 파일은 톤틴 생성 / 수정 / 삭제, 참가자 관리,
월별 납부 상태, 월별 수혜자 지정, 정산, 통계 등
톤틴 장부(ledger)의 핵심 규칙을 담당한다.

라우터는 이 파일의 함수를 호출하여
검증/계산 결과를 받아 응답만 처리한다.

설계 원칙:
- 모든 변경은 "컬렉션 전체 읽기 → 수정 → 전체 쓰기" 로 수행
- 변경은 소유자(owner_id == 행위자)만 가능
  - 톤틴이 없으면 NotFoundError, 다른 사람 소유면 ForbiddenError
- 조회는 소유자 기준(owner_id) 또는 전체(None, 관리자 화면)
- 월(month)은 1부터 duration_months 까지만 허용
- 금액 계산은 항상 저장된 참가자 / 납부 상태 기준으로 수행

관련 파일:
- app.models.tontine         : Tontine / Participant 레코드
- app.services.schedule      : 월 일정 / 날짜 계산
- app.services.activity_log  : 활동 로그 기록
- app.routers.tontines       : 톤틴 API

"""

from dataclasses import dataclass
from datetime import date

import structlog

from app.core.errors import (
    CapacityExceededError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    QuotaExceededError,
)
from app.db.store import Store, TONTINES
from app.models.activity_log import ActivityAction
from app.models.common import utcnow
from app.models.registration import RequestStatus
from app.models.tontine import (
    FinalizedMonth,
    Participant,
    PaymentStatus,
    Tontine,
    payment_key,
)
from app.models.user import UserStatus
from app.services.activity_log import record_activity
from app.services.schedule import (
    compute_end_date,
    is_active,
    month_date,
    month_status,
    round_half_up,
)
from app.services.users import SUPERADMIN_ID, get_user, load_requests, load_users, save_users

logger = structlog.get_logger(__name__)


NEW_TONTINE_NAME = "New tontine"

# 생성 / 수정 요청에서 반영하는 필드 (나머지는 서버가 관리)
EDITABLE_FIELDS = (
    "name",
    "monthly_amount",
    "participant_capacity",
    "duration_months",
    "description",
    "start_date",
)


def load_tontines(store: Store) -> list[Tontine]:
    return [Tontine.model_validate(raw) for raw in store.get(TONTINES)]


def save_tontines(store: Store, tontines: list[Tontine]) -> None:
    store.set(TONTINES, [t.to_store() for t in tontines])


"""
톤틴 조회 + 소유권 확인

- 톤틴이 없으면 NotFoundError
- owner_id 가 주어졌는데 소유자가 다르면 ForbiddenError
- owner_id 가 None 이면 소유권 확인 없음 (관리자 전체 조회)

"""

def _find_tontine(tontines: list[Tontine], tontine_id: str, owner_id: int | None) -> Tontine:
    tontine = next((t for t in tontines if t.id == tontine_id), None)
    if tontine is None:
        raise NotFoundError("Tontine not found")
    if owner_id is not None and tontine.owner_id != owner_id:
        raise ForbiddenError("Tontine belongs to another user")
    return tontine


def _find_participant(tontine: Tontine, participant_id: str) -> Participant:
    participant = tontine.find_participant(participant_id)
    if participant is None:
        raise NotFoundError("Participant not found")
    return participant


def validate_month(tontine: Tontine, month: int) -> None:
    if month < 1 or month > tontine.duration_months:
        raise InvalidRequestError(f"month must be between 1 and {tontine.duration_months}")


def _adjust_owner_counter(store: Store, owner_id: int, delta: int) -> None:
    users = load_users(store)
    for user in users:
        if user.id == owner_id:
            user.tontines_created = max(0, user.tontines_created + delta)
            save_users(store, users)
            return


# ---------------------------------------------------------------------------
# 톤틴 CRUD
# ---------------------------------------------------------------------------

def list_tontines(store: Store, owner_id: int | None = None) -> list[Tontine]:
    tontines = load_tontines(store)
    if owner_id is not None:
        tontines = [t for t in tontines if t.owner_id == owner_id]
    return tontines


def get_tontine(store: Store, tontine_id: str, owner_id: int | None = None) -> Tontine:
    return _find_tontine(load_tontines(store), tontine_id, owner_id)


"""
톤틴 생성

- 소유자가 없으면 NotFoundError
- tontines_created >= tontine_quota 이면 QuotaExceededError
  (부트스트랩 SUPERADMIN 은 저장된 카운터가 없어 실제 소유 개수로 판단)
- 참가자 / 납부 / 순서는 항상 빈 상태로 시작
- end_date = start_date + duration_months
- 생성 후 소유자 카운터 +1

"""

def create_tontine(store: Store, data: dict, owner_id: int) -> Tontine:
    owner = get_user(store, owner_id)
    if owner is None:
        raise NotFoundError("User not found")

    tontines = load_tontines(store)

    if owner.id == SUPERADMIN_ID:
        current = sum(1 for t in tontines if t.owner_id == owner.id)
    else:
        current = owner.tontines_created
    if current >= owner.tontine_quota:
        raise QuotaExceededError(f"Tontine quota of {owner.tontine_quota} reached")

    fields = {key: data[key] for key in EDITABLE_FIELDS if key in data}
    fields["name"] = fields.get("name") or NEW_TONTINE_NAME

    tontine = Tontine.model_validate({**fields, "owner_id": owner_id})
    tontine.end_date = compute_end_date(tontine.start_date, tontine.duration_months)

    tontines.append(tontine)
    save_tontines(store, tontines)

    _adjust_owner_counter(store, owner_id, +1)

    record_activity(
        store,
        ActivityAction.CREATE_TONTINE,
        f"Created tontine {tontine.name}",
        tontine_id=tontine.id,
        actor_id=owner_id,
    )
    logger.info("tontine_created", tontine_id=tontine.id, owner_id=owner_id)
    return tontine


"""
톤틴 수정 (부분 수정)

- 전달된 필드만 덮어씀 (shallow merge)
- start_date 또는 duration_months 가 바뀌면 end_date 재계산
- 정원을 현재 참가자 수보다 작게 줄이면 InvalidRequestError

"""

def update_tontine(store: Store, tontine_id: str, changes: dict, owner_id: int) -> Tontine:
    tontines = load_tontines(store)
    tontine = _find_tontine(tontines, tontine_id, owner_id)

    changes = {key: changes[key] for key in EDITABLE_FIELDS if key in changes}
    updated = Tontine.model_validate({**tontine.to_store(), **changes})

    if "participant_capacity" in changes and updated.participant_capacity < len(updated.participants):
        raise InvalidRequestError("participant_capacity cannot be lower than the current participant count")

    if "start_date" in changes or "duration_months" in changes:
        updated.end_date = compute_end_date(updated.start_date, updated.duration_months)

    tontines[tontines.index(tontine)] = updated
    save_tontines(store, tontines)

    record_activity(
        store,
        ActivityAction.UPDATE_TONTINE,
        f"Updated tontine {updated.name}",
        tontine_id=tontine_id,
        actor_id=owner_id,
    )
    logger.info("tontine_updated", tontine_id=tontine_id, owner_id=owner_id, fields=sorted(changes))
    return updated


"""
톤틴 삭제

- 소유자의 컬렉션에서 완전히 제거 (hard delete)
- 소유자 카운터 -1 (0 미만으로 내려가지 않음)

"""

def delete_tontine(store: Store, tontine_id: str, owner_id: int) -> None:
    tontines = load_tontines(store)
    tontine = _find_tontine(tontines, tontine_id, owner_id)

    save_tontines(store, [t for t in tontines if t.id != tontine_id])

    _adjust_owner_counter(store, owner_id, -1)

    record_activity(
        store,
        ActivityAction.DELETE_TONTINE,
        f"Deleted tontine {tontine.name}",
        tontine_id=tontine_id,
        actor_id=owner_id,
    )
    logger.info("tontine_deleted", tontine_id=tontine_id, owner_id=owner_id)


# ---------------------------------------------------------------------------
# 참가자
# ---------------------------------------------------------------------------

"""
참가자 추가

- 정원(participant_capacity)에 도달했으면 CapacityExceededError
- 참가자 목록과 수혜 순서(participant_order) 끝에 추가

"""

def add_participant(store: Store, tontine_id: str, data: dict, owner_id: int) -> Participant:
    tontines = load_tontines(store)
    tontine = _find_tontine(tontines, tontine_id, owner_id)

    if len(tontine.participants) >= tontine.participant_capacity:
        raise CapacityExceededError(
            f"Tontine already has {tontine.participant_capacity} participants"
        )

    participant = Participant(
        first_name=data.get("first_name", ""),
        last_name=data.get("last_name", ""),
        parts=data.get("parts", 1),
    )
    tontine.participants = [*tontine.participants, participant]
    tontine.participant_order = [*tontine.participant_order, participant.id]
    save_tontines(store, tontines)

    record_activity(
        store,
        ActivityAction.ADD_PARTICIPANT,
        f"Added participant {participant.full_name}",
        tontine_id=tontine_id,
        actor_id=owner_id,
    )
    logger.info("participant_added", tontine_id=tontine_id, participant_id=participant.id)
    return participant


"""
참가자 삭제

- 참가자 목록 / 수혜 순서에서 제거
- 해당 참가자의 납부 기록과 수혜자 지정도 함께 정리
- 이미 정산된 달의 지급 기록(finalized_months)은 이력으로 유지

"""

def remove_participant(store: Store, participant_id: str, tontine_id: str, owner_id: int) -> None:
    tontines = load_tontines(store)
    tontine = _find_tontine(tontines, tontine_id, owner_id)
    participant = _find_participant(tontine, participant_id)

    tontine.participants = [p for p in tontine.participants if p.id != participant_id]
    tontine.participant_order = [pid for pid in tontine.participant_order if pid != participant_id]
    tontine.payments = {
        key: paid for key, paid in tontine.payments.items()
        if key.rsplit("-", 1)[0] != participant_id
    }
    tontine.beneficiaries = {
        month: pid for month, pid in tontine.beneficiaries.items() if pid != participant_id
    }
    save_tontines(store, tontines)

    record_activity(
        store,
        ActivityAction.REMOVE_PARTICIPANT,
        f"Removed participant {participant.full_name}",
        tontine_id=tontine_id,
        actor_id=owner_id,
    )
    logger.info("participant_removed", tontine_id=tontine_id, participant_id=participant_id)


# ---------------------------------------------------------------------------
# 월별 납부 / 수혜자
# ---------------------------------------------------------------------------

"""
납부 상태 변경

- payments["<participant_id>-<month>"] = (status == paid)
- 같은 상태를 다시 설정해도 상태는 그대로, 로그는 매번 남김

"""

def set_payment_status(
    store: Store,
    tontine_id: str,
    participant_id: str,
    month: int,
    status: PaymentStatus,
    owner_id: int,
) -> None:
    tontines = load_tontines(store)
    tontine = _find_tontine(tontines, tontine_id, owner_id)
    validate_month(tontine, month)
    participant = _find_participant(tontine, participant_id)

    tontine.payments[payment_key(participant.id, month)] = status == PaymentStatus.PAID
    save_tontines(store, tontines)

    record_activity(
        store,
        ActivityAction.SET_PAYMENT,
        f"Set payment of {participant.full_name} for month {month} to {status.value}",
        tontine_id=tontine_id,
        actor_id=owner_id,
    )
    logger.info(
        "payment_status_set",
        tontine_id=tontine_id,
        participant_id=participant_id,
        month=month,
        status=status.value,
    )


# 한 달 전체 참가자를 일괄 납부 / 미납 처리 (월 초기화 포함)
def set_month_payments(
    store: Store,
    tontine_id: str,
    month: int,
    status: PaymentStatus,
    owner_id: int,
) -> Tontine:
    tontines = load_tontines(store)
    tontine = _find_tontine(tontines, tontine_id, owner_id)
    validate_month(tontine, month)

    for participant in tontine.participants:
        tontine.payments[payment_key(participant.id, month)] = status == PaymentStatus.PAID
    save_tontines(store, tontines)

    record_activity(
        store,
        ActivityAction.SET_MONTH_PAYMENTS,
        f"Set all payments for month {month} to {status.value}",
        tontine_id=tontine_id,
        actor_id=owner_id,
    )
    logger.info("month_payments_set", tontine_id=tontine_id, month=month, status=status.value)
    return tontine


def get_payment_status(
    store: Store,
    tontine_id: str,
    participant_id: str,
    month: int,
    owner_id: int | None = None,
) -> PaymentStatus:
    tontine = get_tontine(store, tontine_id, owner_id)
    validate_month(tontine, month)
    _find_participant(tontine, participant_id)
    return PaymentStatus.PAID if is_paid(tontine, participant_id, month) else PaymentStatus.UNPAID


"""
월 수혜자 지정

- beneficiaries[month] = participant_id
- 한 달에 수혜자는 한 명, 나중 지정이 이전 지정을 덮어씀

"""

def set_beneficiary(store: Store, tontine_id: str, participant_id: str, month: int, owner_id: int) -> None:
    tontines = load_tontines(store)
    tontine = _find_tontine(tontines, tontine_id, owner_id)
    validate_month(tontine, month)
    participant = _find_participant(tontine, participant_id)

    tontine.beneficiaries = {**tontine.beneficiaries, month: participant.id}
    save_tontines(store, tontines)

    record_activity(
        store,
        ActivityAction.SET_BENEFICIARY,
        f"Set {participant.full_name} as beneficiary for month {month}",
        tontine_id=tontine_id,
        actor_id=owner_id,
    )
    logger.info("beneficiary_set", tontine_id=tontine_id, participant_id=participant_id, month=month)


"""
월 수혜자 결정 규칙

1. beneficiaries[month] 에 명시 지정이 있으면 그 참가자
2. 없으면 수혜 순서 participant_order[month - 1]
3. 둘 다 없으면 None

"""

def resolve_beneficiary(tontine: Tontine, month: int) -> Participant | None:
    participant_id = tontine.beneficiaries.get(month)
    if participant_id is None and 0 < month <= len(tontine.participant_order):
        participant_id = tontine.participant_order[month - 1]
    if participant_id is None:
        return None
    return tontine.find_participant(participant_id)


def get_beneficiary(store: Store, tontine_id: str, month: int, owner_id: int | None = None) -> str | None:
    tontine = get_tontine(store, tontine_id, owner_id)
    validate_month(tontine, month)
    beneficiary = resolve_beneficiary(tontine, month)
    return beneficiary.id if beneficiary else None


"""
월 정산(지급 확정)

- 수혜자가 결정되지 않은 달은 InvalidRequestError
- 이미 정산된 달은 InvalidRequestError
- 정산 시점의 납부 합계(collected_amount)를 지급액으로 기록

"""

def finalize_month(store: Store, tontine_id: str, month: int, owner_id: int) -> FinalizedMonth:
    tontines = load_tontines(store)
    tontine = _find_tontine(tontines, tontine_id, owner_id)
    validate_month(tontine, month)

    if month in tontine.finalized_months:
        raise InvalidRequestError(f"Month {month} is already finalized")

    beneficiary = resolve_beneficiary(tontine, month)
    if beneficiary is None:
        raise InvalidRequestError(f"No beneficiary defined for month {month}")

    finalized = FinalizedMonth(
        beneficiary_id=beneficiary.id,
        amount=collected_amount(tontine, month),
        finalized_at=utcnow(),
    )
    tontine.finalized_months = {**tontine.finalized_months, month: finalized}
    save_tontines(store, tontines)

    record_activity(
        store,
        ActivityAction.FINALIZE_MONTH,
        f"Finalized month {month}: {finalized.amount} distributed to {beneficiary.full_name}",
        tontine_id=tontine_id,
        actor_id=owner_id,
    )
    logger.info("month_finalized", tontine_id=tontine_id, month=month, amount=finalized.amount)
    return finalized


# ---------------------------------------------------------------------------
# 금액 계산 (순수 함수)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PaymentRatio:
    paid: int
    total: int
    percentage: int

    @property
    def text(self) -> str:
        return f"{self.paid}/{self.total}"


def monthly_due(tontine: Tontine, participant: Participant) -> int:
    return tontine.monthly_amount * participant.parts


def total_to_collect(tontine: Tontine) -> int:
    return sum(monthly_due(tontine, p) for p in tontine.participants)


def is_paid(tontine: Tontine, participant_id: str, month: int) -> bool:
    return bool(tontine.payments.get(payment_key(participant_id, month), False))


def paid_participants(tontine: Tontine, month: int) -> list[Participant]:
    return [p for p in tontine.participants if is_paid(tontine, p.id, month)]


def collected_amount(tontine: Tontine, month: int) -> int:
    return sum(monthly_due(tontine, p) for p in paid_participants(tontine, month))


def outstanding_amount(tontine: Tontine, month: int) -> int:
    return total_to_collect(tontine) - collected_amount(tontine, month)


def payment_ratio(tontine: Tontine, month: int) -> PaymentRatio:
    total = len(tontine.participants)
    if total == 0:
        return PaymentRatio(paid=0, total=0, percentage=0)
    paid = len(paid_participants(tontine, month))
    return PaymentRatio(paid=paid, total=total, percentage=round_half_up(paid * 100 / total))


"""
한 달 요약

- 달 날짜 / 상태, 납부 비율, 모아야 할 금액 / 모인 금액 / 남은 금액
- 결정된 수혜자와 정산 여부

"""

def month_summary(tontine: Tontine, month: int, today: date | None = None) -> dict:
    validate_month(tontine, month)
    target = month_date(tontine, month)
    ratio = payment_ratio(tontine, month)
    beneficiary = resolve_beneficiary(tontine, month)
    finalized = tontine.finalized_months.get(month)
    return {
        "month": month,
        "date": target,
        "period": target.strftime("%Y-%m"),
        "status": month_status(target, today),
        "paid_count": ratio.paid,
        "participant_count": ratio.total,
        "payment_ratio": ratio.text,
        "percentage": ratio.percentage,
        "total_to_collect": total_to_collect(tontine),
        "collected_amount": collected_amount(tontine, month),
        "outstanding_amount": outstanding_amount(tontine, month),
        "beneficiary_id": beneficiary.id if beneficiary else None,
        "beneficiary_name": beneficiary.full_name if beneficiary else None,
        "finalized": finalized is not None,
    }


# ---------------------------------------------------------------------------
# 통계
# ---------------------------------------------------------------------------

"""
통계 계산

- owner_id 지정 시 해당 사용자 톤틴만 집계
- active: start_date <= 오늘 <= end_date
- 전체 조회(owner_id=None)에서는 사용자 / 가입 요청 통계를 함께 반환

"""

def get_statistics(store: Store, owner_id: int | None = None, today: date | None = None) -> dict:
    tontines = list_tontines(store, owner_id)

    stats = {
        "total_tontines": len(tontines),
        "total_participants": sum(len(t.participants) for t in tontines),
        "total_monthly_amount": sum(t.monthly_amount for t in tontines),
        "active_tontines": sum(1 for t in tontines if is_active(t, today)),
    }

    if owner_id is None:
        users = load_users(store)
        requests = load_requests(store)
        stats.update(
            total_users=len(users),
            active_users=sum(1 for u in users if u.active and u.status == UserStatus.APPROVED),
            pending_requests=sum(1 for r in requests if r.status == RequestStatus.PENDING),
        )

    return stats
