"""
services/reports.py

톤틴 월별 리포트 생성.

한 톤틴의 특정 달에 대해
참가자별 납부액 / 납부 여부, 수혜자, 합계를
화면 / 출력에 바로 쓸 수 있는 형태로 모아 반환한다.

설계 원칙:
- 톤틴이 없거나 (범위 지정 시) 소유자가 다르면 None
- 금액 계산은 app.services.ledger 의 계산 함수를 그대로 사용

"""

from datetime import date

from app.core.errors import ServiceError
from app.db.store import Store
from app.services import ledger
from app.services.schedule import month_date


UNDEFINED_BENEFICIARY = "undefined"


def generate_monthly_report(
    store: Store,
    tontine_id: str,
    month: int,
    owner_id: int | None = None,
) -> dict | None:
    try:
        tontine = ledger.get_tontine(store, tontine_id, owner_id)
    except ServiceError:
        return None

    ledger.validate_month(tontine, month)

    beneficiary = ledger.resolve_beneficiary(tontine, month)
    participants = [
        {
            "id": p.id,
            "full_name": p.full_name,
            "parts": p.parts,
            "due": ledger.monthly_due(tontine, p),
            "is_paid": ledger.is_paid(tontine, p.id, month),
        }
        for p in tontine.participants
    ]

    return {
        "tontine_id": tontine.id,
        "tontine_name": tontine.name,
        "monthly_amount": tontine.monthly_amount,
        "month": month,
        "month_date": month_date(tontine, month),
        "generated_on": date.today(),
        "participants": participants,
        "beneficiary_id": beneficiary.id if beneficiary else None,
        "beneficiary_name": beneficiary.full_name if beneficiary else UNDEFINED_BENEFICIARY,
        "total_collected": ledger.collected_amount(tontine, month),
        "paid_count": sum(1 for row in participants if row["is_paid"]),
        "amount_to_distribute": ledger.total_to_collect(tontine),
        "outstanding_amount": ledger.outstanding_amount(tontine, month),
        "finalized": month in tontine.finalized_months,
    }
