from datetime import date

import pytest

from app.core.errors import InvalidRequestError
from app.models.tontine import PaymentStatus
from app.services import ledger
from app.services.reports import UNDEFINED_BENEFICIARY, generate_monthly_report
from tests.helpers import create_approved_user


def _setup(store):
    user = create_approved_user(store)
    tontine = ledger.create_tontine(
        store,
        {
            "name": "Family 2024",
            "monthly_amount": 25000,
            "participant_capacity": 3,
            "duration_months": 6,
            "start_date": "2024-01-15",
        },
        user.id,
    )
    return user, tontine


def test_monthly_report_totals(store):
    user, tontine = _setup(store)
    p1 = ledger.add_participant(store, tontine.id, {"first_name": "Awa", "last_name": "Diallo"}, user.id)
    p2 = ledger.add_participant(store, tontine.id, {"first_name": "Moussa", "last_name": "Sow", "parts": 2}, user.id)
    ledger.set_payment_status(store, tontine.id, p2.id, 3, PaymentStatus.PAID, user.id)
    ledger.set_beneficiary(store, tontine.id, p2.id, 3, user.id)

    report = generate_monthly_report(store, tontine.id, 3, user.id)

    assert report["tontine_name"] == "Family 2024"
    assert report["month_date"] == date(2024, 3, 15)
    assert [(row["id"], row["due"], row["is_paid"]) for row in report["participants"]] == [
        (p1.id, 25000, False),
        (p2.id, 50000, True),
    ]
    assert report["beneficiary_name"] == "Moussa Sow"
    assert report["total_collected"] == 50000
    assert report["paid_count"] == 1
    assert report["amount_to_distribute"] == 75000
    assert report["outstanding_amount"] == 25000


def test_monthly_report_without_beneficiary(store):
    user, tontine = _setup(store)
    report = generate_monthly_report(store, tontine.id, 1, user.id)

    assert report["participants"] == []
    assert report["beneficiary_id"] is None
    assert report["beneficiary_name"] == UNDEFINED_BENEFICIARY


def test_monthly_report_missing_or_not_owned(store):
    user, tontine = _setup(store)
    other = create_approved_user(store, "other")

    assert generate_monthly_report(store, "missing", 1, user.id) is None
    assert generate_monthly_report(store, tontine.id, 1, other.id) is None
    # 전체 조회는 소유자와 무관
    assert generate_monthly_report(store, tontine.id, 1) is not None


def test_monthly_report_rejects_invalid_month(store):
    user, tontine = _setup(store)
    with pytest.raises(InvalidRequestError):
        generate_monthly_report(store, tontine.id, 7, user.id)
