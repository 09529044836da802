"""
tontine.py

톤틴(Tontine) / 참가자(Participant) 레코드 정의 파일.

톤틴은 매달 모든 참가자가 정해진 금액을 내고
그 달의 수혜자(beneficiary) 한 명이 모인 금액을 받는 순환 저축 모임이다.

저장 구조:
- participants       : 참가자 목록 (톤틴에만 속함)
- payments           : "<participant_id>-<month>" → 납부 여부(bool)
- participant_order  : 기본 수혜 순서 (month k → order[k-1])
- beneficiaries      : month → participant_id (순서보다 우선하는 명시 지정)
- finalized_months   : month → 정산(지급) 기록

설계 원칙:
- 읽을 때마다 검증하며 누락 / 잘못된 값은 기본값으로 보정
  (숫자 → 0, 목록 / 맵 → 빈 값, 이름 → 기본 이름, 날짜 → 오늘)
- end_date 는 start_date + duration_months 로 계산되는 파생 값

"""

import uuid
from datetime import date, datetime
from enum import Enum

from pydantic import Field, TypeAdapter, ValidationError, field_validator

from app.models.common import StoredRecord, utcnow


DEFAULT_TONTINE_NAME = "Untitled tontine"

_datetime_adapter = TypeAdapter(datetime)


class PaymentStatus(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"


def new_record_id() -> str:
    return uuid.uuid4().hex


def payment_key(participant_id: str, month: int) -> str:
    return f"{participant_id}-{month}"


def _to_int(value, default: int = 0) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _to_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    return date.today()


def _to_datetime(value) -> datetime:
    try:
        return _datetime_adapter.validate_python(value)
    except ValidationError:
        return utcnow()


"""
참가자(Participant) 레코드

- parts : 지분(양의 정수). 월 납부액 = monthly_amount × parts

"""

class Participant(StoredRecord):
    id: str = Field(default_factory=new_record_id)
    first_name: str = ""
    last_name: str = ""
    parts: int = 1
    joined_at: datetime = Field(default_factory=utcnow)

    @field_validator("parts", mode="before")
    @classmethod
    def _normalize_parts(cls, v):
        parts = _to_int(v, 1)
        return parts if parts > 0 else 1

    @field_validator("joined_at", mode="before")
    @classmethod
    def _normalize_joined_at(cls, v):
        return _to_datetime(v)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class FinalizedMonth(StoredRecord):
    beneficiary_id: str
    amount: int = 0
    finalized_at: datetime = Field(default_factory=utcnow)


class Tontine(StoredRecord):
    id: str = Field(default_factory=new_record_id)
    owner_id: int = 0

    name: str = DEFAULT_TONTINE_NAME
    monthly_amount: int = 0
    participant_capacity: int = 0
    duration_months: int = 0
    description: str = ""

    start_date: date = Field(default_factory=date.today)
    end_date: date = Field(default_factory=date.today)
    created_at: datetime = Field(default_factory=utcnow)

    participants: list[Participant] = Field(default_factory=list)
    payments: dict[str, bool] = Field(default_factory=dict)
    participant_order: list[str] = Field(default_factory=list)
    beneficiaries: dict[int, str] = Field(default_factory=dict)
    finalized_months: dict[int, FinalizedMonth] = Field(default_factory=dict)

    @field_validator("owner_id", mode="before")
    @classmethod
    def _normalize_owner(cls, v):
        return _to_int(v, 0)

    @field_validator("monthly_amount", "participant_capacity", "duration_months", mode="before")
    @classmethod
    def _normalize_counts(cls, v):
        return max(0, _to_int(v, 0))

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, v):
        if isinstance(v, str) and v.strip():
            return v
        return DEFAULT_TONTINE_NAME

    @field_validator("description", mode="before")
    @classmethod
    def _normalize_description(cls, v):
        return v if isinstance(v, str) else ""

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _normalize_dates(cls, v):
        return _to_date(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def _normalize_created_at(cls, v):
        return _to_datetime(v)

    @field_validator("participants", "participant_order", mode="before")
    @classmethod
    def _normalize_lists(cls, v):
        return v if isinstance(v, list) else []

    @field_validator("payments", "beneficiaries", "finalized_months", mode="before")
    @classmethod
    def _normalize_maps(cls, v):
        return v if isinstance(v, dict) else {}

    def find_participant(self, participant_id: str) -> Participant | None:
        return next((p for p in self.participants if p.id == participant_id), None)
