from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.tontine import PaymentStatus
from app.services.schedule import MonthStatus, TontineStatus


class TontineCreateRequest(BaseModel):
    name: str | None = Field(default=None, examples=["Family 2024"])
    monthly_amount: int = Field(..., ge=0, examples=[25000])
    participant_capacity: int = Field(..., ge=1, examples=[10])
    duration_months: int = Field(..., ge=1, examples=[12])
    description: str = ""
    start_date: date = Field(..., examples=["2024-01-15"])


# 부분 수정: 전달된 필드만 반영 (exclude_unset)
class TontineUpdateRequest(BaseModel):
    name: str | None = None
    monthly_amount: int | None = Field(default=None, ge=0)
    participant_capacity: int | None = Field(default=None, ge=1)
    duration_months: int | None = Field(default=None, ge=1)
    description: str | None = None
    start_date: date | None = None


class ParticipantCreateRequest(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = ""
    parts: int = Field(default=1, gt=0)


class PaymentUpdateRequest(BaseModel):
    participant_id: str
    month: int = Field(..., ge=1)
    status: PaymentStatus


class MonthPaymentsUpdateRequest(BaseModel):
    status: PaymentStatus


class BeneficiaryUpdateRequest(BaseModel):
    participant_id: str


class ParticipantResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    full_name: str
    parts: int
    joined_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FinalizedMonthResponse(BaseModel):
    month: int
    beneficiary_id: str
    amount: int
    finalized_at: datetime


class TontineResponse(BaseModel):
    id: str
    owner_id: int
    name: str
    monthly_amount: int
    participant_capacity: int
    duration_months: int
    description: str
    start_date: date
    end_date: date
    created_at: datetime
    participants: list[ParticipantResponse]
    participant_order: list[str]
    payments: dict[str, bool]
    beneficiaries: dict[int, str]
    finalized_months: list[FinalizedMonthResponse]

    # 계산 값 (라우터에서 채움)
    status: TontineStatus
    current_month: int
    progress_percentage: int
    total_to_collect: int


class ScheduleEntryResponse(BaseModel):
    number: int
    date: date
    period: str
    status: MonthStatus

    model_config = ConfigDict(from_attributes=True)


class MonthSummaryResponse(BaseModel):
    month: int
    date: date
    period: str
    status: MonthStatus
    paid_count: int
    participant_count: int
    payment_ratio: str
    percentage: int
    total_to_collect: int
    collected_amount: int
    outstanding_amount: int
    beneficiary_id: str | None
    beneficiary_name: str | None
    finalized: bool
