from datetime import date

from pydantic import BaseModel


class ReportParticipantRow(BaseModel):
    id: str
    full_name: str
    parts: int
    due: int
    is_paid: bool


class MonthlyReportResponse(BaseModel):
    tontine_id: str
    tontine_name: str
    monthly_amount: int
    month: int
    month_date: date
    generated_on: date
    participants: list[ReportParticipantRow]
    beneficiary_id: str | None
    beneficiary_name: str
    total_collected: int
    paid_count: int
    amount_to_distribute: int
    outstanding_amount: int
    finalized: bool


# 전체 조회(scope=all)일 때만 사용자 / 가입 요청 통계가 채워짐
class StatisticsResponse(BaseModel):
    total_tontines: int
    total_participants: int
    total_monthly_amount: int
    active_tontines: int
    total_users: int | None = None
    active_users: int | None = None
    pending_requests: int | None = None
