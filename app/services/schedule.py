"""
services/schedule.py

톤틴 월 일정(schedule) 계산 함수 모음.

DB / 저장소에 접근하지 않는 순수 함수만 모아 두었으며,
톤틴 서비스(ledger), 월별 리포트(reports), 라우터에서 공통으로 사용한다.

주요 기능:
- 월 단위 날짜 덧셈 (말일 보정: 1/31 + 1개월 → 2/28 또는 2/29)
- end_date = start_date + duration_months 계산
- k번째 달의 날짜 / 상태(future / current / completed) 계산
- 현재 회차, 진행률, 톤틴 진행 상태 계산

설계 원칙:
- "오늘" 은 항상 인자로 받을 수 있게 하여 테스트에서 고정 가능
- 일정 생성과 "현재 달" 판단이 같은 날짜 계산(add_months)을 사용

"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from dateutil.relativedelta import relativedelta

from app.models.tontine import Tontine


class MonthStatus(str, Enum):
    FUTURE = "future"
    CURRENT = "current"
    COMPLETED = "completed"


class TontineStatus(str, Enum):
    PENDING = "pending"      # 참가자 없음
    UPCOMING = "upcoming"    # 시작 전
    ACTIVE = "active"
    FINISHED = "finished"


@dataclass(frozen=True)
class MonthEntry:
    number: int
    date: date
    status: MonthStatus

    @property
    def period(self) -> str:
        return self.date.strftime("%Y-%m")


def add_months(start: date, months: int) -> date:
    return start + relativedelta(months=months)


def compute_end_date(start: date, duration_months: int) -> date:
    return add_months(start, duration_months)


# k번째 달(1부터 시작)의 날짜
def month_date(tontine: Tontine, month: int) -> date:
    return add_months(tontine.start_date, month - 1)


"""
달 상태 계산

- 해당 달 날짜가 오늘 이후면 future
- 오늘과 같은 연/월이면 current
- 그 외 completed

"""

def month_status(target: date, today: date | None = None) -> MonthStatus:
    today = today or date.today()
    if target > today:
        return MonthStatus.FUTURE
    if (target.year, target.month) == (today.year, today.month):
        return MonthStatus.CURRENT
    return MonthStatus.COMPLETED


def build_schedule(tontine: Tontine, today: date | None = None) -> list[MonthEntry]:
    today = today or date.today()
    entries = []
    for number in range(1, tontine.duration_months + 1):
        target = month_date(tontine, number)
        entries.append(MonthEntry(number=number, date=target, status=month_status(target, today)))
    return entries


# 시작 월부터 오늘까지 몇 번째 달인지 (1 ~ duration 범위로 보정)
def current_month_number(tontine: Tontine, today: date | None = None) -> int:
    today = today or date.today()
    start = tontine.start_date
    diff = (today.year - start.year) * 12 + (today.month - start.month) + 1
    return max(1, min(diff, tontine.duration_months or 1))


def progress_percentage(tontine: Tontine, today: date | None = None) -> int:
    if tontine.duration_months <= 0:
        return 0
    percentage = round_half_up(current_month_number(tontine, today) * 100 / tontine.duration_months)
    return max(0, min(100, percentage))


def is_active(tontine: Tontine, today: date | None = None) -> bool:
    today = today or date.today()
    return tontine.start_date <= today <= tontine.end_date


def tontine_status(tontine: Tontine, today: date | None = None) -> TontineStatus:
    today = today or date.today()
    if not tontine.participants:
        return TontineStatus.PENDING
    if today < tontine.start_date:
        return TontineStatus.UPCOMING
    if today > tontine.end_date:
        return TontineStatus.FINISHED
    return TontineStatus.ACTIVE


def round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
