"""

activity_log.py

활동 기록(Activity Log) 레코드 정의 파일.

톤틴 생성 / 수정 / 삭제, 참가자 변경, 납부 / 수혜자 변경,
가입 승인 / 거절, 사용자 관리 같은 업무 이벤트를
최신순으로 최근 N개(기본 100개)까지 보관한다.

설계 원칙:
- 로그는 추가만 하고 수정하지 않는다
- actor(행위자)와 target(대상 사용자)을 명확히 구분
- user_id(행위자 ID)로 사용자별 로그 필터링

"""

from datetime import datetime
from enum import Enum

from pydantic import Field

from app.models.common import StoredRecord, utcnow



#  업무 이벤트 유형 Enum

class ActivityAction(str, Enum):
    LOGIN = "LOGIN"
    REGISTRATION_REQUEST = "REGISTRATION_REQUEST"
    APPROVE_USER = "APPROVE_USER"
    REJECT_USER = "REJECT_USER"
    SET_USER_ACTIVE = "SET_USER_ACTIVE"
    SET_USER_QUOTA = "SET_USER_QUOTA"
    CREATE_TONTINE = "CREATE_TONTINE"
    UPDATE_TONTINE = "UPDATE_TONTINE"
    DELETE_TONTINE = "DELETE_TONTINE"
    ADD_PARTICIPANT = "ADD_PARTICIPANT"
    REMOVE_PARTICIPANT = "REMOVE_PARTICIPANT"
    SET_PAYMENT = "SET_PAYMENT"
    SET_MONTH_PAYMENTS = "SET_MONTH_PAYMENTS"
    SET_BENEFICIARY = "SET_BENEFICIARY"
    FINALIZE_MONTH = "FINALIZE_MONTH"


"""
활동 기록 레코드

- action         : 업무 이벤트 유형
- details        : 사람이 읽는 설명 (변경 전/후 값 포함 가능)
- username       : 표시용 행위자 이름 ("system" = 행위자 없음)
- created_at     : 발생 시각 (UTC)
- tontine_id     : 관련 톤틴 (선택)
- target_user_id : 관리자 행위의 대상 사용자 (선택)
- user_id        : 행위자 ID (사용자별 필터링용, 선택)

"""

class ActivityLog(StoredRecord):
    id: int
    action: str
    details: str = ""
    username: str = "system"
    created_at: datetime = Field(default_factory=utcnow)

    tontine_id: str | None = None
    target_user_id: int | None = None
    user_id: int | None = None
