"""
registration.py

가입 요청(RegistrationRequest) 레코드 정의 파일.

셀프 가입은 바로 사용자를 만들지 않고 요청으로 저장되며,
관리자가 승인하면 사용자(User)가 생성되고 요청은 APPROVED로,
거절하면 사유와 함께 REJECTED로 남는다(이력은 삭제하지 않음).

"""

from datetime import datetime
from enum import Enum

from pydantic import Field

from app.models.common import StoredRecord, utcnow


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RegistrationRequest(StoredRecord):
    id: int
    username: str
    email: str
    first_name: str = ""
    last_name: str = ""
    phone: str | None = None
    reason: str = ""

    password_hash: str | None = None

    status: RequestStatus = RequestStatus.PENDING
    requested_at: datetime = Field(default_factory=utcnow)
    processed_at: datetime | None = None
    processed_by: int | None = None
    admin_comment: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
