from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.registration import RequestStatus
from app.models.user import Role, UserStatus


# 🔹 유저 응답용 (password_hash 제외)
class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    phone: str | None
    role: Role
    status: UserStatus
    tontine_quota: int
    tontines_created: int
    active: bool
    created_at: datetime
    approved_at: datetime | None
    last_login_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class RegistrationRequestResponse(BaseModel):
    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    phone: str | None
    reason: str
    status: RequestStatus
    requested_at: datetime
    processed_at: datetime | None
    processed_by: int | None
    admin_comment: str | None

    model_config = ConfigDict(from_attributes=True)


# 🔹 관리자 승인 / 거절 / 사용자 관리 요청용
class ApproveRequest(BaseModel):
    tontine_quota: int | None = Field(default=None, ge=0)


class RejectRequest(BaseModel):
    reason: str = Field(min_length=1)


class ActiveUpdate(BaseModel):
    # None 이면 현재 상태 반전
    active: bool | None = None


class QuotaUpdate(BaseModel):
    tontine_quota: int
