"""
user.py

사용자(User) 및 권한(Role) 레코드 정의 파일.

이 파일은 톤틴 운영자(사용자)의 기본 정보와
권한(Role), 승인 상태(Status), 톤틴 생성 한도(quota)를 관리한다.

모든 인증, 권한, 톤틴 소유권, 관리자 기능의 기준이 되는 핵심 모델이다.

"""

from datetime import datetime
from enum import Enum

from pydantic import Field

from app.models.common import StoredRecord, utcnow



"""
사용자 권한(Role) 정의

- USER        : 일반 사용자 (본인 톤틴만 관리)
- ADMIN       : 관리자 (가입 승인 / 사용자 관리)
- SUPER_ADMIN : 최고 관리자 (부트스트랩 계정)

"""

class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


"""
사용자 상태(Status) 정의

- PENDING    : 승인 대기
- APPROVED   : 승인됨 (로그인 가능)
- REJECTED   : 거절됨
- SUSPENDED  : 관리자에 의해 비활성화됨

"""

class UserStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"



"""
사용자(User) 레코드

- username / email 은 사용자 + 대기 중인 가입 요청 전체에서 고유
- tontine_quota    : 소유 가능한 최대 톤틴 수
- tontines_created : 현재 소유 중인 톤틴 수 (생성 시 +1, 삭제 시 -1)
- password_hash    : bcrypt 해시 (평문 비밀번호는 저장하지 않음)

"""

class User(StoredRecord):
    id: int
    username: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    phone: str | None = None

    role: Role = Role.USER
    status: UserStatus = UserStatus.APPROVED

    tontine_quota: int = 0
    tontines_created: int = 0
    active: bool = True

    created_at: datetime = Field(default_factory=utcnow)
    approved_at: datetime | None = None
    approved_by: int | None = None
    last_login_at: datetime | None = None

    password_hash: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def can_login(self) -> bool:
        return self.active and self.status == UserStatus.APPROVED
