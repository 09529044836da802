"""
services/users.py

사용자 / 가입 요청 컬렉션 접근 함수 모음.

이 파일은 저장소(Store)에서 사용자와 가입 요청 컬렉션을
읽고 쓰는 저수준 함수와, 저장소를 거치지 않는
부트스트랩 SUPERADMIN 계정 조회를 담당한다.

인증 / 승인 같은 정책 판단은 app.services.identity 에서 수행하고,
이 파일은 활동 로그 / 톤틴 서비스에서도 공통으로 사용된다.

관련 파일:
- app.models.user          : User / Role 레코드
- app.models.registration  : RegistrationRequest 레코드
- app.services.identity    : 인증 / 가입 / 승인 정책

"""

from typing import Iterable

from app.core.config import settings
from app.db.store import Store, USERS, REGISTRATION_REQUESTS
from app.models.registration import RegistrationRequest
from app.models.user import User, Role, UserStatus


# 부트스트랩 SUPERADMIN 전용 ID (저장되는 사용자 ID는 항상 이보다 큼)
SUPERADMIN_ID = 1


def next_id(ids: Iterable[int]) -> int:
    return max([SUPERADMIN_ID, *ids]) + 1


"""
부트스트랩 SUPERADMIN 계정

- 저장소에 저장되지 않는 고정 계정
- SUPERADMIN_PASSWORD 가 설정되지 않으면 None

"""

def bootstrap_superadmin() -> User | None:
    if not settings.SUPERADMIN_PASSWORD:
        return None
    return User(
        id=SUPERADMIN_ID,
        username=settings.SUPERADMIN_USERNAME,
        email=settings.SUPERADMIN_EMAIL,
        first_name="Super",
        last_name="Administrator",
        role=Role.SUPER_ADMIN,
        status=UserStatus.APPROVED,
        tontine_quota=settings.SUPERADMIN_QUOTA,
        active=True,
    )


def load_users(store: Store) -> list[User]:
    return [User.model_validate(raw) for raw in store.get(USERS)]


def save_users(store: Store, users: list[User]) -> None:
    store.set(USERS, [u.to_store() for u in users])


def load_requests(store: Store) -> list[RegistrationRequest]:
    return [RegistrationRequest.model_validate(raw) for raw in store.get(REGISTRATION_REQUESTS)]


def save_requests(store: Store, requests: list[RegistrationRequest]) -> None:
    store.set(REGISTRATION_REQUESTS, [r.to_store() for r in requests])


# 사용자 ID로 조회 (부트스트랩 계정 포함), 없으면 None
def get_user(store: Store, user_id: int) -> User | None:
    if user_id == SUPERADMIN_ID:
        return bootstrap_superadmin()
    return next((u for u in load_users(store) if u.id == user_id), None)
