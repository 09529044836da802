"""
services/identity.py

인증(Authentication) / 가입 요청 / 사용자 관리 비즈니스 로직 모음.

이 파일은 로그인, 셀프 가입 요청, 관리자 승인 / 거절,
사용자 활성화 / quota 변경과 같은 계정 정책을 담당한다.
라우터에서는 이 파일의 함수를 호출하고 결과만 응답으로 변환한다.

주요 기능:
- 로그인 (부트스트랩 SUPERADMIN + 저장된 사용자)
- 가입 요청 생성 (username / email 중복 검사)
- 가입 요청 승인 / 거절
- 사용자 활성화 토글 / 톤틴 생성 한도(quota) 변경

설계 원칙:
- HTTP / FastAPI 의존성 없음 (실패는 app.core.errors 예외로 표현)
- 트랜잭션 제어(commit / rollback)는 라우터에서 수행
- 상태를 바꾸는 모든 행위는 활동 로그에 남김

관련 파일:
- app.services.users       : 사용자 / 가입 요청 컬렉션 접근
- app.services.activity_log: 활동 로그 기록
- app.routers.auth         : 로그인 / 가입 API
- app.routers.admin        : 관리자 API

"""

import secrets

import structlog

from app.core.config import settings
from app.core.errors import InvalidRequestError, NotFoundError, ValidationConflictError
from app.core.security import get_password_hash, verify_password
from app.db.store import Store
from app.models.activity_log import ActivityAction
from app.models.common import utcnow
from app.models.registration import RegistrationRequest, RequestStatus
from app.models.user import User, Role, UserStatus
from app.services.activity_log import record_activity
from app.services.users import (
    bootstrap_superadmin,
    load_requests,
    load_users,
    next_id,
    save_requests,
    save_users,
)

logger = structlog.get_logger(__name__)


"""
로그인 함수

- 부트스트랩 SUPERADMIN 자격 증명은 저장소를 거치지 않고 확인
- 그 외 사용자는 active + approved 상태이고
  bcrypt 해시가 일치해야 로그인 성공
- 성공 시 last_login_at 갱신 + LOGIN 활동 로그 기록
- 실패 시 None 반환 (실패 사유는 구분하지 않음)

"""

def authenticate(store: Store, username: str, password: str) -> User | None:
    superadmin = bootstrap_superadmin()
    if superadmin and username == superadmin.username:
        if secrets.compare_digest(password.encode(), settings.SUPERADMIN_PASSWORD.encode()):
            record_activity(store, ActivityAction.LOGIN, f"Login of user {username}", actor_id=superadmin.id)
            logger.info("login_succeeded", user_id=superadmin.id, username=username)
            return superadmin
        logger.info("login_failed", username=username)
        return None

    users = load_users(store)
    user = next((u for u in users if u.username == username and u.can_login), None)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", username=username)
        return None

    user.last_login_at = utcnow()
    save_users(store, users)

    record_activity(store, ActivityAction.LOGIN, f"Login of user {username}", actor_id=user.id)
    logger.info("login_succeeded", user_id=user.id, username=username)
    return user


def _ensure_identity_available(
    store: Store,
    username: str,
    email: str,
    *,
    ignore_request_id: int | None = None,
) -> None:
    superadmin = bootstrap_superadmin()
    if superadmin and username == superadmin.username:
        raise ValidationConflictError("Username or email already in use")

    if any(u.username == username or u.email == email for u in load_users(store)):
        raise ValidationConflictError("Username or email already in use")

    pending = [
        r for r in load_requests(store)
        if r.status == RequestStatus.PENDING and r.id != ignore_request_id
    ]
    if any(r.username == username or r.email == email for r in pending):
        raise ValidationConflictError("A pending registration already uses this username or email")


"""
가입 요청 생성

- username / email 이 기존 사용자, 부트스트랩 계정,
  대기 중인 다른 가입 요청과 겹치면 ValidationConflictError
- 비밀번호는 요청 시점에 bcrypt 해시로 저장
- PENDING 상태의 요청 1건 추가

"""

def register(
    store: Store,
    *,
    username: str,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone: str | None = None,
    reason: str = "",
) -> RegistrationRequest:
    _ensure_identity_available(store, username, email)

    requests = load_requests(store)
    request = RegistrationRequest(
        id=next_id(r.id for r in requests),
        username=username,
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        reason=reason,
        password_hash=get_password_hash(password),
    )
    requests.append(request)
    save_requests(store, requests)

    record_activity(
        store,
        ActivityAction.REGISTRATION_REQUEST,
        f"New registration request from {request.full_name}",
    )
    logger.info("registration_requested", request_id=request.id, username=username)
    return request


def _find_pending_request(requests: list[RegistrationRequest], request_id: int) -> RegistrationRequest:
    request = next((r for r in requests if r.id == request_id), None)
    if request is None:
        raise NotFoundError("Registration request not found")
    if request.status != RequestStatus.PENDING:
        raise InvalidRequestError(f"Registration request already {request.status.value}")
    return request


"""
가입 요청 승인

- 요청이 없으면 NotFoundError, 이미 처리된 요청이면 InvalidRequestError
- 승인 직전에 username / email 중복을 다시 확인
- 요청 정보로 사용자 생성 (role=user, status=approved, 카운터 0)
- 요청은 APPROVED 로 표시하고 이력으로 남김

"""

def approve_request(store: Store, request_id: int, approver_id: int, quota: int | None = None) -> User:
    requests = load_requests(store)
    request = _find_pending_request(requests, request_id)

    _ensure_identity_available(store, request.username, request.email, ignore_request_id=request.id)

    now = utcnow()
    users = load_users(store)
    user = User(
        id=next_id(u.id for u in users),
        username=request.username,
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
        phone=request.phone,
        role=Role.USER,
        status=UserStatus.APPROVED,
        tontine_quota=settings.DEFAULT_TONTINE_QUOTA if quota is None else quota,
        tontines_created=0,
        active=True,
        created_at=now,
        approved_at=now,
        approved_by=approver_id,
        password_hash=request.password_hash,
    )
    users.append(user)
    save_users(store, users)

    request.status = RequestStatus.APPROVED
    request.processed_at = now
    request.processed_by = approver_id
    save_requests(store, requests)

    record_activity(
        store,
        ActivityAction.APPROVE_USER,
        f"Approved user {request.full_name}",
        actor_id=approver_id,
        target_user_id=user.id,
    )
    logger.info("registration_approved", request_id=request_id, user_id=user.id, approver_id=approver_id)
    return user


"""
가입 요청 거절

- 요청이 없으면 NotFoundError, 이미 처리된 요청이면 InvalidRequestError
- REJECTED 상태와 사유(admin_comment), 처리자를 기록

"""

def reject_request(store: Store, request_id: int, rejecter_id: int, reason: str) -> RegistrationRequest:
    requests = load_requests(store)
    request = _find_pending_request(requests, request_id)

    request.status = RequestStatus.REJECTED
    request.processed_at = utcnow()
    request.processed_by = rejecter_id
    request.admin_comment = reason
    save_requests(store, requests)

    record_activity(
        store,
        ActivityAction.REJECT_USER,
        f"Rejected registration of {request.full_name}: {reason}",
        actor_id=rejecter_id,
    )
    logger.info("registration_rejected", request_id=request_id, rejecter_id=rejecter_id)
    return request


def _find_user_index(users: list[User], user_id: int) -> int:
    for index, user in enumerate(users):
        if user.id == user_id:
            return index
    raise NotFoundError("User not found")


"""
사용자 활성화 / 비활성화

- active=None 이면 현재 상태를 반전(toggle)
- 비활성화 시 status=suspended, 재활성화 시 status=approved
- 로그에 변경 전/후 값을 남김

"""

def set_user_active(store: Store, user_id: int, actor_id: int, active: bool | None = None) -> User:
    users = load_users(store)
    user = users[_find_user_index(users, user_id)]

    before = user.active
    user.active = (not before) if active is None else active
    user.status = UserStatus.APPROVED if user.active else UserStatus.SUSPENDED
    save_users(store, users)

    verb = "Activated" if user.active else "Deactivated"
    record_activity(
        store,
        ActivityAction.SET_USER_ACTIVE,
        f"{verb} user {user.full_name} (active: {before} → {user.active})",
        actor_id=actor_id,
        target_user_id=user.id,
    )
    logger.info("user_active_changed", user_id=user.id, before=before, after=user.active, actor_id=actor_id)
    return user


"""
톤틴 생성 한도(quota) 변경

- 음수 quota 는 InvalidRequestError
- 이미 소유한 톤틴 수보다 작게 줄이는 것은 허용 (새 생성만 막힘)

"""

def set_user_quota(store: Store, user_id: int, new_quota: int, actor_id: int) -> User:
    if new_quota < 0:
        raise InvalidRequestError("Quota must be zero or greater")

    users = load_users(store)
    user = users[_find_user_index(users, user_id)]

    before = user.tontine_quota
    user.tontine_quota = new_quota
    save_users(store, users)

    record_activity(
        store,
        ActivityAction.SET_USER_QUOTA,
        f"Changed tontine quota of {user.full_name}: {before} → {new_quota}",
        actor_id=actor_id,
        target_user_id=user.id,
    )
    logger.info("user_quota_changed", user_id=user.id, before=before, after=new_quota, actor_id=actor_id)
    return user


def list_users(store: Store) -> list[User]:
    return sorted(load_users(store), key=lambda u: u.created_at, reverse=True)


def list_registration_requests(store: Store, status: RequestStatus | None = None) -> list[RegistrationRequest]:
    requests = load_requests(store)
    if status is not None:
        requests = [r for r in requests if r.status == status]
    return sorted(requests, key=lambda r: r.requested_at, reverse=True)
