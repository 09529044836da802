"""
계정 정책(identity) 서비스 테스트.
- 로그인(부트스트랩 / 저장 사용자), 가입 요청 중복 검사,
  승인 / 거절, 활성화 토글, quota 변경을 저장소 수준에서 확인한다.
"""

import pytest

from app.core.config import settings
from app.core.errors import InvalidRequestError, NotFoundError, ValidationConflictError
from app.models.registration import RequestStatus
from app.models.user import Role, UserStatus
from app.services import identity
from app.services.users import SUPERADMIN_ID, get_user, load_users
from tests.helpers import create_approved_user


def _register(store, username="awa", email=None, password="UserPassw0rd!"):
    return identity.register(
        store,
        username=username,
        email=email or f"{username}@test.com",
        password=password,
        first_name="Awa",
        last_name="Diallo",
    )


def test_bootstrap_superadmin_login(store):
    user = identity.authenticate(store, settings.SUPERADMIN_USERNAME, settings.SUPERADMIN_PASSWORD)
    assert user is not None
    assert user.id == SUPERADMIN_ID
    assert user.role == Role.SUPER_ADMIN

    assert identity.authenticate(store, settings.SUPERADMIN_USERNAME, "wrong") is None


def test_register_creates_one_pending_request_with_hashed_password(store):
    request = _register(store)

    requests = identity.list_registration_requests(store)
    assert [r.id for r in requests] == [request.id]
    assert request.status == RequestStatus.PENDING
    assert request.password_hash and request.password_hash != "UserPassw0rd!"


def test_pending_request_cannot_login(store):
    _register(store)
    assert identity.authenticate(store, "awa", "UserPassw0rd!") is None


def test_register_rejects_duplicates(store):
    _register(store, "awa")

    # 대기 중인 요청과 username / email 중복
    with pytest.raises(ValidationConflictError):
        _register(store, "awa", email="other@test.com")
    with pytest.raises(ValidationConflictError):
        _register(store, "other", email="awa@test.com")

    # 부트스트랩 계정 username
    with pytest.raises(ValidationConflictError):
        _register(store, settings.SUPERADMIN_USERNAME)

    create_approved_user(store, "moussa")
    with pytest.raises(ValidationConflictError):
        _register(store, "moussa", email="new@test.com")


def test_approve_creates_user_and_keeps_request_history(store):
    request = _register(store)
    user = identity.approve_request(store, request.id, SUPERADMIN_ID, quota=5)

    assert user.username == "awa"
    assert user.role == Role.USER
    assert user.status == UserStatus.APPROVED
    assert user.tontine_quota == 5
    assert user.tontines_created == 0
    assert user.approved_by == SUPERADMIN_ID
    assert user.password_hash == request.password_hash

    stored = identity.list_registration_requests(store, RequestStatus.APPROVED)
    assert [r.id for r in stored] == [request.id]

    with pytest.raises(InvalidRequestError):
        identity.approve_request(store, request.id, SUPERADMIN_ID)

    logged_in = identity.authenticate(store, "awa", "UserPassw0rd!")
    assert logged_in is not None
    assert get_user(store, user.id).last_login_at is not None


def test_approve_uses_default_quota(store):
    request = _register(store)
    user = identity.approve_request(store, request.id, SUPERADMIN_ID)
    assert user.tontine_quota == settings.DEFAULT_TONTINE_QUOTA


def test_approve_unknown_request(store):
    with pytest.raises(NotFoundError):
        identity.approve_request(store, 42, SUPERADMIN_ID)


def test_reject_request(store):
    request = _register(store)
    rejected = identity.reject_request(store, request.id, SUPERADMIN_ID, "Unknown applicant")

    assert rejected.status == RequestStatus.REJECTED
    assert rejected.admin_comment == "Unknown applicant"
    assert rejected.processed_by == SUPERADMIN_ID
    assert load_users(store) == []

    with pytest.raises(InvalidRequestError):
        identity.reject_request(store, request.id, SUPERADMIN_ID, "again")

    # 거절된 요청의 username 은 다시 사용할 수 있음
    _register(store)


def test_user_ids_start_after_bootstrap(store):
    first = create_approved_user(store, "awa")
    second = create_approved_user(store, "moussa")
    assert first.id == 2
    assert second.id == 3


def test_set_user_active_toggle_and_login(store):
    user = create_approved_user(store)

    deactivated = identity.set_user_active(store, user.id, SUPERADMIN_ID)
    assert deactivated.active is False
    assert deactivated.status == UserStatus.SUSPENDED
    assert identity.authenticate(store, "awa", "UserPassw0rd!") is None

    reactivated = identity.set_user_active(store, user.id, SUPERADMIN_ID)
    assert reactivated.active is True
    assert reactivated.status == UserStatus.APPROVED

    explicit = identity.set_user_active(store, user.id, SUPERADMIN_ID, active=True)
    assert explicit.active is True

    with pytest.raises(NotFoundError):
        identity.set_user_active(store, 99, SUPERADMIN_ID)


def test_set_user_quota(store):
    user = create_approved_user(store)

    updated = identity.set_user_quota(store, user.id, 10, SUPERADMIN_ID)
    assert updated.tontine_quota == 10
    assert get_user(store, user.id).tontine_quota == 10

    with pytest.raises(InvalidRequestError):
        identity.set_user_quota(store, user.id, -1, SUPERADMIN_ID)
    with pytest.raises(NotFoundError):
        identity.set_user_quota(store, 99, 1, SUPERADMIN_ID)
