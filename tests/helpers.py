# tests/helpers.py
import uuid

from app.core.config import settings
from app.db.store import Store
from app.models.user import User
from app.services import identity
from app.services.users import SUPERADMIN_ID


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client, username: str, password: str) -> str:
    r = client.post("/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["data"]["access_token"]


def superadmin_token(client) -> str:
    return login(client, settings.SUPERADMIN_USERNAME, settings.SUPERADMIN_PASSWORD)


def register_payload(username: str | None = None, password: str = "UserPassw0rd!") -> dict:
    username = username or f"user_{uuid.uuid4().hex[:6]}"
    return {
        "username": username,
        "email": f"{username}@test.com",
        "password": password,
        "first_name": "Awa",
        "last_name": "Diallo",
        "phone": "+221 77 000 00 00",
        "reason": "Family savings group",
    }


def setup_admin_and_user(client, *, quota: int | None = None) -> dict:
    """
    SUPERADMIN 토큰 + 승인된 일반 사용자(user_id, token) 세팅
    """
    admin_token = superadmin_token(client)

    payload = register_payload()
    reg = client.post("/auth/register", json=payload)
    assert reg.status_code == 201, reg.text
    request_id = reg.json()["data"]["id"]

    body = {} if quota is None else {"tontine_quota": quota}
    approve = client.post(
        f"/admin/requests/{request_id}/approve",
        headers=auth_header(admin_token),
        json=body,
    )
    assert approve.status_code == 200, approve.text
    user_id = approve.json()["data"]["id"]

    user_token = login(client, payload["username"], payload["password"])

    return {
        "admin_token": admin_token,
        "user_id": user_id,
        "user_token": user_token,
        "username": payload["username"],
        "password": payload["password"],
    }


def create_approved_user(store: Store, username: str = "awa", *, quota: int | None = None) -> User:
    """서비스 테스트용: 가입 요청 → 승인까지 한 번에"""
    request = identity.register(
        store,
        username=username,
        email=f"{username}@test.com",
        password="UserPassw0rd!",
        first_name=username.capitalize(),
        last_name="Test",
    )
    return identity.approve_request(store, request.id, SUPERADMIN_ID, quota)
