"""
인증 기본 플로우 통합 테스트.
- 가입 요청 → 승인 전 로그인 차단 → 관리자 승인 → 로그인 성공,
  중복 가입 차단, 잘못된 토큰 / 비활성화 사용자의 토큰 차단까지 검증한다.
"""

from app.core.security import create_access_token
from tests.helpers import auth_header, login, register_payload, setup_admin_and_user, superadmin_token


def test_register_approve_login_flow(client):
    admin_token = superadmin_token(client)

    payload = register_payload("awa")
    reg = client.post("/auth/register", json=payload)
    assert reg.status_code == 201, reg.text
    assert reg.json()["data"]["status"] == "pending"
    request_id = reg.json()["data"]["id"]

    # 승인 전 로그인 차단(401)
    pending_login = client.post("/auth/login", json={"username": "awa", "password": payload["password"]})
    assert pending_login.status_code == 401
    assert pending_login.json()["detail"] == "Invalid credentials"

    approve = client.post(f"/admin/requests/{request_id}/approve", headers=auth_header(admin_token))
    assert approve.status_code == 200, approve.text
    assert approve.json()["data"]["role"] == "user"

    user_token = login(client, "awa", payload["password"])

    me = client.get("/auth/me", headers=auth_header(user_token))
    assert me.status_code == 200, me.text
    body = me.json()["data"]
    assert body["username"] == "awa"
    assert body["full_name"] == "Awa Diallo"
    assert body["last_login_at"] is not None
    assert "password_hash" not in body


def test_register_duplicate_is_rejected(client):
    payload = register_payload("awa")
    assert client.post("/auth/register", json=payload).status_code == 201

    dup = client.post("/auth/register", json={**payload, "email": "other@test.com"})
    assert dup.status_code == 400, dup.text


def test_register_validates_input(client):
    bad = client.post("/auth/register", json={**register_payload("awa"), "password": "short"})
    assert bad.status_code == 422


def test_superadmin_me(client):
    token = superadmin_token(client)
    me = client.get("/auth/me", headers=auth_header(token))
    assert me.status_code == 200
    assert me.json()["data"]["role"] == "super_admin"


def test_wrong_password_and_missing_token(client):
    r = client.post("/auth/login", json={"username": "superadmin", "password": "nope"})
    assert r.status_code == 401

    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers=auth_header("not-a-jwt")).status_code == 401

    # 존재하지 않는 사용자 ID를 가진 토큰
    ghost = create_access_token(subject="999")
    assert client.get("/auth/me", headers=auth_header(ghost)).status_code == 401


def test_deactivated_user_token_is_rejected(client):
    ctx = setup_admin_and_user(client)

    r = client.patch(
        f"/admin/users/{ctx['user_id']}/active",
        headers=auth_header(ctx["admin_token"]),
        json={"active": False},
    )
    assert r.status_code == 200, r.text
    assert r.json()["data"]["status"] == "suspended"

    assert client.get("/auth/me", headers=auth_header(ctx["user_token"])).status_code == 403

    relogin = client.post("/auth/login", json={"username": ctx["username"], "password": ctx["password"]})
    assert relogin.status_code == 401
