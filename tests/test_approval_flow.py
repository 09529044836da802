"""
관리자 승인 / 사용자 관리 통합 테스트.
- 가입 요청 목록 / 승인 / 거절, 처리된 요청 재처리 차단,
  일반 사용자의 관리자 API 접근 차단, quota / 활성화 변경,
  관리자 로그 / 통계 / 방문자 조회를 검증한다.
"""

from tests.helpers import auth_header, register_payload, setup_admin_and_user, superadmin_token


def test_pending_requests_listed_and_rejected(client):
    admin_token = superadmin_token(client)

    reg = client.post("/auth/register", json=register_payload("moussa"))
    request_id = reg.json()["data"]["id"]

    pending = client.get("/admin/requests", params={"status": "pending"}, headers=auth_header(admin_token))
    assert pending.status_code == 200, pending.text
    assert [r["id"] for r in pending.json()["data"]] == [request_id]
    assert pending.json()["meta"]["count"] == 1

    reject = client.post(
        f"/admin/requests/{request_id}/reject",
        headers=auth_header(admin_token),
        json={"reason": "Unknown applicant"},
    )
    assert reject.status_code == 200, reject.text
    assert reject.json()["data"]["status"] == "rejected"
    assert reject.json()["data"]["admin_comment"] == "Unknown applicant"

    # 이미 처리된 요청
    again = client.post(f"/admin/requests/{request_id}/approve", headers=auth_header(admin_token))
    assert again.status_code == 400

    missing = client.post("/admin/requests/999/approve", headers=auth_header(admin_token))
    assert missing.status_code == 404


def test_regular_user_cannot_use_admin_api(client):
    ctx = setup_admin_and_user(client)
    headers = auth_header(ctx["user_token"])

    assert client.get("/admin/requests", headers=headers).status_code == 403
    assert client.get("/admin/users", headers=headers).status_code == 403
    assert client.get("/tontines", params={"scope": "all"}, headers=headers).status_code == 403


def test_user_management(client):
    ctx = setup_admin_and_user(client, quota=2)
    headers = auth_header(ctx["admin_token"])

    users = client.get("/admin/users", headers=headers)
    assert users.status_code == 200
    assert [u["id"] for u in users.json()["data"]] == [ctx["user_id"]]
    assert users.json()["data"][0]["tontine_quota"] == 2

    quota = client.patch(f"/admin/users/{ctx['user_id']}/quota", headers=headers, json={"tontine_quota": 5})
    assert quota.status_code == 200, quota.text
    assert quota.json()["data"]["tontine_quota"] == 5

    negative = client.patch(f"/admin/users/{ctx['user_id']}/quota", headers=headers, json={"tontine_quota": -1})
    assert negative.status_code == 400

    # active 생략 시 토글
    toggled = client.patch(f"/admin/users/{ctx['user_id']}/active", headers=headers)
    assert toggled.status_code == 200, toggled.text
    assert toggled.json()["data"]["active"] is False
    toggled = client.patch(f"/admin/users/{ctx['user_id']}/active", headers=headers)
    assert toggled.json()["data"]["active"] is True

    missing = client.patch("/admin/users/999/quota", headers=headers, json={"tontine_quota": 1})
    assert missing.status_code == 404


def test_admin_logs_and_statistics(client):
    ctx = setup_admin_and_user(client)
    headers = auth_header(ctx["admin_token"])

    logs = client.get("/admin/logs", headers=headers)
    assert logs.status_code == 200
    actions = [log["action"] for log in logs.json()["data"]]
    assert actions[:2] == ["LOGIN", "APPROVE_USER"]
    assert "REGISTRATION_REQUEST" in actions

    stats = client.get("/admin/statistics", headers=headers)
    assert stats.status_code == 200
    assert stats.json()["data"]["total_users"] == 1
    assert stats.json()["data"]["pending_requests"] == 0


def test_visitors(client):
    ctx = setup_admin_and_user(client)

    anonymous = client.post("/visitors", json={"path": "/login"})
    assert anonymous.status_code == 201, anonymous.text
    assert anonymous.json()["data"]["status"] == "anonymous"

    known = client.post("/visitors", json={"path": "/tontines"}, headers=auth_header(ctx["user_token"]))
    assert known.json()["data"]["status"] == "authenticated"
    assert known.json()["data"]["user_id"] == ctx["user_id"]

    headers = auth_header(ctx["admin_token"])
    rows = client.get("/admin/visitors", headers=headers)
    assert [v["path"] for v in rows.json()["data"]] == ["/tontines", "/login"]

    stats = client.get("/admin/visitors/stats", headers=headers)
    assert stats.json()["data"] == {
        "total": 2,
        "today": 2,
        "last_7_days": 2,
        "authenticated": 1,
        "anonymous": 1,
    }
