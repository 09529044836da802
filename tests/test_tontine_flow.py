"""
톤틴 운영 통합 테스트.
- 생성(quota 409) → 참가자 추가(정원 409) → 납부 / 수혜자 / 월 요약 / 정산,
  다른 사용자 접근(403) / 없는 톤틴(404), 월별 리포트 / 통계 / 로그 조회를 검증한다.
"""

from tests.helpers import auth_header, setup_admin_and_user


TONTINE = {
    "name": "Family 2024",
    "monthly_amount": 25000,
    "participant_capacity": 3,
    "duration_months": 6,
    "start_date": "2024-01-15",
}


def _create_tontine(client, token, **overrides):
    r = client.post("/tontines", headers=auth_header(token), json={**TONTINE, **overrides})
    assert r.status_code == 201, r.text
    return r.json()["data"]


def _add_participant(client, token, tontine_id, first_name, parts=1):
    r = client.post(
        f"/tontines/{tontine_id}/participants",
        headers=auth_header(token),
        json={"first_name": first_name, "last_name": "Test", "parts": parts},
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_full_month_cycle(client):
    ctx = setup_admin_and_user(client)
    token = ctx["user_token"]
    headers = auth_header(token)

    tontine = _create_tontine(client, token)
    tid = tontine["id"]
    assert tontine["end_date"] == "2024-07-15"
    assert tontine["status"] == "pending"

    p1 = _add_participant(client, token, tid, "Awa")
    p2 = _add_participant(client, token, tid, "Moussa")
    p3 = _add_participant(client, token, tid, "Fatou")

    full = client.post(f"/tontines/{tid}/participants", headers=headers, json={"first_name": "Extra"})
    assert full.status_code == 409

    for p in (p1, p2):
        r = client.put(
            f"/tontines/{tid}/payments",
            headers=headers,
            json={"participant_id": p["id"], "month": 1, "status": "paid"},
        )
        assert r.status_code == 200, r.text

    status = client.get(
        f"/tontines/{tid}/payments",
        headers=headers,
        params={"participant_id": p3["id"], "month": 1},
    )
    assert status.json()["data"]["status"] == "unpaid"

    summary = client.get(f"/tontines/{tid}/months/1/summary", headers=headers)
    assert summary.status_code == 200, summary.text
    body = summary.json()["data"]
    assert body["collected_amount"] == 50000
    assert body["payment_ratio"] == "2/3"
    assert body["percentage"] == 67
    assert body["beneficiary_id"] == p1["id"]

    r = client.put(f"/tontines/{tid}/months/1/beneficiary", headers=headers, json={"participant_id": p3["id"]})
    assert r.status_code == 200, r.text
    beneficiary = client.get(f"/tontines/{tid}/months/1/beneficiary", headers=headers)
    assert beneficiary.json()["data"]["participant_id"] == p3["id"]

    finalized = client.post(f"/tontines/{tid}/months/1/finalize", headers=headers)
    assert finalized.status_code == 200, finalized.text
    assert finalized.json()["data"]["amount"] == 50000
    assert finalized.json()["data"]["beneficiary_id"] == p3["id"]

    again = client.post(f"/tontines/{tid}/months/1/finalize", headers=headers)
    assert again.status_code == 400

    report = client.get(f"/reports/monthly/{tid}/1", headers=headers)
    assert report.status_code == 200, report.text
    report = report.json()["data"]
    assert report["beneficiary_name"] == "Fatou Test"
    assert report["total_collected"] == 50000
    assert report["paid_count"] == 2
    assert report["amount_to_distribute"] == 75000
    assert report["outstanding_amount"] == 25000
    assert report["finalized"] is True

    detail = client.get(f"/tontines/{tid}", headers=headers).json()["data"]
    assert detail["finalized_months"][0]["month"] == 1
    assert detail["total_to_collect"] == 75000


def test_month_payments_schedule_and_validation(client):
    ctx = setup_admin_and_user(client)
    token = ctx["user_token"]
    headers = auth_header(token)

    tid = _create_tontine(client, token)["id"]
    _add_participant(client, token, tid, "Awa", parts=2)
    _add_participant(client, token, tid, "Moussa")

    r = client.put(f"/tontines/{tid}/months/2/payments", headers=headers, json={"status": "paid"})
    assert r.status_code == 200, r.text
    assert r.json()["data"]["collected_amount"] == 75000
    assert r.json()["data"]["payment_ratio"] == "2/2"

    out_of_range = client.put(f"/tontines/{tid}/months/7/payments", headers=headers, json={"status": "paid"})
    assert out_of_range.status_code == 400

    schedule = client.get(f"/tontines/{tid}/schedule", headers=headers)
    assert schedule.status_code == 200
    periods = [m["period"] for m in schedule.json()["data"]]
    assert periods == ["2024-01", "2024-02", "2024-03", "2024-04", "2024-05", "2024-06"]

    no_beneficiary_report = client.get(f"/reports/monthly/{tid}/3", headers=headers).json()["data"]
    assert no_beneficiary_report["beneficiary_name"] == "undefined"


def test_update_and_delete(client):
    ctx = setup_admin_and_user(client, quota=1)
    token = ctx["user_token"]
    headers = auth_header(token)

    tid = _create_tontine(client, token)["id"]

    over_quota = client.post("/tontines", headers=headers, json=TONTINE)
    assert over_quota.status_code == 409

    patched = client.patch(f"/tontines/{tid}", headers=headers, json={"duration_months": 12, "name": "Renamed"})
    assert patched.status_code == 200, patched.text
    assert patched.json()["data"]["end_date"] == "2025-01-15"
    assert patched.json()["data"]["name"] == "Renamed"

    empty = client.patch(f"/tontines/{tid}", headers=headers, json={})
    assert empty.status_code == 400

    p = _add_participant(client, token, tid, "Awa")
    removed = client.delete(f"/tontines/{tid}/participants/{p['id']}", headers=headers)
    assert removed.status_code == 204

    deleted = client.delete(f"/tontines/{tid}", headers=headers)
    assert deleted.status_code == 204
    assert client.get(f"/tontines/{tid}", headers=headers).status_code == 404

    # 삭제 후 카운터가 줄어 다시 생성 가능
    _create_tontine(client, token)
    assert client.get("/tontines", headers=headers).json()["meta"]["count"] == 1


def test_ownership_and_scope(client):
    ctx = setup_admin_and_user(client)
    owner_headers = auth_header(ctx["user_token"])
    admin_headers = auth_header(ctx["admin_token"])

    tid = _create_tontine(client, ctx["user_token"])["id"]

    # 다른 사용자(여기서는 SUPERADMIN) 소유 톤틴 변경 → 403
    forbidden = client.patch(f"/tontines/{tid}", headers=admin_headers, json={"name": "Hijack"})
    assert forbidden.status_code == 403
    assert client.delete(f"/tontines/{tid}", headers=admin_headers).status_code == 403

    missing = client.patch("/tontines/does-not-exist", headers=owner_headers, json={"name": "x"})
    assert missing.status_code == 404

    # 기본 조회는 본인 톤틴만, 관리자는 scope=all 로 전체
    assert client.get("/tontines", headers=admin_headers).json()["meta"]["count"] == 0
    everything = client.get("/tontines", params={"scope": "all"}, headers=admin_headers)
    assert everything.json()["meta"]["count"] == 1

    assert client.get(f"/reports/monthly/{tid}/1", headers=admin_headers).status_code == 404
    assert client.get(f"/reports/monthly/{tid}/1", params={"scope": "all"}, headers=admin_headers).status_code == 200


def test_reports_statistics_and_logs(client):
    ctx = setup_admin_and_user(client)
    token = ctx["user_token"]
    headers = auth_header(token)

    tid = _create_tontine(client, token, monthly_amount=10000)["id"]
    _add_participant(client, token, tid, "Awa")

    stats = client.get("/reports/statistics", headers=headers)
    assert stats.status_code == 200
    data = stats.json()["data"]
    assert data["total_tontines"] == 1
    assert data["total_participants"] == 1
    assert data["total_monthly_amount"] == 10000
    assert data["total_users"] is None

    logs = client.get("/reports/logs", headers=headers)
    assert logs.status_code == 200
    actions = [log["action"] for log in logs.json()["data"]]
    assert actions == ["ADD_PARTICIPANT", "CREATE_TONTINE", "LOGIN"]
