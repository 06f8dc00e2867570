def test_hq_lists_accounts_with_counts(client, hq):
    r = client.get("/api/v1/accounts/hq", headers=hq)
    assert r.status_code == 200
    [row] = r.json()
    assert row["code"] == "HQ001"
    assert row["mf_count"] == 1
    assert row["tt_count"] == 1
    assert row["user_count"] == 4


def test_mf_sees_only_itself(client, mf, ids):
    r = client.get("/api/v1/accounts/mf", headers=mf)
    assert r.status_code == 200
    body = r.json()
    assert [m["id"] for m in body] == [ids["mf"]]
    assert body[0]["lc_count"] == 1

    r = client.post("/api/v1/accounts/mf", json={"name": "MF Two", "code": "mf002"}, headers=mf)
    assert r.status_code == 403
    assert r.json()["error"]["message"] == "Only HQ users can create Master Franchisee accounts"


def test_lc_cannot_list_master_franchisees(client, lc):
    r = client.get("/api/v1/accounts/mf", headers=lc)
    assert r.status_code == 403


def test_create_mf_and_duplicate_code(client, hq, ids):
    r = client.post("/api/v1/accounts/mf", json={"name": "MF West", "code": "mf002"}, headers=hq)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["code"] == "MF002"
    assert body["hq_id"] == ids["hq"]
    assert body["status"] == "ACTIVE"

    r = client.post("/api/v1/accounts/mf", json={"name": "Again", "code": "MF002"}, headers=hq)
    assert r.status_code == 409


def test_mf_creates_learning_center_under_itself_only(client, hq, mf, ids):
    other = client.post("/api/v1/accounts/mf", json={"name": "MF West", "code": "MF002"}, headers=hq).json()

    r = client.post("/api/v1/learning-centers", json={"name": "LC Uptown", "code": "LC002"}, headers=mf)
    assert r.status_code == 201
    assert r.json()["mf_id"] == ids["mf"]

    r = client.post(
        "/api/v1/learning-centers", json={"name": "LC Far", "code": "LC003", "mf_id": other["id"]}, headers=mf
    )
    assert r.status_code == 403


def test_learning_center_listing_is_scoped(client, hq, mf, lc, tt, ids):
    client.post("/api/v1/learning-centers", json={"name": "LC Uptown", "code": "LC002"}, headers=mf)

    assert client.get("/api/v1/learning-centers", headers=hq).json()["total"] == 2
    assert client.get("/api/v1/learning-centers", headers=mf).json()["total"] == 2

    own = client.get("/api/v1/learning-centers", headers=lc).json()
    assert own["total"] == 1
    assert own["items"][0]["id"] == ids["lc"]

    assert client.get("/api/v1/learning-centers", headers=tt).json()["total"] == 0

    r = client.get("/api/v1/learning-centers", params={"search": "IQUP"}, headers=hq)
    assert [item["code"] for item in r.json()["items"]] == ["LC001"]


def test_inactive_learning_center_blocks_student_creation(client, hq, lc, ids):
    r = client.patch(f"/api/v1/learning-centers/{ids['lc']}", json={"status": "inactive"}, headers=hq)
    assert r.status_code == 200
    assert r.json()["status"] == "INACTIVE"

    r = client.post(
        "/api/v1/students",
        json={
            "first_name": "Ada",
            "last_name": "Lovelace",
            "date_of_birth": "2015-12-10",
            "gender": "FEMALE",
            "parent_first_name": "Anne",
            "parent_last_name": "Byron",
            "parent_phone": "555-0100",
            "parent_email": "anne@example.com",
        },
        headers=lc,
    )
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Invalid or inactive Learning Center"


def test_teacher_trainer_accounts(client, hq, tt, ids):
    r = client.post("/api/v1/accounts/tt", json={"name": "Trainer Two", "code": "tt002"}, headers=hq)
    assert r.status_code == 201
    assert r.json()["hq_id"] == ids["hq"]

    assert len(client.get("/api/v1/accounts/tt", headers=hq).json()) == 2
    own = client.get("/api/v1/accounts/tt", headers=tt).json()
    assert [t["id"] for t in own] == [ids["tt"]]


def test_users_listing_is_scoped(client, hq, lc, ids):
    r = client.get("/api/v1/users", headers=hq)
    assert r.json()["total"] == 4

    r = client.get("/api/v1/users", headers=lc)
    body = r.json()
    assert body["total"] == 1
    assert body["items"][0]["id"] == ids["lc_admin"]

    r = client.get(f"/api/v1/users/{ids['hq_admin']}", headers=lc)
    assert r.status_code == 403


def test_admin_cannot_change_own_role(client, hq, ids):
    r = client.patch(f"/api/v1/users/{ids['hq_admin']}", json={"role": "HQ_STAFF"}, headers=hq)
    assert r.status_code == 400

    r = client.patch(f"/api/v1/users/{ids['lc_admin']}", json={"role": "MF_ADMIN"}, headers=hq)
    assert r.status_code == 400

    r = client.patch(f"/api/v1/users/{ids['lc_admin']}", json={"role": "LC_STAFF"}, headers=hq)
    assert r.status_code == 200
    assert r.json()["role"] == "LC_STAFF"


def test_patch_cannot_clear_required_fields(client, hq, ids):
    r = client.patch(f"/api/v1/learning-centers/{ids['lc']}", json={"name": None}, headers=hq)
    assert r.status_code == 422
    assert r.json()["error"]["type"] == "validation_error"

    r = client.patch(f"/api/v1/accounts/mf/{ids['mf']}", json={"status": None}, headers=hq)
    assert r.status_code == 422

    r = client.patch(f"/api/v1/users/{ids['lc_admin']}", json={"first_name": None}, headers=hq)
    assert r.status_code == 422

    # nullable contact fields can still be cleared
    r = client.patch(f"/api/v1/learning-centers/{ids['lc']}", json={"phone": None}, headers=hq)
    assert r.status_code == 200
    assert r.json()["phone"] is None
    assert r.json()["name"] == "IQUP Learning Center Downtown"
