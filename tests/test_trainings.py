def _training_type(client, hq, **overrides):
    data = {
        "name": "Onboarding Workshop",
        "description": "First steps for new teachers",
        "duration": 6,
        "category": "Onboarding",
        "prerequisites": ["Signed contract"],
    }
    data.update(overrides)
    r = client.post("/api/v1/training-types", json=data, headers=hq)
    assert r.status_code == 201, r.text
    return r.json()


def _training_payload(training_type, **overrides):
    data = {
        "name": "Spring Onboarding",
        "description": "Two-day onboarding for new hires",
        "training_type_id": training_type["id"],
        "start_date": "2026-03-02",
        "end_date": "2026-03-03",
        "max_participants": 20,
        "location": "HQ Campus",
        "cost": 150,
        "materials": ["Teacher handbook"],
    }
    data.update(overrides)
    return data


def test_training_types_are_managed_by_hq(client, hq, mf, tt):
    created = _training_type(client, hq)
    assert created["prerequisites"] == ["Signed contract"]
    assert created["is_active"] is True

    r = client.post(
        "/api/v1/training-types", json={"name": "onboarding workshop", "description": "x", "duration": 2}, headers=hq
    )
    assert r.status_code == 409

    for headers in (mf, tt):
        r = client.post("/api/v1/training-types", json={"name": "Other", "description": "x", "duration": 2}, headers=headers)
        assert r.status_code == 403
        assert client.get("/api/v1/training-types", headers=headers).json()["total"] == 1

    r = client.patch(f"/api/v1/training-types/{created['id']}", json={"duration": 8}, headers=hq)
    assert r.status_code == 200
    assert r.json()["duration"] == 8
    r = client.patch(f"/api/v1/training-types/{created['id']}", json={"name": None}, headers=hq)
    assert r.status_code == 422


def test_tt_runs_trainings_for_its_own_account(client, hq, tt, ids):
    training_type = _training_type(client, hq)
    r = client.post("/api/v1/trainings", json=_training_payload(training_type), headers=tt)
    assert r.status_code == 201, r.text
    training = r.json()
    assert training["tt_id"] == ids["tt"]
    assert training["hq_id"] == ids["hq"]
    assert training["tt"]["code"] == "TT001"
    assert training["training_type"]["name"] == "Onboarding Workshop"
    assert training["current_participants"] == 0

    other = client.post("/api/v1/accounts/tt", json={"name": "Trainer Two", "code": "TT002"}, headers=hq).json()
    r = client.post("/api/v1/trainings", json=_training_payload(training_type, tt_id=other["id"]), headers=tt)
    assert r.status_code == 403

    # HQ schedules for the second account; the first TT cannot see or touch it
    r = client.post("/api/v1/trainings", json=_training_payload(training_type, tt_id=other["id"]), headers=hq)
    assert r.status_code == 201
    foreign = r.json()
    assert client.get(f"/api/v1/trainings/{foreign['id']}", headers=tt).status_code == 403
    assert client.patch(f"/api/v1/trainings/{foreign['id']}", json={"location": "Elsewhere"}, headers=tt).status_code == 403

    own = client.get("/api/v1/trainings", headers=tt).json()
    assert [t["id"] for t in own["items"]] == [training["id"]]
    assert client.get("/api/v1/trainings", headers=hq).json()["total"] == 2

    r = client.patch(f"/api/v1/trainings/{training['id']}", json={"current_participants": 12}, headers=tt)
    assert r.status_code == 200
    assert r.json()["current_participants"] == 12


def test_training_rules(client, hq, tt, ids):
    training_type = _training_type(client, hq)

    r = client.post("/api/v1/trainings", json=_training_payload(training_type), headers=hq)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "tt_id is required"

    r = client.post(
        "/api/v1/trainings",
        json=_training_payload(training_type, start_date="2026-03-05", end_date="2026-03-01"),
        headers=tt,
    )
    assert r.status_code == 422

    training = client.post("/api/v1/trainings", json=_training_payload(training_type), headers=tt).json()
    r = client.patch(f"/api/v1/trainings/{training['id']}", json={"end_date": "2026-03-01"}, headers=tt)
    assert r.status_code == 400
    r = client.patch(f"/api/v1/trainings/{training['id']}", json={"current_participants": 21}, headers=tt)
    assert r.status_code == 400
    r = client.patch(f"/api/v1/trainings/{training['id']}", json={"location": None}, headers=tt)
    assert r.status_code == 422

    client.patch(f"/api/v1/training-types/{training_type['id']}", json={"is_active": False}, headers=hq)
    r = client.post("/api/v1/trainings", json=_training_payload(training_type), headers=tt)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Invalid or inactive training type"

    r = client.delete(f"/api/v1/training-types/{training_type['id']}", headers=hq)
    assert r.status_code == 409
    assert client.delete(f"/api/v1/trainings/{training['id']}", headers=tt).status_code == 200
    assert client.delete(f"/api/v1/training-types/{training_type['id']}", headers=hq).status_code == 200


def test_mf_and_lc_browse_active_trainings_only(client, hq, mf, lc, tt):
    training_type = _training_type(client, hq)
    active = client.post("/api/v1/trainings", json=_training_payload(training_type), headers=tt).json()
    hidden = client.post(
        "/api/v1/trainings", json=_training_payload(training_type, name="Draft session", is_active=False), headers=tt
    ).json()

    for headers in (mf, lc):
        listed = client.get("/api/v1/trainings", headers=headers).json()
        assert [t["id"] for t in listed["items"]] == [active["id"]]
        assert client.get(f"/api/v1/trainings/{hidden['id']}", headers=headers).status_code == 403
        assert client.post("/api/v1/trainings", json=_training_payload(training_type), headers=headers).status_code == 403
        r = client.patch(f"/api/v1/trainings/{active['id']}", json={"location": "Moved"}, headers=headers)
        assert r.status_code == 403
