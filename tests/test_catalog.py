PROGRAM = {
    "name": "Robotics Foundations",
    "description": "Intro robotics for ages 8-12",
    "duration": 12,
    "max_students": 10,
    "hours": 24,
    "lesson_length": 90,
    "kind": "academic",
    "status": "active",
}


def _subprogram(program_id, **overrides):
    data = {
        "program_id": program_id,
        "name": "Robotics Level 1",
        "description": "First term",
        "duration": 6,
        "pricing_model": "per_month",
        "course_price": 300,
        "price_per_month": 100,
        "status": "active",
    }
    data.update(overrides)
    return data


def _create_program(client, headers, **overrides):
    r = client.post("/api/v1/programs", json={**PROGRAM, **overrides}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _total(client, path, headers):
    r = client.get(path, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()["total"]


def test_only_hq_creates_programs(client, mf):
    r = client.post("/api/v1/programs", json=PROGRAM, headers=mf)
    assert r.status_code == 403
    assert r.json()["error"]["message"] == "Access denied. Only HQ can create programs."


def test_duplicate_program_name_conflicts(client, hq):
    _create_program(client, hq)
    r = client.post("/api/v1/programs", json=PROGRAM, headers=hq)
    assert r.status_code == 409


def test_private_program_is_hidden_below_hq(client, hq, mf, lc, tt):
    program = _create_program(client, hq)
    assert program["visibility"] == "PRIVATE"

    assert _total(client, "/api/v1/programs", hq) == 1
    for headers in (mf, lc, tt):
        assert _total(client, "/api/v1/programs", headers) == 0

    r = client.get(f"/api/v1/programs/{program['id']}", headers=mf)
    assert r.status_code == 403


def test_sharing_program_with_mf_reaches_its_lcs(client, hq, mf, lc, tt, ids):
    program = _create_program(client, hq)
    r = client.patch(
        f"/api/v1/programs/{program['id']}",
        json={"visibility": "shared", "shared_with_mfs": [ids["mf"]]},
        headers=hq,
    )
    assert r.status_code == 200
    assert r.json()["shared_with_mfs"] == [ids["mf"]]

    assert _total(client, "/api/v1/programs", mf) == 1
    assert _total(client, "/api/v1/programs", lc) == 1
    assert _total(client, "/api/v1/programs", tt) == 0

    # search cannot widen visibility
    assert _total(client, "/api/v1/programs?search=Robotics", tt) == 0


def test_sharing_with_unknown_mf_is_rejected(client, hq):
    r = client.post(
        "/api/v1/programs", json={**PROGRAM, "visibility": "SHARED", "shared_with_mfs": [999]}, headers=hq
    )
    assert r.status_code == 400


def test_mf_subprogram_lifecycle(client, hq, mf, lc, tt, ids):
    program = _create_program(client, hq, visibility="PUBLIC")

    r = client.post(
        "/api/v1/subprograms",
        json=_subprogram(program["id"], visibility="SHARED", shared_with_lcs=[ids["lc"]]),
        headers=mf,
    )
    assert r.status_code == 201, r.text
    sub = r.json()
    assert sub["owner_mf_id"] == ids["mf"]
    assert sub["shared_with_lcs"] == [ids["lc"]]

    assert _total(client, "/api/v1/subprograms", lc) == 1
    assert _total(client, "/api/v1/subprograms", tt) == 0

    detail = client.get(f"/api/v1/programs/{program['id']}", headers=lc).json()
    assert [s["id"] for s in detail["sub_programs"]] == [sub["id"]]
    assert client.get(f"/api/v1/programs/{program['id']}", headers=tt).json()["sub_programs"] == []

    r = client.patch(f"/api/v1/subprograms/{sub['id']}", json={"course_price": 350}, headers=mf)
    assert r.status_code == 200
    assert r.json()["course_price"] == 350

    r = client.delete(f"/api/v1/subprograms/{sub['id']}", headers=mf)
    assert r.status_code == 200
    assert r.json()["message"] == "Subprogram deleted successfully"


def test_mf_subprogram_rules(client, hq, mf, lc, ids):
    hidden = _create_program(client, hq, name="Hidden Program")
    r = client.post("/api/v1/subprograms", json=_subprogram(hidden["id"]), headers=mf)
    assert r.status_code == 403

    public = _create_program(client, hq, visibility="PUBLIC")
    r = client.post(
        "/api/v1/subprograms",
        json=_subprogram(public["id"], visibility="SHARED", shared_with_mfs=[ids["mf"] + 100]),
        headers=mf,
    )
    assert r.status_code == 400

    r = client.post("/api/v1/subprograms", json=_subprogram(public["id"]), headers=lc)
    assert r.status_code == 403
    assert r.json()["error"]["message"] == "Access denied. Only MF and HQ can create subprograms."

    hq_sub = client.post("/api/v1/subprograms", json=_subprogram(public["id"], visibility="PUBLIC"), headers=hq).json()
    r = client.patch(f"/api/v1/subprograms/{hq_sub['id']}", json={"name": "Renamed"}, headers=mf)
    assert r.status_code == 403


def test_program_with_subprograms_cannot_be_deleted(client, hq):
    program = _create_program(client, hq)
    sub = client.post("/api/v1/subprograms", json=_subprogram(program["id"]), headers=hq).json()

    r = client.delete(f"/api/v1/programs/{program['id']}", headers=hq)
    assert r.status_code == 409

    assert client.delete(f"/api/v1/subprograms/{sub['id']}", headers=hq).status_code == 200
    r = client.delete(f"/api/v1/programs/{program['id']}", headers=hq)
    assert r.status_code == 200
    assert r.json()["message"] == "Program deleted successfully"
    assert client.get(f"/api/v1/programs/{program['id']}", headers=hq).status_code == 404


def test_program_list_paging_and_filters(client, hq):
    for i in range(3):
        _create_program(client, hq, name=f"Program {i}", kind="WORKSHOP" if i else "ACADEMIC")

    page = client.get("/api/v1/programs?limit=2&sort_by=name&sort_order=asc", headers=hq).json()
    assert page["total"] == 3
    assert page["total_pages"] == 2
    assert page["has_next"] and not page["has_prev"]
    assert [p["name"] for p in page["items"]] == ["Program 0", "Program 1"]

    assert _total(client, "/api/v1/programs?kind=workshop", hq) == 2
    assert client.get("/api/v1/programs?sort_order=sideways", headers=hq).status_code == 422
