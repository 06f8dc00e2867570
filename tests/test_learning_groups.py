from helpers import (
    create_active_teacher,
    create_product,
    create_public_program,
    create_student,
    second_learning_center,
    teacher_payload,
)


def _group_payload(program, sub, teacher, students, **overrides):
    data = {
        "name": "Robotics Tuesday",
        "description": "Weekly robotics class",
        "max_students": 2,
        "start_date": "2026-02-01",
        "end_date": "2026-06-30",
        "location": "Room 1",
        "program_id": program["id"],
        "sub_program_id": sub["id"] if sub else None,
        "teacher_id": teacher["id"],
        "schedule": [{"day_of_week": 2, "start_time": "16:00", "end_time": "17:30"}],
        "students": students,
    }
    data.update(overrides)
    return data


def test_create_group_freezes_subprogram_pricing(client, hq, mf, lc, ids):
    program, sub = create_public_program(client, hq)
    teacher = create_active_teacher(client, lc, mf, hq)
    s1 = create_student(client, lc)

    r = client.post(
        "/api/v1/learning-groups", json=_group_payload(program, sub, teacher, [s1["id"], s1["id"]]), headers=lc
    )
    assert r.status_code == 201, r.text
    group = r.json()
    assert group["students"] == [s1["id"]]
    assert group["current_students"] == 1
    assert group["lc_id"] == ids["lc"]
    assert group["teacher"]["email"] == "grace.hopper@example.com"
    assert group["pricing_snapshot"]["pricing_model"] == "PER_MONTH"
    assert group["pricing_snapshot"]["price_per_month"] == 100

    # later catalog edits do not reprice the running group
    client.patch(f"/api/v1/subprograms/{sub['id']}", json={"price_per_month": 150}, headers=hq)
    r = client.put(
        f"/api/v1/learning-groups/{group['id']}",
        json=_group_payload(program, sub, teacher, [s1["id"]], name="Robotics Thursday"),
        headers=lc,
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Robotics Thursday"
    assert r.json()["pricing_snapshot"]["price_per_month"] == 100


def test_group_requires_active_teacher_of_same_lc(client, hq, mf, lc):
    program, sub = create_public_program(client, hq)
    pending = client.post("/api/v1/teachers", json=teacher_payload(), headers=lc).json()

    r = client.post("/api/v1/learning-groups", json=_group_payload(program, sub, pending, []), headers=lc)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Invalid teacher or teacher does not belong to this Learning Center"


def test_group_requires_visible_active_program(client, hq, mf, lc):
    teacher = create_active_teacher(client, lc, mf, hq)
    r = client.post(
        "/api/v1/programs",
        json={
            "name": "HQ Internal",
            "description": "Not shared",
            "duration": 4,
            "max_students": 5,
            "hours": 8,
            "lesson_length": 60,
            "kind": "WORKSHOP",
            "status": "ACTIVE",
        },
        headers=hq,
    )
    private = r.json()

    r = client.post("/api/v1/learning-groups", json=_group_payload(private, None, teacher, []), headers=lc)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Invalid or inactive Program"


def test_group_roster_rules(client, hq, mf, lc, ids, login_as):
    program, sub = create_public_program(client, hq)
    teacher = create_active_teacher(client, lc, mf, hq)
    students = [create_student(client, lc, first_name=f"Kid{i}")["id"] for i in range(3)]

    r = client.post("/api/v1/learning-groups", json=_group_payload(program, sub, teacher, students), headers=lc)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Learning group is over capacity"

    _, lc2 = second_learning_center(client, mf, ids, login_as)
    outsider = create_student(client, lc2, first_name="Outsider")
    r = client.post(
        "/api/v1/learning-groups",
        json=_group_payload(program, sub, teacher, [students[0], outsider["id"]]),
        headers=lc,
    )
    assert r.status_code == 400
    assert r.json()["error"]["details"] == {"student_ids": [outsider["id"]]}


def test_group_schedule_validation(client, hq, mf, lc):
    program, sub = create_public_program(client, hq)
    teacher = create_active_teacher(client, lc, mf, hq)
    bad = _group_payload(
        program, sub, teacher, [], schedule=[{"day_of_week": 1, "start_time": "18:00", "end_time": "17:00"}]
    )
    assert client.post("/api/v1/learning-groups", json=bad, headers=lc).status_code == 422


def test_assign_product_reduces_stock(client, hq, mf, lc):
    program, sub = create_public_program(client, hq)
    teacher = create_active_teacher(client, lc, mf, hq)
    student = create_student(client, lc)
    stranger = create_student(client, lc, first_name="Stranger")
    group = client.post(
        "/api/v1/learning-groups", json=_group_payload(program, sub, teacher, [student["id"]]), headers=lc
    ).json()
    product = create_product(client, hq, stock_quantity=5, min_stock_level=3)

    r = client.post(
        f"/api/v1/learning-groups/{group['id']}/assign-product",
        json={"student_id": student["id"], "product_id": product["id"], "quantity": 2},
        headers=lc,
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["applied"][0]["stock_quantity"] == 3
    assert body["applied"][0]["stock_status"]["status"] == "LOW_STOCK"
    assert body["warnings"] == ["Robot Kit will be at or below minimum stock level after this operation"]

    r = client.post(
        f"/api/v1/learning-groups/{group['id']}/assign-product",
        json={"student_id": student["id"], "product_id": product["id"], "quantity": 4},
        headers=lc,
    )
    assert r.status_code == 409
    assert r.json()["error"]["details"]["errors"] == [
        "Insufficient stock for Robot Kit. Required: 4, Available: 3"
    ]

    r = client.post(
        f"/api/v1/learning-groups/{group['id']}/assign-product",
        json={"student_id": stranger["id"], "product_id": product["id"]},
        headers=lc,
    )
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Student is not a member of this learning group"

    txns = client.get("/api/v1/inventory/transactions", params={"reason": "student_assignment"}, headers=hq).json()
    assert txns["total"] == 1
    assert txns["items"][0]["reference_id"] == str(student["id"])


def test_teacher_in_group_cannot_be_deleted(client, hq, mf, lc):
    program, sub = create_public_program(client, hq)
    teacher = create_active_teacher(client, lc, mf, hq)
    group = client.post("/api/v1/learning-groups", json=_group_payload(program, sub, teacher, []), headers=lc).json()

    r = client.delete(f"/api/v1/teachers/{teacher['id']}", headers=lc)
    assert r.status_code == 409

    assert client.delete(f"/api/v1/learning-groups/{group['id']}", headers=lc).status_code == 200
    assert client.delete(f"/api/v1/teachers/{teacher['id']}", headers=lc).status_code == 200


def test_group_listing_scope_and_filters(client, hq, mf, lc, ids):
    program, sub = create_public_program(client, hq)
    teacher = create_active_teacher(client, lc, mf, hq)
    client.post("/api/v1/learning-groups", json=_group_payload(program, sub, teacher, []), headers=lc)

    assert client.get("/api/v1/learning-groups", headers=mf).json()["total"] == 1
    r = client.get("/api/v1/learning-groups", params={"teacher_id": teacher["id"] + 1}, headers=hq)
    assert r.json()["total"] == 0
    r = client.get("/api/v1/learning-groups", params={"program_id": program["id"], "status": "active"}, headers=lc)
    assert r.json()["total"] == 1
