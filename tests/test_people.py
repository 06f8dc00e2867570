from datetime import date

from helpers import create_active_teacher, create_student, second_learning_center, student_payload, teacher_payload


def test_lc_creates_student_with_org_chain(client, lc, ids):
    student = create_student(client, lc)
    assert student["status"] == "ACTIVE"
    assert student["gender"] == "FEMALE"
    assert (student["hq_id"], student["mf_id"], student["lc_id"]) == (ids["hq"], ids["mf"], ids["lc"])
    assert student["enrollment_date"] == date.today().isoformat()
    assert student["lc"]["code"] == "LC001"


def test_only_lc_users_create_students(client, mf, tt):
    r = client.post("/api/v1/students", json=student_payload(), headers=mf)
    assert r.status_code == 403
    assert r.json()["error"]["message"] == "Only LC users can create students"

    assert client.post("/api/v1/students", json=student_payload(), headers=tt).status_code == 403


def test_student_visibility_follows_hierarchy(client, hq, mf, lc, ids, login_as):
    mine = create_student(client, lc)
    _, lc2 = second_learning_center(client, mf, ids, login_as)
    theirs = create_student(client, lc2, first_name="Alan", last_name="Turing", parent_email="ethel@example.com")

    assert client.get("/api/v1/students", headers=hq).json()["total"] == 2
    assert client.get("/api/v1/students", headers=mf).json()["total"] == 2

    own = client.get("/api/v1/students", headers=lc).json()
    assert [s["id"] for s in own["items"]] == [mine["id"]]

    r = client.get(f"/api/v1/students/{theirs['id']}", headers=lc)
    assert r.status_code == 403

    r = client.get("/api/v1/students", params={"lc_id": theirs["lc_id"]}, headers=lc)
    assert r.status_code == 403

    r = client.get("/api/v1/students", params={"lc_id": ids["lc"]}, headers=mf)
    assert [s["id"] for s in r.json()["items"]] == [mine["id"]]

    r = client.get("/api/v1/students", params={"search": "ethel"}, headers=hq)
    assert [s["id"] for s in r.json()["items"]] == [theirs["id"]]


def test_student_update_and_delete_by_owning_lc(client, mf, lc):
    student = create_student(client, lc)

    r = client.put(
        f"/api/v1/students/{student['id']}", json=student_payload(status="graduated"), headers=mf
    )
    assert r.status_code == 403
    assert r.json()["error"]["message"] == "Only LC users can update students"

    r = client.put(f"/api/v1/students/{student['id']}", json=student_payload(status="graduated"), headers=lc)
    assert r.status_code == 200
    assert r.json()["status"] == "GRADUATED"
    assert r.json()["enrollment_date"] == student["enrollment_date"]

    r = client.delete(f"/api/v1/students/{student['id']}", headers=lc)
    assert r.status_code == 200
    assert client.get(f"/api/v1/students/{student['id']}", headers=lc).status_code == 404


def test_student_payload_validation(client, lc):
    r = client.post("/api/v1/students", json=student_payload(parent_email="not-an-email"), headers=lc)
    assert r.status_code == 422
    assert r.json()["error"]["type"] == "validation_error"


def test_new_teacher_starts_in_process(client, lc):
    r = client.post("/api/v1/teachers", json=teacher_payload(status="ACTIVE"), headers=lc)
    assert r.status_code == 201
    teacher = r.json()
    assert teacher["status"] == "PROCESS"
    assert teacher["email"] == "grace.hopper@example.com"

    r = client.post("/api/v1/teachers", json=teacher_payload(email="GRACE.HOPPER@example.com"), headers=lc)
    assert r.status_code == 409

    r = client.put(f"/api/v1/teachers/{teacher['id']}", json=teacher_payload(status="ACTIVE"), headers=lc)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Teacher must be approved by HQ before becoming ACTIVE"


def test_teacher_approval_workflow(client, hq, mf, lc):
    teacher = client.post("/api/v1/teachers", json=teacher_payload(), headers=lc).json()

    r = client.put(f"/api/v1/teachers/{teacher['id']}/approve", headers=hq)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Teacher must have a contract uploaded before approval"

    contract = {"contract_file": "contracts/grace.pdf", "contract_date": "2026-01-05"}
    r = client.put(f"/api/v1/teachers/{teacher['id']}/contract", json=contract, headers=lc)
    assert r.status_code == 403
    assert r.json()["error"]["message"] == "Only MF users can upload contracts"

    r = client.put(f"/api/v1/teachers/{teacher['id']}/contract", json=contract, headers=mf)
    assert r.status_code == 200
    assert r.json()["contract_file"] == "contracts/grace.pdf"
    assert r.json()["contract_uploaded_at"] is not None

    r = client.put(f"/api/v1/teachers/{teacher['id']}/approve", headers=mf)
    assert r.status_code == 403

    r = client.put(f"/api/v1/teachers/{teacher['id']}/approve", headers=hq)
    assert r.status_code == 200
    approved = r.json()
    assert approved["status"] == "ACTIVE"
    assert approved["approved_at"] is not None

    r = client.put(f"/api/v1/teachers/{teacher['id']}/approve", headers=hq)
    assert r.status_code == 400

    r = client.put(f"/api/v1/teachers/{teacher['id']}", json=teacher_payload(status="PROCESS"), headers=lc)
    assert r.status_code == 400

    r = client.put(f"/api/v1/teachers/{teacher['id']}", json=teacher_payload(status="INACTIVE"), headers=lc)
    assert r.status_code == 200
    assert r.json()["status"] == "INACTIVE"


def test_teacher_listing(client, hq, mf, lc):
    create_active_teacher(client, lc, mf, hq)
    client.post("/api/v1/teachers", json=teacher_payload(email="second@example.com", first_name="Barbara"), headers=lc)

    assert client.get("/api/v1/teachers", headers=mf).json()["total"] == 2
    r = client.get("/api/v1/teachers", params={"status": "process"}, headers=lc)
    assert [t["first_name"] for t in r.json()["items"]] == ["Barbara"]
