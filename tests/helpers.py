"""Request builders shared by the API tests."""


def student_payload(**overrides):
    data = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "date_of_birth": "2015-12-10",
        "gender": "female",
        "parent_first_name": "Anne",
        "parent_last_name": "Byron",
        "parent_phone": "555-0100",
        "parent_email": "anne@example.com",
    }
    data.update(overrides)
    return data


def teacher_payload(**overrides):
    data = {
        "first_name": "Grace",
        "last_name": "Hopper",
        "date_of_birth": "1990-01-15",
        "gender": "FEMALE",
        "email": "Grace.Hopper@example.com",
        "experience": 5,
    }
    data.update(overrides)
    return data


def create_student(client, headers, **overrides):
    r = client.post("/api/v1/students", json=student_payload(**overrides), headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def create_active_teacher(client, lc, mf, hq, **overrides):
    """Create a teacher and walk it through contract upload and HQ approval."""
    r = client.post("/api/v1/teachers", json=teacher_payload(**overrides), headers=lc)
    assert r.status_code == 201, r.text
    teacher = r.json()
    r = client.put(
        f"/api/v1/teachers/{teacher['id']}/contract",
        json={"contract_file": "contracts/grace.pdf", "contract_date": "2026-01-05"},
        headers=mf,
    )
    assert r.status_code == 200, r.text
    r = client.put(f"/api/v1/teachers/{teacher['id']}/approve", headers=hq)
    assert r.status_code == 200, r.text
    return r.json()


def create_public_program(client, hq, name="Robotics Foundations"):
    """An ACTIVE PUBLIC program with one ACTIVE PUBLIC subprogram priced per month."""
    r = client.post(
        "/api/v1/programs",
        json={
            "name": name,
            "description": "Intro robotics",
            "duration": 12,
            "max_students": 10,
            "hours": 24,
            "lesson_length": 90,
            "kind": "ACADEMIC",
            "status": "ACTIVE",
            "visibility": "PUBLIC",
        },
        headers=hq,
    )
    assert r.status_code == 201, r.text
    program = r.json()
    r = client.post(
        "/api/v1/subprograms",
        json={
            "program_id": program["id"],
            "name": f"{name} Level 1",
            "description": "First term",
            "duration": 6,
            "pricing_model": "PER_MONTH",
            "course_price": 300,
            "price_per_month": 100,
            "status": "ACTIVE",
            "visibility": "PUBLIC",
        },
        headers=hq,
    )
    assert r.status_code == 201, r.text
    return program, r.json()


def create_product(client, hq, **overrides):
    data = {
        "sku": "kit-001",
        "name": "Robot Kit",
        "category": "Kits",
        "price": 49.99,
        "cost": 20,
        "stock_quantity": 10,
        "min_stock_level": 3,
    }
    data.update(overrides)
    r = client.post("/api/v1/products", json=data, headers=hq)
    assert r.status_code == 201, r.text
    return r.json()


def second_learning_center(client, mf, ids, login_as):
    """Create LC002 under the seeded MF with its own admin; return (lc, headers)."""
    r = client.post("/api/v1/learning-centers", json={"name": "LC Uptown", "code": "LC002"}, headers=mf)
    assert r.status_code == 201, r.text
    lc = r.json()
    r = client.post(
        "/api/v1/auth/register",
        json={
            "email": "lc2.admin@iqup.com",
            "password": "lc2-password",
            "first_name": "Second",
            "last_name": "Center",
            "role": "LC_ADMIN",
            "account_type": "LC",
            "account_id": lc["id"],
        },
        headers=mf,
    )
    assert r.status_code == 201, r.text
    return lc, login_as("lc2.admin@iqup.com", "lc2-password")
