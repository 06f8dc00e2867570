import io
from datetime import date
from types import SimpleNamespace

import pandas as pd
import pytest

from franchise_api.core.errors import BadRequestError
from franchise_api.core.settings import get_app_settings
from franchise_api.services.royalties import commission, fee_per_student, month_period

from helpers import create_active_teacher, create_public_program, create_student


def _group(snapshot, start=date(2026, 1, 1), end=date(2026, 6, 30), schedule=()):
    return SimpleNamespace(pricing_snapshot=snapshot, start_date=start, end_date=end, schedule=list(schedule))


def test_month_period():
    assert month_period("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    with pytest.raises(BadRequestError):
        month_period("2024-13")


def test_fee_per_student_by_pricing_model():
    march = (date(2026, 3, 1), date(2026, 3, 31))
    assert fee_per_student(_group({"pricing_model": "PER_MONTH", "price_per_month": 100}), *march) == 100
    # six calendar months
    assert fee_per_student(_group({"pricing_model": "PER_COURSE", "course_price": 600}), *march) == 100
    # Tuesdays (day 2) in March 2026: 3, 10, 17, 24, 31; the group ends on the 20th
    sessions = _group(
        {"pricing_model": "PER_SESSION", "price_per_session": 15},
        end=date(2026, 3, 20),
        schedule=[{"day_of_week": 2, "start_time": "16:00", "end_time": "17:00"}],
    )
    assert fee_per_student(sessions, *march) == 45
    assert fee_per_student(_group(None), *march) == 0


def test_commission_tiers(monkeypatch):
    monkeypatch.setenv("ROYALTY_TIER_STUDENTS", "100")
    due = commission(120, 180000, get_app_settings())
    assert (due.first_tier_students, due.beyond_tier_students) == (100, 20)
    assert due.first_tier_commission == 21000
    assert due.beyond_tier_commission == 3600
    assert due.lc_to_mf == 24600
    assert due.mf_to_hq == 12300

    empty = commission(0, 0, get_app_settings())
    assert empty.lc_to_mf == 0 and empty.mf_to_hq == 0


def _running_group(client, hq, mf, lc, student_count):
    program, sub = create_public_program(client, hq)
    teacher = create_active_teacher(client, lc, mf, hq)
    students = [create_student(client, lc, first_name=f"Kid{i}")["id"] for i in range(student_count)]
    r = client.post(
        "/api/v1/learning-groups",
        json={
            "name": "Robotics Tuesday",
            "description": "Weekly robotics class",
            "max_students": 5,
            "start_date": "2026-02-01",
            "end_date": "2026-06-30",
            "location": "Room 1",
            "program_id": program["id"],
            "sub_program_id": sub["id"],
            "teacher_id": teacher["id"],
            "schedule": [{"day_of_week": 2, "start_time": "16:00", "end_time": "17:30"}],
            "students": students,
        },
        headers=lc,
    )
    assert r.status_code == 201, r.text
    return r.json()


def _report(client, headers, **params):
    r = client.get("/api/v1/reports/royalties", params=params, headers=headers)
    assert r.status_code == 200, r.text
    return pd.read_csv(io.StringIO(r.text))


def test_royalties_report_per_learning_center(client, hq, mf, lc, ids, monkeypatch):
    _running_group(client, hq, mf, lc, 3)
    r = client.post(
        "/api/v1/learning-centers", json={"name": "LC Uptown", "code": "LC002"}, headers=mf
    )
    assert r.status_code == 201

    df = _report(client, hq, month="2026-03")
    assert list(df["lc_code"]) == ["LC001", "LC002"]
    row = df.set_index("lc_code").loc["LC001"]
    assert row["period"] == "2026-03"
    assert row["mf_code"] == "MF001"
    assert row["student_count"] == 3
    assert row["revenue"] == 300
    assert row["lc_to_mf_commission"] == 42
    assert row["mf_to_hq_commission"] == 21
    assert df.set_index("lc_code").loc["LC002"]["revenue"] == 0

    monkeypatch.setenv("ROYALTY_TIER_STUDENTS", "2")
    row = _report(client, mf, month="2026-03").set_index("lc_code").loc["LC001"]
    assert row["first_tier_commission"] == 28
    assert row["beyond_tier_commission"] == 12
    assert row["lc_to_mf_commission"] == 40
    assert row["mf_to_hq_commission"] == 20

    # the group is not running in August
    assert _report(client, hq, month="2026-08").set_index("lc_code").loc["LC001"]["revenue"] == 0


def test_royalties_report_access(client, hq, mf, lc, tt):
    other_mf = client.post("/api/v1/accounts/mf", json={"name": "MF West", "code": "MF002"}, headers=hq).json()
    r = client.post(
        "/api/v1/learning-centers",
        json={"name": "LC West", "code": "LC009", "mf_id": other_mf["id"]},
        headers=hq,
    )
    assert r.status_code == 201

    assert sorted(_report(client, hq, month="2026-03")["lc_code"]) == ["LC001", "LC009"]
    assert list(_report(client, mf, month="2026-03")["lc_code"]) == ["LC001"]

    for headers in (lc, tt):
        assert client.get("/api/v1/reports/royalties", headers=headers).status_code == 403
    r = client.get("/api/v1/reports/royalties", params={"month": "March"}, headers=hq)
    assert r.status_code == 400

    r = client.get("/api/v1/reports/royalties", params={"month": "2026-03", "format": "xlsx"}, headers=hq)
    assert r.status_code == 200
    assert 'filename="royalties_report.xlsx"' in r.headers["content-disposition"]
