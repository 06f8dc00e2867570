import io

import pandas as pd

from helpers import create_product, create_student, second_learning_center


def test_students_report_csv_is_scoped(client, hq, mf, lc, ids, login_as):
    create_student(client, lc)
    _, lc2 = second_learning_center(client, mf, ids, login_as)
    create_student(client, lc2, first_name="Alan", last_name="Turing")

    r = client.get("/api/v1/reports/students", headers=lc)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert 'filename="students_report.csv"' in r.headers["content-disposition"]
    df = pd.read_csv(io.StringIO(r.text))
    assert list(df["last_name"]) == ["Lovelace"]
    assert list(df["learning_center"]) == ["IQUP Learning Center Downtown"]

    df = pd.read_csv(io.StringIO(client.get("/api/v1/reports/students", headers=hq).text))
    assert sorted(df["last_name"]) == ["Lovelace", "Turing"]


def test_inventory_report_formats(client, hq, lc):
    create_product(client, hq, stock_quantity=4, cost=2.5)

    r = client.get("/api/v1/reports/inventory", params={"format": "xlsx"}, headers=hq)
    assert r.status_code == 200
    assert 'filename="inventory_report.xlsx"' in r.headers["content-disposition"]
    df = pd.read_excel(io.BytesIO(r.content), engine="openpyxl")
    assert list(df["sku"]) == ["KIT-001"]
    assert df["stock_value"].iloc[0] == 10.0

    r = client.get("/api/v1/reports/inventory", params={"format": "pdf"}, headers=hq)
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert r.content.startswith(b"%PDF")

    assert client.get("/api/v1/reports/inventory", headers=lc).status_code == 403


def test_empty_students_report_has_header(client, mf):
    r = client.get("/api/v1/reports/students", headers=mf)
    assert r.status_code == 200
    assert r.text.splitlines()[0].startswith("id,first_name,last_name")
