from __future__ import annotations

import pytest


@pytest.fixture
def three_days(client, entry_payload, master_data):
    client.post("/time-entries", json=entry_payload(project_id=master_data["project"]["id"], location="on_site"))
    client.post(
        "/time-entries",
        json=entry_payload(date="2024-12-02", start_time="09:00", end_time="18:00", break_start="12:30", break_end="13:30"),
    )
    client.post(
        "/time-entries",
        json=entry_payload(date="2024-12-03", start_time="08:30", end_time="16:30", break_start=None, break_end=None),
    )
    return master_data


def test_dashboard_stats_for_month(client, three_days):
    stats = client.get("/dashboard/stats", params={"month": 12, "year": 2024}).json()

    assert stats["total_clients"] == 2
    assert stats["monthly_hours"] == "24.00"
    assert stats["monthly_revenue"] == "3408.00"
    assert stats["active_consultants"] == 1
    assert stats["consultant_stats"][0]["label"] == "Leon"
    assert stats["client_stats"][0]["entries"] == 3


def test_dashboard_for_empty_month(client, three_days):
    stats = client.get("/dashboard/stats", params={"month": 1, "year": 2020}).json()

    assert stats["monthly_hours"] == "0.00"
    assert stats["client_stats"] == []


def test_report_data_summary_and_rows(client, three_days):
    data = client.get("/reports/data", params={"start_date": "2024-12-02"}).json()

    assert data["summary"]["total_entries"] == 2
    assert data["summary"]["total_value"] == "2272.00"
    assert data["summary"]["client_breakdown"][0]["label"] == "SkyStone"
    assert [row["date"] for row in data["rows"]] == ["2024-12-02", "2024-12-03"]
    assert data["rows"][0]["consultant"] == "Leon"


def test_report_rejects_inverted_period(client, three_days):
    response = client.get("/reports/data", params={"start_date": "2024-12-05", "end_date": "2024-12-01"})

    assert response.status_code == 400


def test_analytics(client, three_days):
    report = client.get("/reports/analytics").json()

    assert report["total_hours"] == "24.00"
    assert [(g["label"], g["hours"]) for g in report["by_project"]] == [
        ("Unspecified", "16.00"),
        ("ERP rollout", "8.00"),
    ]
    assert {g["label"] for g in report["by_location"]} == {"On-site", "Unspecified"}


def test_csv_export(client, three_days):
    response = client.get("/reports/export", params={"report_type": "client-summary"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="client-summary.csv"' in response.headers["content-disposition"]
    lines = response.content.decode("utf-8-sig").splitlines()
    assert lines[0] == "group;label;hours;value;entries"
    assert lines[1] == "client;SkyStone;24.00;3408.00;3"
    assert lines[-1] == "client;Total;24.00;3408.00;3"


def test_csv_export_of_empty_period_has_header(client, three_days):
    response = client.get(
        "/reports/export",
        params={"report_type": "entry-detail", "start_date": "2030-01-01", "end_date": "2030-01-31"},
    )

    assert response.status_code == 200
    assert response.content.decode("utf-8-sig").splitlines() == [
        "date;client;consultant;service;project;description;start;end;"
        "break_start;break_end;hours;value;completed;location"
    ]


def test_csv_export_unknown_report(client, three_days):
    response = client.get("/reports/export", params={"report_type": "weekly-digest"})

    assert response.status_code == 400
    assert "Unknown report type" in response.json()["detail"]


def test_report_pdf(client, three_days):
    response = client.get(
        "/reports/pdf", params={"client_id": three_days["client"]["id"], "consultant_id": three_days["consultant"]["id"]}
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


@pytest.mark.parametrize("mode", ["detailed", "synthetic"])
def test_billing_pdf(client, three_days, mode):
    response = client.post(
        "/billing/pdf",
        json={
            "client_id": three_days["client"]["id"],
            "start_date": "2024-12-01",
            "end_date": "2024-12-31",
            "mode": mode,
        },
    )

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
    assert 'filename="billing-CLI001.pdf"' in response.headers["content-disposition"]


def test_billing_pdf_validation(client, three_days):
    period = {"start_date": "2024-12-01", "end_date": "2024-12-31"}

    assert client.post("/billing/pdf", json=dict(period, client_id=999)).status_code == 404
    assert client.post("/billing/pdf", json=dict(period, client_id=1, mode="summary")).status_code == 422
    assert (
        client.post(
            "/billing/pdf", json={"client_id": 1, "start_date": "2024-12-31", "end_date": "2024-12-01"}
        ).status_code
        == 422
    )
