import io
from datetime import date

from openpyxl import load_workbook


# ==========================================================
# attendance
# ==========================================================

def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_current_meeting_without_record(client):
    res = client.get("/v1/attendance/current", params={"today": "2026-10-19"})

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["meeting_type"] == "Midweek"
    assert data["date_mm_dd_yyyy"] == "October 21, 2026"
    assert data["meeting_info"] == "Midweek Meeting – October 21, 2026"
    assert data["deaf"] is None and data["hearing"] is None
    assert data["exists"] is False


def test_current_meeting_from_typed_date(client):
    res = client.get("/v1/attendance/current", params={"input_date": "November 2, 2024"})
    data = res.json()["data"]
    # November 2, 2024 is a Saturday
    assert (data["meeting_type"], data["date_mm_dd_yyyy"]) == ("Weekend", "November 03, 2024")


def test_save_current_meeting_flow(client):
    body = {"today": "2026-10-22", "deaf": "-2", "hearing": "045"}

    first = client.put("/v1/attendance/current", json=body).json()
    assert first["data"]["action"] == "inserted"
    assert first["message"] == "New attendance record inserted successfully."
    assert first["data"]["record"] == {
        "date_mm_dd_yyyy": "October 25, 2026",
        "meeting_type": "Weekend",
        "deaf": 0,
        "hearing": 45,
        "total": 45,
    }

    again = client.put("/v1/attendance/current", json=body).json()
    assert again["data"]["action"] == "unchanged"
    assert again["message"] == "No changes detected. Submission aborted."

    body["deaf"] = 4
    updated = client.put("/v1/attendance/current", json=body).json()
    assert updated["message"] == "Attendance updated successfully."
    assert updated["data"]["record"]["total"] == 49

    current = client.get("/v1/attendance/current", params={"today": "2026-10-22"}).json()["data"]
    assert (current["deaf"], current["hearing"], current["total"], current["exists"]) == (4, 45, 49, True)


def test_create_read_update_delete(client):
    created = client.post(
        "/v1/attendance/", json={"date_mm_dd_yyyy": "10_14_2026", "deaf": 3, "hearing": 30}
    )
    assert created.status_code == 201
    assert created.json()["data"]["date_mm_dd_yyyy"] == "October 14, 2026"
    assert created.json()["data"]["meeting_type"] == "Midweek"

    duplicate = client.post("/v1/attendance/", json={"date_mm_dd_yyyy": "October 14, 2026", "deaf": 1})
    assert duplicate.status_code == 409

    row = client.get("/v1/attendance/10_14_2026").json()["data"]
    assert row["total"] == 33

    updated = client.put("/v1/attendance/October 14, 2026", json={"hearing": 40}).json()
    assert updated["data"]["total"] == 43
    assert updated["data"]["deaf"] == 3

    deleted = client.delete("/v1/attendance/10_14_2026").json()
    assert deleted["message"] == "Attendance record deleted successfully."
    assert client.get("/v1/attendance/10_14_2026").status_code == 404


def test_bad_date_key_is_422(client):
    res = client.get("/v1/attendance/notadate")
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "INVALID_DATE"


def test_list_grouped_and_periods(client, add_row):
    add_row(date(2026, 9, 30), 2, 20)
    add_row(date(2026, 10, 4), 4, 60)
    add_row(date(2026, 10, 7), 3, 30)

    listed = client.get("/v1/attendance/").json()["data"]
    assert [r["date_mm_dd_yyyy"] for r in listed] == ["September 30, 2026", "October 04, 2026", "October 07, 2026"]

    october = client.get("/v1/attendance/", params={"month": "October", "year": "2026"}).json()["data"]
    assert len(october) == 2

    grouped = client.get("/v1/attendance/grouped").json()["data"]
    assert [g["label"] for g in grouped] == ["September 2026", "October 2026"]
    assert grouped[1]["midWeekTotal"] == 33
    assert grouped[1]["weekendDeafTotal"] == 4

    periods = client.get("/v1/attendance/periods").json()["data"]
    assert periods == {"months": ["September", "October"], "years": ["2026"]}


def test_websocket_sends_snapshot_and_changes(client, add_row):
    add_row(date(2026, 10, 4), 4, 60)

    with client.websocket_connect("/v1/attendance/ws") as ws:
        snapshot = ws.receive_json()
        assert snapshot["event"] == "snapshot"
        assert len(snapshot["data"]) == 1

        client.post("/v1/attendance/", json={"date_mm_dd_yyyy": "October 07, 2026", "deaf": 1, "hearing": 9})
        change = ws.receive_json()
        assert change["event"] == "attendance"
        assert [r["date_mm_dd_yyyy"] for r in change["data"]] == ["October 04, 2026", "October 07, 2026"]


# ==========================================================
# reports / exports
# ==========================================================

def test_monthly_reports_are_upserted(client, add_row):
    add_row(date(2026, 10, 4), 4, 60)
    add_row(date(2026, 10, 7), 3, 30)

    first = client.get("/v1/reports/monthly").json()
    assert first["logs"] == ["Inserting report for October 2026"]
    assert first["data"][0]["midWeek"]["total"] == 33

    second = client.get("/v1/reports/monthly").json()
    assert second["logs"] == ["Nothing change report for October 2026"]

    stored = client.get("/v1/reports/").json()["data"]
    assert stored[0]["month_year"] == "October 2026"
    assert stored[0]["weekend_total"] == 64


def test_monthly_reports_without_data(client):
    res = client.get("/v1/reports/monthly").json()
    assert res["data"] == []
    assert res["message"] == "No attendance data available."


def test_year_export_download(client, add_row):
    add_row(date(2026, 10, 4), 4, 60)

    res = client.get("/v1/exports/year/2026.xlsx")
    assert res.status_code == 200
    assert "attendance_report_2026.xlsx" in res.headers["content-disposition"]
    wb = load_workbook(io.BytesIO(res.content))
    assert wb.sheetnames == ["Year 2026", "Reports"]

    missing = client.get("/v1/exports/year/2001.xlsx")
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "No data available for the selected year"


def test_range_export_download_and_validation(client, add_row):
    add_row(date(2026, 10, 4), 4, 60)

    ok = client.get(
        "/v1/exports/range.xlsx",
        params={"start_month": "October", "start_year": 2026, "end_month": "October", "end_year": 2026},
    )
    assert ok.status_code == 200
    assert ok.headers["content-type"].startswith("application/vnd.openxmlformats")

    incomplete = client.get("/v1/exports/range.xlsx", params={"start_month": "October"})
    assert incomplete.status_code == 400
    assert incomplete.json()["error"]["message"] == "Please select start and end month/year"


def test_reports_export_download(client, add_row):
    add_row(date(2026, 10, 4), 4, 60)

    res = client.get("/v1/exports/reports.xlsx")
    assert res.status_code == 200
    assert load_workbook(io.BytesIO(res.content)).sheetnames == ["Attendance Reports"]



def test_periods_skip_stored_rows_with_malformed_keys(client, db, add_row):
    from models.attendance import Attendance as AttendanceModel

    add_row(date(2026, 10, 4), 4, 60)
    db.add(
        AttendanceModel(
            date_mm_dd_yyyy="not a date", meeting_date=date(2026, 10, 5),
            meeting_type="Weekend", deaf=1, hearing=1, total=2,
        )
    )
    db.commit()

    periods = client.get("/v1/attendance/periods").json()["data"]
    assert periods == {"months": ["October"], "years": ["2026"]}


def test_overflowing_counts_are_saved_as_zero(client):
    res = client.put(
        "/v1/attendance/current", json={"today": "2026-10-22", "deaf": "1e400", "hearing": 5}
    )
    assert res.status_code == 200
    assert res.json()["data"]["record"]["deaf"] == 0

    # a bare Infinity literal is accepted by the JSON decoder
    raw = client.put(
        "/v1/attendance/current",
        content='{"today": "2026-10-22", "deaf": Infinity, "hearing": 6}',
        headers={"Content-Type": "application/json"},
    )
    assert raw.status_code == 200
    assert raw.json()["data"]["record"] == {
        "date_mm_dd_yyyy": "October 25, 2026",
        "meeting_type": "Weekend",
        "deaf": 0,
        "hearing": 6,
        "total": 6,
    }


def test_create_losing_a_race_is_409(client, add_row, monkeypatch):
    from services import attendance_service

    add_row(date(2026, 10, 14), 3, 30)
    # the duplicate check ran before the other request committed
    monkeypatch.setattr(attendance_service, "get_attendance", lambda db, key: None)

    res = client.post("/v1/attendance/", json={"date_mm_dd_yyyy": "October 14, 2026", "deaf": 1})
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DUPLICATE"
