def create_appointment(client, **overrides):
    payload = {"firstName": "Jane", "lastName": "Doe", "sdrName": "Ashar"}
    payload.update(overrides)
    response = client.post("/appointments", json=payload)
    assert response.status_code == 200
    return response.json()["id"]


def test_root_endpoint(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "message" in data
    assert "docs" in data


def test_create_appointment_returns_camel_case_view(client):
    """Test creating an appointment with only the required fields."""
    response = client.post("/appointments", json={"firstName": "Jane", "lastName": "Doe", "sdrName": "Ashar"})
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["notifications"][0]["title"] == "Appointment added successfully"
    assert data["notifications"][0]["isError"] is False

    response = client.get("/appointments")
    assert response.status_code == 200
    [appointment] = response.json()
    assert appointment["id"] == data["id"]
    assert appointment["sdrName"] == "Ashar"
    assert appointment["email"] == ""
    assert appointment["rescheduleComments"] == ""
    assert appointment["status"] == "pending"
    assert appointment["conducted"] is False
    assert appointment["noShow"] is False


def test_create_appointment_missing_required_fields(client):
    """Test presence validation on save."""
    response = client.post("/appointments", json={"firstName": "Jane"})
    assert response.status_code == 400
    assert "Last Name" in response.json()["detail"]
    assert client.get("/appointments").json() == []


def test_legacy_flags_collapse_to_status(client):
    """Conducted takes precedence when both legacy flags are set."""
    create_appointment(client, conducted=True, noShow=True)

    [appointment] = client.get("/appointments").json()
    assert appointment["status"] == "conducted"
    assert appointment["noShow"] is False


def test_list_appointments_with_filters(client):
    """Test search, status and SDR filters."""
    create_appointment(client, firstName="Jane", company="Acme", status="conducted")
    create_appointment(client, firstName="John", company="Globex", sdrName="Muhammad Hassan")
    create_appointment(client, firstName="Ann", company="Acme", status="no-show")

    names = lambda r: sorted(a["firstName"] for a in r.json())
    assert names(client.get("/appointments?search=acme")) == ["Ann", "Jane"]
    assert names(client.get("/appointments?status=pending")) == ["John"]
    assert names(client.get("/appointments?status=no-show")) == ["Ann"]
    assert names(client.get("/appointments?sdr=Muhammad%20Hassan")) == ["John"]
    assert client.get("/appointments?status=maybe").status_code == 422


def test_update_appointment(client):
    """Test editing an appointment."""
    appointment_id = create_appointment(client, company="Acme")

    response = client.put(
        f"/appointments/{appointment_id}",
        json={"firstName": "Jane", "lastName": "Doe", "sdrName": "Ashar", "company": "Globex", "opportunity": True},
    )
    assert response.status_code == 200
    assert response.json()["notifications"][0]["title"] == "Appointment updated successfully"

    [appointment] = client.get("/appointments").json()
    assert appointment["company"] == "Globex"
    assert appointment["opportunity"] is True


def test_update_appointment_not_found(client):
    """Test editing a non-existent appointment."""
    response = client.put("/appointments/99999", json={"firstName": "A", "lastName": "B", "sdrName": "C"})
    assert response.status_code == 404


def test_delete_appointment_requires_confirmation(client):
    """Test deletion is a two-step action."""
    appointment_id = create_appointment(client)

    response = client.delete(f"/appointments/{appointment_id}")
    assert response.status_code == 409
    assert len(client.get("/appointments").json()) == 1

    response = client.delete(f"/appointments/{appointment_id}?confirm=true")
    assert response.status_code == 200
    assert response.json()["ok"] is True
    assert client.get("/appointments").json() == []


def test_delete_appointment_not_found(client):
    """Test deleting non-existent appointment."""
    response = client.delete("/appointments/99999?confirm=true")
    assert response.status_code == 404


def test_import_csv(client):
    """Test bulk import from a CSV upload."""
    csv_text = "First Name,Last Name,Email,Conducted\nJane,Doe,jane@x.com,Yes\nJohn,Roe,john@x.com,no\n"
    response = client.post(
        "/appointments/import",
        files={"file": ("appointments.csv", csv_text.encode(), "text/csv")},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert data["notifications"][-1]["description"] == "Imported 2 appointments"

    appointments = {a["firstName"]: a for a in client.get("/appointments").json()}
    assert appointments["Jane"]["conducted"] is True
    assert appointments["John"]["conducted"] is False
    assert appointments["Jane"]["noShow"] is False
    assert appointments["John"]["noShow"] is False


def test_import_rejects_non_csv_files(client):
    response = client.post("/appointments/import", files={"file": ("data.xlsx", b"x", "application/octet-stream")})
    assert response.status_code == 400


def test_import_with_bad_row_commits_nothing(client):
    csv_text = "First Name,Appointment Scheduled for\nJane,2025-01-02\nJohn,someday\n"
    response = client.post("/appointments/import", files={"file": ("a.csv", csv_text.encode(), "text/csv")})
    assert response.status_code == 400
    assert "Line 3" in response.json()["detail"]
    assert client.get("/appointments").json() == []


def test_appointment_summary(client):
    create_appointment(client, status="conducted", opportunity=True, company="Acme")
    create_appointment(client, status="no-show", company="Acme")
    create_appointment(client, sdrName="Muhammad Hassan", company="Globex")

    data = client.get("/appointments/summary").json()
    assert data == {
        "total": 3,
        "conducted": 1,
        "noShows": 1,
        "pending": 1,
        "opportunities": 1,
        "companies": 2,
        "representatives": 2,
    }
    assert client.get("/appointments/representatives").json() == {"representatives": ["Muhammad Hassan", "Ashar"]}


def test_statistics_crud_and_summary(client):
    """Test daily statistics and the rollup per SDR."""
    rows = [
        {"sdrName": "Ashar", "date": "2024-09-23", "calls": 120, "connected": 61, "emails": 22, "potentialAppt": 12},
        {"sdrName": "Muhammad Hassan", "date": "2024-09-23", "calls": 136, "connected": 31, "emails": 24, "potentialAppt": 6},
        {"sdrName": "Ashar", "date": "2024-09-24", "calls": 126, "connected": 32},
    ]
    for row in rows:
        assert client.post("/statistics", json=row).status_code == 200

    listed = client.get("/statistics").json()
    assert [s["date"] for s in listed] == ["2024-09-24", "2024-09-23", "2024-09-23"]

    summary = client.get("/statistics/summary").json()
    assert summary["totals"]["calls"] == 382
    assert summary["totals"]["connected"] == 124
    assert summary["totals"]["potentialAppt"] == 18
    assert summary["totals"]["connectionRate"] == "32.5"
    by_sdr = {r["sdrName"]: r for r in summary["byRepresentative"]}
    assert by_sdr["Ashar"]["calls"] == 246
    assert by_sdr["Muhammad Hassan"]["connectionRate"] == "22.8"


def test_statistics_summary_without_rows(client):
    summary = client.get("/statistics/summary").json()
    assert summary["totals"]["connectionRate"] == "0"
    assert summary["byRepresentative"] == []


def test_statistics_reject_negative_counters(client):
    response = client.post("/statistics", json={"sdrName": "Ashar", "date": "2024-09-23", "calls": -1})
    assert response.status_code == 422


def test_incentives_are_persisted(client):
    """Test SPIFFs survive a reload."""
    payload = {
        "approved": True,
        "dateAnnounced": "2024-01-15",
        "announcedBy": "Sarah Johnson",
        "bdrName": "Manikant Ojha",
        "amount": 500,
        "currency": "usd",
        "reason": "Q4 Target Achievement",
    }
    assert client.post("/incentives", json=payload).status_code == 200
    assert client.post("/incentives", json={**payload, "approved": False, "amount": 200}).status_code == 200

    listed = client.get("/incentives").json()
    assert len(listed) == 2
    assert listed[0]["currency"] == "USD"

    summary = client.get("/incentives/summary").json()
    assert summary == {"count": 2, "approvedTotal": 500, "pendingTotal": 200, "recipients": 1}


def test_incentive_rejects_unknown_currency(client):
    response = client.post(
        "/incentives",
        json={"dateAnnounced": "2024-01-15", "announcedBy": "S", "bdrName": "B", "reason": "R", "currency": "XYZ"},
    )
    assert response.status_code == 422


def test_weekly_meetings_merge_appointments(client):
    """Test manual meetings and appointment-derived rows for one month."""
    create_appointment(client, scheduledFor="2025-01-29", company="Acme", country="UK")
    response = client.post(
        "/weekly-meetings",
        json={
            "week": "Week 1 (1-7th)",
            "month": "January",
            "year": "2025",
            "firstName": "Manikant",
            "lastName": "Ojha",
            "companyName": "TechCorp Inc",
            "assignedTo": "John Smith (AE)",
        },
    )
    assert response.status_code == 200
    meeting_id = response.json()["id"]

    rows = client.get("/weekly-meetings?month=January&year=2025").json()
    assert [r["source"] for r in rows] == ["manual", "appointment"]
    assert rows[0]["editable"] is True
    assert rows[0]["meeting"]["id"] == meeting_id
    assert rows[1]["editable"] is False
    assert rows[1]["meeting"]["week"] == "Week 5"
    assert rows[1]["meeting"]["companyName"] == "Acme"
    assert rows[1]["meeting"]["location"] == "UK"

    assert client.get("/weekly-meetings?month=February&year=2025").json() == []
    assert client.get("/weekly-meetings?month=Smarch&year=2025").status_code == 400


def test_weekly_meeting_update_and_delete(client):
    response = client.post(
        "/weekly-meetings",
        json={"month": "March", "year": "2025", "firstName": "A", "lastName": "B", "companyName": "C"},
    )
    meeting_id = response.json()["id"]

    response = client.put(
        f"/weekly-meetings/{meeting_id}",
        json={"month": "March", "year": "2025", "firstName": "A", "lastName": "B", "companyName": "Initech"},
    )
    assert response.status_code == 200
    rows = client.get("/weekly-meetings?month=March&year=2025").json()
    assert rows[0]["meeting"]["companyName"] == "Initech"

    assert client.delete(f"/weekly-meetings/{meeting_id}?confirm=true").status_code == 200
    assert client.get("/weekly-meetings?month=March&year=2025").json() == []


def test_weekly_meeting_options(client):
    data = client.get("/weekly-meetings/options").json()
    assert data["weeks"][0] == "Week 1 (1-7th)"
    assert len(data["months"]) == 12
    assert data["years"] == ["2024", "2025", "2026"]


def test_tabs(client):
    tabs = client.get("/tabs?active=stats").json()
    assert [t["id"] for t in tabs] == ["appointments", "spiff", "weekly", "stats"]
    assert [t["id"] for t in tabs if t["active"]] == ["stats"]

    tabs = client.get("/tabs?active=nonsense").json()
    assert [t["id"] for t in tabs if t["active"]] == ["appointments"]


def test_import_rejects_oversized_upload(client, monkeypatch):
    import app as app_module

    monkeypatch.setattr(app_module, "MAX_IMPORT_BYTES", 16)
    csv_text = "First Name,Last Name\nJane,Doe\nJohn,Roe\n"

    response = client.post("/appointments/import", files={"file": ("big.csv", csv_text.encode(), "text/csv")})

    assert response.status_code == 413
    assert client.get("/appointments").json() == []
