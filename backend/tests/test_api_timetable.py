import pytest

from conftest import make_entry
from timegrid.services.session_index import SessionIndex

STANDARD_DAY = {
    "startTime": "09:00",
    "endTime": "17:00",
    "sessionDurationMinutes": 60,
    "shortBreakMinutes": 10,
    "lunchBreakStart": "12:00",
    "lunchBreakMinutes": 60,
}

FACULTY = [
    {"id": "f1", "name": "Dr. Johnson", "department": "CSE", "email": "johnson@example.com", "classes": ["CSE-A", "CSE-B"]},
    {"id": "f2", "name": "Dr. Brown", "department": "CSE", "classes": ["CSE-A"]},
]

COURSES = [
    {"id": "c1", "code": "CSE301", "name": "Data Structures", "department": "CSE", "credits": 3, "facultyId": "f1"},
    {
        "id": "c2",
        "code": "CSE302",
        "name": "Database Systems Lab",
        "department": "CSE",
        "credits": 2,
        "facultyId": "f2",
        "type": "lab",
        "durationMinutes": 120,
        "sessionsPerWeek": 1,
    },
]


def _generate(client, class_name="CSE-A", **extra):
    body = {
        "class": class_name,
        "department": "CSE",
        "semester": "5",
        "academicYear": "2026-2027",
        "timeSlotConfig": STANDARD_DAY,
        "rooms": ["Room 301", "Lab 1"],
        "faculty": FACULTY,
        "courses": COURSES,
    }
    body.update(extra)
    return client.post("/api/generate", json=body)


def _accept(client, generated, class_name="CSE-A"):
    return client.post(
        "/api/timetables",
        json={
            "class": class_name,
            "department": "CSE",
            "semester": "5",
            "academicYear": "2026-2027",
            "entries": generated["entries"],
            "conflicts": generated["conflicts"],
        },
    )


def test_preview_time_grid(client):
    response = client.post("/api/time-grid/preview", json=STANDARD_DAY)

    assert response.status_code == 200
    slots = response.json()
    assert [slot["startTime"] for slot in slots] == ["09:00", "10:10", "13:00", "14:10", "15:20"]
    assert slots[0] == {"index": 0, "startMinutes": 540, "endMinutes": 600, "startTime": "09:00", "endTime": "10:00"}


def test_invalid_time_grid_returns_configuration_error(client):
    response = client.post("/api/time-grid/preview", json={**STANDARD_DAY, "sessionDurationMinutes": 0})

    assert response.status_code == 400
    payload = response.json()
    assert payload["message"] == "sessionDurationMinutes must be greater than zero"
    assert payload["details"] == {"field": "sessionDurationMinutes"}


def test_generate_returns_entries_conflicts_slots_and_summary(client):
    response = _generate(client)

    assert response.status_code == 200
    payload = response.json()
    assert len(payload["entries"]) == 4
    lab = [entry for entry in payload["entries"] if entry["subjectId"] == "c2"]
    assert len(lab) == 1
    assert lab[0]["type"] == "lab"
    assert (lab[0]["startTime"], lab[0]["endTime"]) == ("14:10", "16:20")
    assert payload["summary"] == {"total": 0, "high": 0, "medium": 0, "low": 0}
    assert len(payload["slots"]) == 5


def test_generate_surfaces_data_gaps_as_conflicts(client):
    courses = [*COURSES, {"id": "c3", "code": "CSE303", "name": "Compilers", "department": "CSE", "credits": 3}]

    response = _generate(client, courses=courses)

    assert response.status_code == 200
    conflicts = response.json()["conflicts"]
    assert {
        "type": "teacher",
        "severity": "high",
        "description": "No faculty assigned for course Compilers",
        "resolved": False,
        "sessionId": None,
    } in conflicts


def test_generate_rejects_unknown_day(client):
    response = _generate(client, days=["Funday"])

    assert response.status_code == 422


def test_timetable_lifecycle(client):
    generated = _generate(client).json()

    created = _accept(client, generated)
    assert created.status_code == 201
    timetable_id = created.json()["id"]

    fetched = client.get(f"/api/timetables/{timetable_id}")
    assert fetched.status_code == 200
    body = fetched.json()
    assert body["class"] == "CSE-A"
    assert body["instituteId"] == "inst-1"
    assert len(body["entries"]) == 4
    assert body["supersededById"] is None

    probe = client.post(
        "/api/conflicts/probe",
        json={"facultyId": "f1", "day": "Monday", "startMinutes": 540, "endMinutes": 600, "class": "CSE-B"},
    )
    assert probe.status_code == 200
    assert [row["timetableId"] for row in probe.json()] == [timetable_id]

    kept = body["entries"][:1]
    updated = client.put(f"/api/timetables/{timetable_id}/entries", json={"entries": kept})
    assert updated.status_code == 204
    assert len(client.get(f"/api/timetables/{timetable_id}").json()["entries"]) == 1

    workload = client.get(f"/api/timetables/{timetable_id}/workload/f1")
    assert workload.status_code == 200
    assert workload.json()["totalSessions"] == 1

    deleted = client.delete(f"/api/timetables/{timetable_id}")
    assert deleted.status_code == 204

    missing = client.get(f"/api/timetables/{timetable_id}")
    assert missing.status_code == 404
    assert missing.json()["details"]["resource_id"] == timetable_id

    probe_after = client.post(
        "/api/conflicts/probe",
        json={"facultyId": "f1", "day": "Monday", "startMinutes": 540, "endMinutes": 600, "class": "CSE-B"},
    )
    assert probe_after.json() == []


def test_second_class_sees_first_class_bookings(client):
    _accept(client, _generate(client).json())

    candidate = _generate(client, class_name="CSE-B", courses=COURSES[:1]).json()

    descriptions = [conflict["description"] for conflict in candidate["conflicts"]]
    assert "Dr. Johnson is already teaching class CSE-A on Monday at 09:00-10:00" in descriptions

    avoided = _generate(client, class_name="CSE-B", courses=COURSES[:1], respectExistingBookings=True).json()
    assert [entry["day"] for entry in avoided["entries"]] == ["Monday", "Monday", "Tuesday"]
    assert avoided["summary"]["high"] == 0


def test_detect_conflicts_without_generating(client):
    generated = _generate(client).json()
    timetable_id = _accept(client, generated).json()["id"]
    entries = [{**entry, "class": "CSE-B", "id": f"b-{entry['id']}"} for entry in generated["entries"]]

    report = client.post("/api/conflicts/detect", json={"entries": entries})
    assert report.status_code == 200
    assert report.json()["summary"]["high"] > 0

    excluded = client.post("/api/conflicts/detect", json={"entries": entries, "excludeTimetableId": timetable_id})
    assert excluded.json()["conflicts"] == []


def test_list_and_latest_timetables(client):
    generated = _generate(client).json()
    first_id = _accept(client, generated).json()["id"]
    second_id = _accept(client, generated).json()["id"]

    listed = client.get("/api/timetables", params={"class": "CSE-A", "semester": "5"})
    assert [item["id"] for item in listed.json()] == [second_id]

    history = client.get("/api/timetables", params={"class": "CSE-A", "includeSuperseded": "true"})
    assert {item["id"] for item in history.json()} == {first_id, second_id}

    latest = client.get("/api/timetables/latest", params={"class": "CSE-A", "semester": "5"})
    assert latest.json()["id"] == second_id

    assert client.get("/api/timetables/latest", params={"class": "CSE-Z", "semester": "5"}).status_code == 404


def test_timetables_are_isolated_per_institute(client):
    timetable_id = _accept(client, _generate(client).json()).json()["id"]

    response = client.get(f"/api/timetables/{timetable_id}", headers={"X-Institute-Id": "inst-2"})

    assert response.status_code == 404


def test_reindex_endpoint(client):
    _accept(client, _generate(client).json())

    response = client.post("/api/conflicts/reindex")

    assert response.status_code == 200
    assert response.json() == {"timetables": 1, "written": 4, "failed": 0}


@pytest.mark.parametrize(
    "entries",
    [
        [
            {"id": "dup", "subjectId": "c1", "subjectName": "DS", "facultyId": "f1", "facultyName": "Dr. Johnson",
             "class": "CSE-A", "department": "CSE", "room": "Room 301", "day": "Mon", "startTime": "09:00", "endTime": "10:00"},
            {"id": "dup", "subjectId": "c1", "subjectName": "DS", "facultyId": "f1", "facultyName": "Dr. Johnson",
             "class": "CSE-A", "department": "CSE", "room": "Room 301", "day": "Tue", "startTime": "09:00", "endTime": "10:00"},
        ],
        [
            {"id": "e1", "subjectId": "c1", "subjectName": "DS", "facultyId": "f1", "facultyName": "Dr. Johnson",
             "class": "CSE-A", "department": "CSE", "room": "Room 301", "day": "Monday", "startTime": "10:00", "endTime": "09:00"},
        ],
    ],
)
def test_accept_rejects_malformed_entries(client, entries):
    response = client.post(
        "/api/timetables",
        json={"class": "CSE-A", "department": "CSE", "semester": "5", "entries": entries},
    )

    assert response.status_code == 422


def test_lookup_stays_inside_caller_institute(client, session_factory):
    with session_factory() as session:
        SessionIndex(session).upsert("t-other", [make_entry("e1", class_name="X-1")], "other-inst", "CSE")
        session.commit()

    response = client.post(
        "/api/conflicts/probe",
        json={
            "instituteId": "other-inst",
            "facultyId": "f1",
            "day": "Monday",
            "startMinutes": 540,
            "endMinutes": 600,
            "class": "CSE-B",
        },
    )

    assert response.status_code == 200
    assert response.json() == []
