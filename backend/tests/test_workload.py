from conftest import make_entry
from timegrid.services.workload import faculty_workload


def test_faculty_workload_totals():
    entries = [
        make_entry("s1"),
        make_entry("s2", start="10:10", end="11:10"),
        make_entry("s3", day="Tuesday", start="13:00", end="15:10", subject_id="c2", subject_name="DBMS Lab"),
        make_entry("s4", faculty_id="f2", faculty_name="Dr. Brown"),
    ]

    workload = faculty_workload(entries, "f1")

    assert workload.faculty_name == "Dr. Johnson"
    assert workload.total_sessions == 3
    assert workload.total_minutes == 60 + 60 + 130
    assert workload.daily_sessions == {"Monday": 2, "Tuesday": 1}
    assert workload.daily_minutes == {"Monday": 120, "Tuesday": 130}
    assert workload.subjects == ["Data Structures", "DBMS Lab"]


def test_faculty_without_sessions_has_empty_workload():
    workload = faculty_workload([make_entry("s1")], "f9")

    assert workload.faculty_name is None
    assert workload.total_sessions == 0
    assert workload.model_dump(by_alias=True)["dailySessions"] == {}
