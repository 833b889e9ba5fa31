from timegrid.core.exceptions import (
    AppError,
    ConfigurationError,
    PersistenceError,
    ResourceNotFoundError,
    SchedulerError,
)


def test_scheduler_error_structure():
    err = SchedulerError(message="Test error", details={"foo": "bar"})
    assert err.status_code == 400
    assert err.message == "Test error"
    assert err.details == {"foo": "bar"}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_configuration_error_names_the_field():
    err = ConfigurationError("sessionDurationMinutes must be greater than zero", field="sessionDurationMinutes")
    assert err.status_code == 400
    assert err.details == {"field": "sessionDurationMinutes"}
    assert ConfigurationError("bad").details == {}


def test_resource_not_found_and_persistence_errors():
    missing = ResourceNotFoundError("Timetable", "t-1")
    assert missing.status_code == 404
    assert missing.message == "Timetable with id t-1 not found"
    assert missing.details == {"resource_type": "Timetable", "resource_id": "t-1"}

    failed = PersistenceError("Unable to save timetable", operation="accept")
    assert failed.status_code == 503
    assert failed.details == {"operation": "accept"}
