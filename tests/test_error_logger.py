from types import SimpleNamespace

from farm_api import models
from farm_api.error_logger import ErrorLogger


def test_log_writes_row_with_request_info(error_logger, db):
    request = SimpleNamespace(
        state=SimpleNamespace(user_id="u-1"),
        client=SimpleNamespace(host="10.0.0.5"),
        headers={"user-agent": "pytest"},
    )

    error_logger.error("it broke", "tests.sink", {"when": "now"}, request=request)

    entry = db.query(models.ErrorLog).one()
    assert entry.level == "error"
    assert entry.message == "it broke"
    assert entry.source == "tests.sink"
    assert entry.details == {"when": "now"}
    assert entry.user_id == "u-1"
    assert entry.ip_address == "10.0.0.5"
    assert entry.user_agent == "pytest"


def test_unknown_level_is_stored_as_info(error_logger, db):
    error_logger.log("fatal", "odd level", "tests.sink")

    assert db.query(models.ErrorLog).one().level == "info"


def test_non_json_details_are_stringified(error_logger, db):
    error_logger.warn("with object", "tests.sink", {"obj": object})

    details = db.query(models.ErrorLog).one().details
    assert isinstance(details["obj"], str)


def test_store_failure_falls_back_to_console(monkeypatch):
    def broken_factory():
        raise RuntimeError("no database")

    printed = []
    monkeypatch.setattr(
        ErrorLogger,
        "_console_log",
        staticmethod(lambda level, message, source, details=None: printed.append((level, message, source))),
    )

    ErrorLogger(broken_factory).error("lost", "tests.sink")

    assert printed == [("error", "lost", "tests.sink")]


def test_get_logs_filters_and_orders(error_logger, db):
    error_logger.info("first", "a")
    error_logger.error("second", "a")
    error_logger.error("third", "b")

    newest_first = [e.message for e in ErrorLogger.get_logs(db)]
    assert newest_first == ["third", "second", "first"]

    assert [e.message for e in ErrorLogger.get_logs(db, level="error", source="a")] == ["second"]
    assert len(ErrorLogger.get_logs(db, limit=2)) == 2
