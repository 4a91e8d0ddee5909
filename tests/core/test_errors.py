"""Error hierarchy - codes, statuses and the JSON error body."""

from tracker.core.errors import (
    ErrorCategory,
    ErrorContext,
    EventBindError,
    EventPersistenceError,
    EventSerializationError,
    GeolocationError,
    IngestionError,
    RequestAbandonedError,
    TrackerError,
)


def test_ingestion_errors_are_client_errors():
    for exc in (
        EventBindError("bad"),
        EventSerializationError("bad"),
        EventPersistenceError("bad", "insert"),
        RequestAbandonedError("bound"),
    ):
        assert isinstance(exc, IngestionError)
        assert exc.http_status == 400


def test_geolocation_error_is_not_request_fatal():
    exc = GeolocationError("down", "connection_error")
    assert not isinstance(exc, IngestionError)
    assert exc.category is ErrorCategory.EXTERNAL_API
    assert exc.reason == "connection_error"


def test_geolocation_timeout_is_categorised():
    assert GeolocationError("slow", "timeout").category is ErrorCategory.TIMEOUT


def test_to_response_has_code_and_severity():
    exc = EventBindError("Failed binding")

    body = exc.to_response()

    assert body["error"]["code"] == "EVENT_BIND_FAILED"
    assert body["error"]["message"] == "Failed binding"
    assert body["error"]["category"] == "validation"


def test_context_defaults_timestamp():
    exc = TrackerError("x", "X", ErrorCategory.INTERNAL, context=ErrorContext())
    assert exc.context.timestamp is not None
