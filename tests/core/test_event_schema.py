"""Event schemas - strict binding, wire keys and the enriched document shape."""

import pytest
from pydantic import ValidationError

from tracker.schemas.event import (
    EnrichedEvent, EventSubmission, GeoRecord, UserAgentRecord,
)


def test_submission_binds_capitalised_keys():
    submission = EventSubmission.model_validate_json(
        b'{"Cookie": "c", "Event_name": "view", "UserID": "u1", "Deep": true}',
    )
    assert submission.cookie == "c"
    assert submission.event_name == "view"
    assert submission.user_id == "u1"
    assert submission.deep is True


@pytest.mark.parametrize("body", [
    b'{"Page": 1}',
    b'{"Deep": 0}',
    b'{"Deep": "false"}',
    b'{"Details": []}',
    b'{"UserAgent": {"Name": "x"}}',
])
def test_submission_rejects_mistyped_fields(body):
    with pytest.raises(ValidationError):
        EventSubmission.model_validate_json(body)


def test_details_keeps_arbitrary_nested_json():
    submission = EventSubmission.model_validate_json(
        b'{"Details": {"a": [1, {"b": null}], "c": 1.5}}',
    )
    assert submission.details == {"a": [1, {"b": None}], "c": 1.5}


def test_enriched_event_overwrites_server_fields():
    submission = EventSubmission.model_validate_json(
        b'{"Ip": "6.6.6.6", "UserAgent": "spoofed", "Page": "/p"}',
    )

    event = EnrichedEvent.from_submission(submission, "10.0.0.1", "real")

    assert event.ip == "10.0.0.1"
    assert event.user_agent == "real"
    assert event.page == "/p"


def test_body_cannot_supply_enrichment():
    submission = EventSubmission.model_validate_json(
        b'{"IpData": {"country": "ZZ"}, "UserAgentData": {"Name": "Fake"}}',
    )

    event = EnrichedEvent.from_submission(submission, "10.0.0.1", "ua")

    assert event.ip_data is None
    assert event.user_agent_data == UserAgentRecord()


def test_enriched_document_has_every_key():
    event = EnrichedEvent.from_submission(EventSubmission(), "10.0.0.1", "ua")

    document = event.model_dump(mode="json", by_alias=True)

    assert set(document) == {
        "Cookie", "Referrer", "Page", "Event_name", "UserID", "Size",
        "Language", "Deep", "Details", "Ip", "UserAgent", "IpData",
        "UserAgentData",
    }


def test_geo_record_keeps_unknown_provider_fields():
    record = GeoRecord.model_validate({"ip": "8.8.8.8", "country": "US", "anycast": True})

    dumped = record.model_dump(exclude_none=True)

    assert dumped["country"] == "US"
    assert dumped["anycast"] is True
