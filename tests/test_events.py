# /tests/test_events.py
import json
import pytest

from snapexport.errors import MalformedEventError
from snapexport.events import (
    EventCategory,
    EventFilter,
    SnapshotEvent,
    parse_arn_resource_id,
    parse_sns_event,
    parse_sns_record,
)

from conftest import SNAPSHOT_ARN, make_sns_event

def test_parse_sns_event(sns_event):
    """Test decoding of a completed automated snapshot notification."""
    events = parse_sns_event(sns_event)

    assert len(events) == 1
    event = events[0]
    assert isinstance(event, SnapshotEvent)
    assert event.event_category is EventCategory.BACKUP
    assert event.event_id == "RDS-EVENT-0169"
    assert event.resource_reference == SNAPSHOT_ARN
    assert event.source_id == "rds:mydb-2024-06-26-03-09"
    assert event.event_time == "2024-06-26 03:15:42.123"
    assert event.message == "Automated cluster snapshot created"

def test_snapshot_name_is_final_arn_segment(sns_event):
    """Test that the snapshot name keeps colons inside the resource id."""
    event = parse_sns_event(sns_event)[0]

    assert event.snapshot_name == "rds:mydb-2024-06-26-03-09"

def test_parse_arn_resource_id_manual_snapshot():
    """Test resource ids without colons."""
    arn = "arn:aws:rds:us-east-1:123456789012:cluster-snapshot:nightly-manual"
    assert parse_arn_resource_id(arn) == "nightly-manual"

@pytest.mark.parametrize("value", [
    "",
    "not-an-arn",
    "arn:aws:rds:us-east-1:123456789012:cluster-snapshot",
    "arn:aws:rds:us-east-1:123456789012:cluster-snapshot:",
    "urn:aws:rds:us-east-1:123456789012:cluster-snapshot:rds:mydb",
    42,
])
def test_parse_arn_resource_id_rejects_invalid(value):
    """Test that non-ARN resource references fail closed."""
    with pytest.raises(MalformedEventError):
        parse_arn_resource_id(value)

def test_missing_resource_attribute():
    """Test that a payload without the resource reference is malformed."""
    with pytest.raises(MalformedEventError):
        parse_sns_event(make_sns_event(resource=None))

def test_invalid_resource_attribute():
    """Test that a resource reference that is not an ARN is malformed."""
    with pytest.raises(MalformedEventError):
        parse_sns_event(make_sns_event(resource="rds:mydb-2024-06-26-03-09"))

@pytest.mark.parametrize("payload", [
    {},
    {"Records": []},
    {"Records": [{}]},
    {"Records": [{"Sns": {}}]},
    {"Records": [{"Sns": {"MessageAttributes": {"Resource": {"Type": "String"}}}}]},
    {"Records": ["not-a-record"]},
    [],
])
def test_structurally_malformed_payloads(payload):
    """Test that payloads missing the nested attribute fail closed."""
    with pytest.raises(MalformedEventError):
        parse_sns_event(payload)

def test_extra_fields_are_tolerated():
    """Test that unused attributes and a non-JSON body do not break decoding."""
    event = make_sns_event(
        extra_attributes={"Unused": {"Type": "String", "Value": "ignored"}},
        message="plain text body"
    )
    event["Records"][0]["Sns"]["Extra"] = {"nested": True}

    decoded = parse_sns_event(event)[0]

    assert decoded.resource_reference == SNAPSHOT_ARN
    assert decoded.event_id == "RDS-EVENT-0169"
    assert decoded.source_id is None

def test_event_id_from_message_body():
    """Test that the event id falls back to the message's Event ID link."""
    decoded = parse_sns_event(make_sns_event(event_id=None))

    assert decoded[0].event_id is None
    assert decoded[0].event_category is EventCategory.OTHER

    body = json.dumps({
        "Event ID": "http://docs.amazonwebservices.com/RDS/latest/UserGuide/USER_Events.html#RDS-EVENT-0169"
    })
    decoded = parse_sns_record(make_sns_event(event_id=None, message=body)["Records"][0])

    assert decoded.event_id == "RDS-EVENT-0169"
    assert decoded.event_category is EventCategory.BACKUP

def test_event_category_attribute_wins():
    """Test that an explicit EventCategory attribute sets the category."""
    event = make_sns_event(extra_attributes={"EventCategory": {"Type": "String", "Value": "notification"}})

    assert parse_sns_event(event)[0].event_category is EventCategory.OTHER

def test_unknown_event_id_is_other_category():
    """Test that event ids outside the snapshot lifecycle are not backup events."""
    event = make_sns_event(event_id="RDS-EVENT-0001")

    assert parse_sns_event(event)[0].event_category is EventCategory.OTHER

def test_multiple_records():
    """Test that every record is decoded."""
    first = make_sns_event()
    second = make_sns_event(event_id="RDS-EVENT-0168")
    payload = {"Records": first["Records"] + second["Records"]}

    events = parse_sns_event(payload)

    assert [e.event_id for e in events] == ["RDS-EVENT-0169", "RDS-EVENT-0168"]

@pytest.mark.parametrize("event_id, admitted", [
    ("RDS-EVENT-0169", True),   # automated snapshot created
    ("RDS-EVENT-0168", False),  # automated snapshot creation started
    ("RDS-EVENT-0075", False),  # manual snapshot created
    ("RDS-EVENT-0074", False),  # manual snapshot creation started
    ("RDS-EVENT-0170", False),  # snapshot failed
    (None, False),
])
def test_event_filter_admits_only_completed_automated_snapshots(event_id, admitted):
    """Test the filter predicate across snapshot lifecycle codes."""
    event = SnapshotEvent(
        event_category=EventCategory.BACKUP,
        event_id=event_id,
        resource_reference=SNAPSHOT_ARN
    )

    assert EventFilter().admits(event) is admitted

def test_event_filter_rejects_other_category():
    """Test that the right code under a different category is dropped."""
    event = SnapshotEvent(
        event_category=EventCategory.OTHER,
        event_id="RDS-EVENT-0169",
        resource_reference=SNAPSHOT_ARN
    )

    assert EventFilter().admits(event) is False

def test_event_filter_policy():
    """Test the rendered SNS subscription filter policy."""
    assert EventFilter().filter_policy() == {"EventID": ["RDS-EVENT-0169"]}
    assert EventFilter(["RDS-EVENT-0169", "RDS-EVENT-0075"]).filter_policy() == {
        "EventID": ["RDS-EVENT-0169", "RDS-EVENT-0075"]
    }
