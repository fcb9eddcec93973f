# /snapexport/events.py
"""
Decoding of RDS snapshot notifications delivered through SNS, and the
filter that decides which of them may start an export.
"""
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .config import AUTOMATED_SNAPSHOT_CREATED
from .errors import MalformedEventError

logger = logging.getLogger(__name__)

AUTOMATED_SNAPSHOT_STARTED = "RDS-EVENT-0168"
AUTOMATED_SNAPSHOT_FAILED = "RDS-EVENT-0170"
MANUAL_SNAPSHOT_STARTED = "RDS-EVENT-0074"
MANUAL_SNAPSHOT_CREATED = "RDS-EVENT-0075"

SNAPSHOT_LIFECYCLE_EVENT_IDS = frozenset({
    AUTOMATED_SNAPSHOT_STARTED,
    AUTOMATED_SNAPSHOT_CREATED,
    AUTOMATED_SNAPSHOT_FAILED,
    MANUAL_SNAPSHOT_STARTED,
    MANUAL_SNAPSHOT_CREATED,
})


class EventCategory(str, Enum):
    BACKUP = "backup"
    OTHER = "other"


@dataclass(frozen=True)
class SnapshotEvent:
    event_category: EventCategory
    event_id: Optional[str]
    resource_reference: str
    source_id: Optional[str] = None
    event_time: Optional[str] = None
    message: Optional[str] = None

    @property
    def snapshot_name(self) -> str:
        """
        Final segment of the resource ARN, e.g. ``rds:mydb-2024-06-26-03-09``

        Used verbatim as the export task identifier. RDS documents
        ExportTaskIdentifier as letters, digits and hyphens only, so names of
        automated snapshots (which carry the ``rds:`` prefix) may be rejected
        with InvalidParameterValue.
        """
        return parse_arn_resource_id(self.resource_reference)


def parse_arn_resource_id(arn: str) -> str:
    """
    Return the resource id of an ARN

    ARNs have the form ``arn:partition:service:region:account:resource-type:resource-id``
    and the resource id itself may contain colons, so only the first six
    separators are significant.

    Raises:
        MalformedEventError: If the value is not an ARN with a resource id
    """
    if not isinstance(arn, str):
        raise MalformedEventError(f"Resource reference is not a string: {arn!r}")

    parts = arn.split(':', 6)
    if len(parts) != 7 or parts[0] != 'arn' or not parts[2] or not parts[6]:
        raise MalformedEventError(f"Resource reference is not a valid ARN: {arn!r}")
    return parts[6]


def _attribute(attributes: Dict[str, Any], name: str) -> Optional[str]:
    attribute = attributes.get(name)
    if isinstance(attribute, dict):
        value = attribute.get('Value')
        if isinstance(value, str) and value:
            return value
    return None


def _decode_message(raw: Any) -> Dict[str, Any]:
    # The RDS notification body is JSON, but nothing in it is required
    if not isinstance(raw, str) or not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        logger.debug("SNS message body is not JSON, ignoring it")
        return {}
    return body if isinstance(body, dict) else {}


def parse_sns_record(record: Dict[str, Any]) -> SnapshotEvent:
    """
    Decode a single SNS record into a SnapshotEvent

    Args:
        record: One entry of the ``Records`` list of an SNS-to-Lambda event

    Returns:
        The decoded SnapshotEvent

    Raises:
        MalformedEventError: If the resource reference is absent or invalid
    """
    if not isinstance(record, dict):
        raise MalformedEventError("SNS record is not an object")

    sns = record.get('Sns')
    if not isinstance(sns, dict):
        raise MalformedEventError("SNS record has no 'Sns' section")

    attributes = sns.get('MessageAttributes')
    if not isinstance(attributes, dict):
        attributes = {}

    resource_reference = _attribute(attributes, 'Resource')
    if resource_reference is None:
        raise MalformedEventError("SNS message has no 'Resource' message attribute")
    parse_arn_resource_id(resource_reference)

    body = _decode_message(sns.get('Message'))

    event_id = _attribute(attributes, 'EventID')
    if event_id is None and isinstance(body.get('Event ID'), str):
        # "http://docs.amazonwebservices.com/RDS/latest/UserGuide/USER_Events.html#RDS-EVENT-0169"
        event_id = body['Event ID'].rsplit('#', 1)[-1] or None

    category = _attribute(attributes, 'EventCategory')
    if category is not None:
        event_category = EventCategory.BACKUP if category.lower() == 'backup' else EventCategory.OTHER
    elif event_id in SNAPSHOT_LIFECYCLE_EVENT_IDS:
        event_category = EventCategory.BACKUP
    else:
        event_category = EventCategory.OTHER

    return SnapshotEvent(
        event_category=event_category,
        event_id=event_id,
        resource_reference=resource_reference,
        source_id=body.get('Source ID'),
        event_time=body.get('Event Time'),
        message=body.get('Event Message'),
    )


def parse_sns_event(event: Dict[str, Any]) -> List[SnapshotEvent]:
    """Decode every record of an SNS-to-Lambda event"""
    if not isinstance(event, dict):
        raise MalformedEventError("Event payload is not an object")

    records = event.get('Records')
    if not isinstance(records, list) or not records:
        raise MalformedEventError("Event payload has no 'Records'")

    return [parse_sns_record(record) for record in records]


class EventFilter:
    """
    Admits only completed automated snapshots

    The same instance renders the SNS subscription filter policy, so the
    filter evaluated by the notification channel and the one evaluated
    locally cannot drift apart.
    """

    def __init__(self, event_ids: Optional[Iterable[str]] = None):
        self.event_ids = tuple(event_ids or (AUTOMATED_SNAPSHOT_CREATED,))

    def admits(self, event: SnapshotEvent) -> bool:
        return event.event_category is EventCategory.BACKUP and event.event_id in self.event_ids

    def filter_policy(self) -> Dict[str, List[str]]:
        return {'EventID': list(self.event_ids)}
