# /tests/conftest.py
import json
import pytest

from snapexport.config import ExportConfig

SNAPSHOT_ARN = "arn:aws:rds:us-east-1:123456789012:cluster-snapshot:rds:mydb-2024-06-26-03-09"

def make_sns_event(resource=SNAPSHOT_ARN, event_id="RDS-EVENT-0169", extra_attributes=None, message=None):
    """Build an SNS-to-Lambda payload shaped like an RDS event notification."""
    attributes = {}
    if resource is not None:
        attributes["Resource"] = {"Type": "String", "Value": resource}
    if event_id is not None:
        attributes["EventID"] = {"Type": "String", "Value": event_id}
    attributes.update(extra_attributes or {})

    if message is None:
        body = {
            "Event Source": "db-cluster-snapshot",
            "Event Time": "2024-06-26 03:15:42.123",
            "Identifier Link": "https://console.aws.amazon.com/rds/home",
            "Source ID": "rds:mydb-2024-06-26-03-09",
            "Source ARN": resource,
            "Event Message": "Automated cluster snapshot created",
        }
        if event_id is not None:
            body["Event ID"] = f"http://docs.amazonwebservices.com/RDS/latest/UserGuide/USER_Events.html#{event_id}"
        message = json.dumps(body)

    return {
        "Records": [{
            "EventSource": "aws:sns",
            "EventVersion": "1.0",
            "EventSubscriptionArn": "arn:aws:sns:us-east-1:123456789012:RdsSnapshotCreated:abc",
            "Sns": {
                "Type": "Notification",
                "MessageId": "95df01b4-ee98-5cb9-9903-4c221d41eb5e",
                "TopicArn": "arn:aws:sns:us-east-1:123456789012:RdsSnapshotCreated",
                "Subject": "RDS Notification Message",
                "Message": message,
                "Timestamp": "2024-06-26T03:15:42.123Z",
                "MessageAttributes": attributes,
            },
        }]
    }

@pytest.fixture
def export_config():
    """Create a sample export configuration for testing."""
    return ExportConfig(
        bucket_name="test-backup",
        iam_role_arn="arn:aws:iam::123456789012:role/rds-export-role",
        kms_key_id="arn:aws:kms:us-east-1:123456789012:key/1234abcd-12ab-34cd-56ef-1234567890ab",
        region="us-east-1"
    )

@pytest.fixture
def sns_event():
    """Create a sample SNS event for a completed automated snapshot."""
    return make_sns_event()
