# /snapexport/api.py
"""
High-level API functions for snapexport.

These functions provide a simple interface to the core functionality
for use in external applications or scripts.
"""

from .config import load_config
from .events import EventCategory, EventFilter, SnapshotEvent
from .exporter import RdsExporter
from .export_service import ExportTrigger
from .handler import handle_event

def trigger_from_event(config_path: str, event: dict):
    """
    Run an SNS notification payload through the export pipeline

    Args:
        config_path: Path to the configuration file
        event: SNS-to-Lambda event payload

    Returns:
        Dictionary with one result per admitted snapshot event
    """
    config = load_config(config_path)
    return handle_event(event, config)

def export_snapshot(config_path: str, snapshot_arn: str):
    """
    Start an export for a single snapshot, bypassing the event filter

    Args:
        config_path: Path to the configuration file
        snapshot_arn: ARN of the cluster snapshot to export

    Returns:
        ExportJobResult of the submission

    Raises:
        MalformedEventError: If snapshot_arn is not a valid ARN
    """
    config = load_config(config_path)
    event = SnapshotEvent(
        event_category=EventCategory.BACKUP,
        event_id=None,
        resource_reference=snapshot_arn
    )
    return ExportTrigger(config).trigger(event)

def list_export_tasks(config_path: str, job_identifier: str = None):
    """
    List export tasks

    Args:
        config_path: Path to the configuration file
        job_identifier: Optional export task identifier to narrow the listing

    Returns:
        List of export task descriptions
    """
    config = load_config(config_path)
    return RdsExporter(config).describe_export_tasks(job_identifier=job_identifier)

def filter_policy(config_path: str):
    """
    Build the SNS subscription filter policy

    Args:
        config_path: Path to the configuration file

    Returns:
        Filter policy dictionary
    """
    config = load_config(config_path)
    return EventFilter(config.event_ids).filter_policy()
