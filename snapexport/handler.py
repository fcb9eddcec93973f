# /snapexport/handler.py
"""
Lambda entry point: subscribed to the SNS topic fed by the RDS event
subscription, invoked once per delivered notification.
"""
import logging
from typing import Any, Dict, Optional

from .config import ExportConfig, load_config_from_env
from .errors import MalformedEventError
from .events import EventFilter, parse_sns_event
from .export_service import ExportTrigger

logger = logging.getLogger(__name__)

def handle_event(event: Dict[str, Any], config: ExportConfig,
                 trigger: Optional[ExportTrigger] = None) -> Dict[str, Any]:
    """
    Decode, filter and trigger exports for one notification payload

    Args:
        event: SNS-to-Lambda event payload
        config: Export configuration
        trigger: Optional pre-built ExportTrigger

    Returns:
        Dict with one result per admitted snapshot event and a skipped count

    Raises:
        MalformedEventError: If the payload has no usable resource reference
    """
    logger.debug(f"Received notification: {event}")

    try:
        snapshot_events = parse_sns_event(event)
    except MalformedEventError as e:
        logger.error(f"Malformed snapshot notification: {str(e)}")
        raise

    event_filter = EventFilter(config.event_ids)

    results = []
    skipped = 0
    for snapshot_event in snapshot_events:
        if not event_filter.admits(snapshot_event):
            logger.info(
                f"Ignoring {snapshot_event.event_category.value} event {snapshot_event.event_id} "
                f"for {snapshot_event.resource_reference}"
            )
            skipped += 1
            continue

        if trigger is None:
            trigger = ExportTrigger(config)
        results.append(trigger.trigger(snapshot_event).to_dict())

    return {'results': results, 'skipped': skipped}

def lambda_handler(event, context):
    config = load_config_from_env()
    logging.getLogger().setLevel(getattr(logging, config.log_level, logging.INFO))
    return handle_event(event, config)
