# /snapexport/__init__.py
# snapexport: Event-driven export of RDS cluster snapshots to encrypted, date-partitioned S3 storage

from .version import __version__

from .config import ExportConfig, load_config, load_config_from_env
from .errors import SnapExportError, MalformedEventError, ExportServiceRejection
from .events import EventCategory, EventFilter, SnapshotEvent, parse_sns_event, parse_sns_record
from .exporter import ExportJobRequest, ExportJobResult, RdsExporter
from .export_service import ExportTrigger
from .handler import handle_event, lambda_handler
from .api import (
    trigger_from_event,
    export_snapshot,
    list_export_tasks,
    filter_policy,
)

__all__ = [
    "__version__",
    "ExportConfig",
    "load_config",
    "load_config_from_env",
    "SnapExportError",
    "MalformedEventError",
    "ExportServiceRejection",
    "EventCategory",
    "EventFilter",
    "SnapshotEvent",
    "parse_sns_event",
    "parse_sns_record",
    "ExportJobRequest",
    "ExportJobResult",
    "RdsExporter",
    "ExportTrigger",
    "handle_event",
    "lambda_handler",
    # API functions
    "trigger_from_event",
    "export_snapshot",
    "list_export_tasks",
    "filter_policy",
]
