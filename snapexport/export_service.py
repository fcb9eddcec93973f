# /snapexport/export_service.py
import logging
import posixpath
from datetime import datetime, timezone
from typing import Callable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .config import ExportConfig
from .events import SnapshotEvent
from .exporter import ExportJobRequest, ExportJobResult, RdsExporter
from .errors import ExportServiceRejection

logger = logging.getLogger(__name__)

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)

class ExportTrigger:
    """Turns one snapshot event into exactly one export task request"""

    def __init__(self, config: ExportConfig, exporter: Optional[RdsExporter] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the export trigger

        Args:
            config: Export configuration, read-only for the trigger's lifetime
            exporter: Export service client, created from config when omitted
            clock: Source of the current time for the date partition
        """
        self.config = config
        self.exporter = exporter or RdsExporter(config)
        self.clock = clock or _utc_now

    def partition_prefix(self) -> str:
        """Destination prefix for exports started now: ``[base/]YYYY/MM/DD``"""
        date_path = self.clock().strftime('%Y/%m/%d')
        base = self.config.prefix.strip('/')
        return posixpath.join(base, date_path) if base else date_path

    def build_request(self, event: SnapshotEvent) -> ExportJobRequest:
        """
        Derive the export request for a snapshot event

        The job identifier is the snapshot's own name, so a redelivered event
        yields the same identifier and the export service rejects the duplicate.

        Raises:
            MalformedEventError: If the event's resource reference is not an ARN
        """
        return ExportJobRequest(
            job_identifier=event.snapshot_name,
            source_reference=event.resource_reference,
            bucket_name=self.config.bucket_name,
            prefix=self.partition_prefix(),
            iam_role_arn=self.config.iam_role_arn,
            kms_key_id=self.config.kms_key_id,
            export_only=self.config.export_only
        )

    def trigger(self, event: SnapshotEvent) -> ExportJobResult:
        """
        Submit the export task for a snapshot event

        Args:
            event: An event admitted by the EventFilter

        Returns:
            ExportJobResult, accepted or rejected

        Raises:
            MalformedEventError: If the event's resource reference is not an ARN
            ClientError: If the export service throttled the call or failed server-side
            BotoCoreError: If the export service could not be reached in time
        """
        logger.info(f"Received snapshot event {event.event_id} for {event.resource_reference}")

        request = self.build_request(event)

        try:
            result = self.exporter.start_export_task(request)
        except ExportServiceRejection as e:
            logger.error(f"Export task {e.job_identifier} rejected: {e.code}: {e.message}")
            return ExportJobResult(
                job_identifier=e.job_identifier,
                accepted=False,
                reason=e.code,
                message=e.message
            )
        except (BotoCoreError, ClientError) as e:
            # Only throttling and server-side errors reach here as ClientError
            logger.error(f"Export task {request.job_identifier} could not be submitted: {str(e)}")
            raise

        logger.info(f"Export task {result.job_identifier} accepted with status {result.status}")
        return result
