# /snapexport/exporter.py
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from .config import ExportConfig
from .errors import ExportServiceRejection

logger = logging.getLogger(__name__)

# Left to redelivery of the triggering event rather than reported as rejections
TRANSIENT_ERROR_CODES = frozenset({
    'Throttling',
    'ThrottlingException',
    'RequestLimitExceeded',
    'TooManyRequestsException',
    'RequestThrottled',
    'InternalFailure',
    'InternalError',
    'ServiceUnavailable',
    'RequestTimeout',
    'RequestTimeoutException',
})

def is_transient_error(error: ClientError) -> bool:
    """True for throttling and server-side failures of the export service"""
    code = error.response.get('Error', {}).get('Code')
    if code in TRANSIENT_ERROR_CODES:
        return True
    status = error.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
    return isinstance(status, int) and status >= 500

@dataclass(frozen=True)
class ExportJobRequest:
    job_identifier: str
    source_reference: str
    bucket_name: str
    prefix: str
    iam_role_arn: str
    kms_key_id: str
    export_only: Optional[List[str]] = None

    def to_api_params(self) -> Dict[str, Any]:
        """Keyword arguments for rds.start_export_task"""
        params = {
            'ExportTaskIdentifier': self.job_identifier,
            'SourceArn': self.source_reference,
            'S3BucketName': self.bucket_name,
            'IamRoleArn': self.iam_role_arn,
            'KmsKeyId': self.kms_key_id,
            'S3Prefix': self.prefix,
        }
        if self.export_only:
            params['ExportOnly'] = list(self.export_only)
        return params

@dataclass
class ExportJobResult:
    job_identifier: str
    accepted: bool
    status: Optional[str] = None
    reason: Optional[str] = None
    message: Optional[str] = None
    response: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'job_identifier': self.job_identifier,
            'accepted': self.accepted,
            'status': self.status,
            'reason': self.reason,
            'message': self.message,
        }

class RdsExporter:
    def __init__(self, config: ExportConfig):
        self.config = config
        self.rds_client = self._create_rds_client()

    def _create_rds_client(self):
        """Create and return an RDS client"""
        client_kwargs = {
            # One attempt only, redelivery of the event is the retry mechanism
            'config': BotoConfig(
                connect_timeout=self.config.connect_timeout,
                read_timeout=self.config.read_timeout,
                retries={'mode': 'standard', 'max_attempts': 1}
            )
        }

        if self.config.region:
            client_kwargs['region_name'] = self.config.region

        if self.config.access_key and self.config.secret_key:
            client_kwargs['aws_access_key_id'] = self.config.access_key
            client_kwargs['aws_secret_access_key'] = self.config.secret_key

        return boto3.client('rds', **client_kwargs)

    def start_export_task(self, request: ExportJobRequest) -> ExportJobResult:
        """
        Start an export task for a snapshot

        Args:
            request: The export job to submit

        Returns:
            ExportJobResult for the accepted task

        Raises:
            ExportServiceRejection: If the service refuses the request
            ClientError: If the service throttled the call or failed server-side
            BotoCoreError: If the service could not be reached in time
        """
        logger.debug(
            f"Starting export task {request.job_identifier} for {request.source_reference} "
            f"to s3://{request.bucket_name}/{request.prefix}"
        )
        try:
            response = self.rds_client.start_export_task(**request.to_api_params())
        except ClientError as e:
            if is_transient_error(e):
                raise
            error = e.response.get('Error', {})
            raise ExportServiceRejection(
                request.job_identifier,
                error.get('Code', 'Unknown'),
                error.get('Message', str(e))
            ) from e

        return ExportJobResult(
            job_identifier=response.get('ExportTaskIdentifier', request.job_identifier),
            accepted=True,
            status=response.get('Status'),
            response=response
        )

    def describe_export_tasks(self, job_identifier: Optional[str] = None,
                              source_arn: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List export tasks, optionally narrowed to one task or one source snapshot

        Raises:
            ClientError: If listing export tasks fails
        """
        params = {}
        if job_identifier:
            params['ExportTaskIdentifier'] = job_identifier
        if source_arn:
            params['SourceArn'] = source_arn

        tasks = []
        try:
            paginator = self.rds_client.get_paginator('describe_export_tasks')
            for page in paginator.paginate(**params):
                tasks.extend(page.get('ExportTasks', []))
        except ClientError as e:
            logger.error(f"Failed to describe export tasks: {str(e)}")
            raise

        return tasks
