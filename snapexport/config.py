# /snapexport/config.py
import os
import yaml
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Mapping

AUTOMATED_SNAPSHOT_CREATED = "RDS-EVENT-0169"

@dataclass(frozen=True)
class ExportConfig:
    bucket_name: str
    iam_role_arn: str  # role assumed by the export service
    kms_key_id: str
    region: Optional[str] = None
    prefix: str = ""  # base prefix, the date partition is appended below it
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    # If None, will use the Lambda execution role or AWS credentials from environment
    export_only: Optional[List[str]] = None
    event_ids: List[str] = field(default_factory=lambda: [AUTOMATED_SNAPSHOT_CREATED])
    connect_timeout: int = 5
    read_timeout: int = 10
    log_level: str = "INFO"

def _split_list(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    items = [item.strip() for item in value.split(',') if item.strip()]
    return items or None

def load_config(config_path: str) -> ExportConfig:
    """Load configuration from YAML file"""
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f) or {}

    if not isinstance(config_data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    export_data: Dict[str, Any] = config_data.get('export') or {}
    if not isinstance(export_data, dict):
        raise ValueError(f"'export' section must be a mapping: {config_path}")

    return ExportConfig(
        bucket_name=export_data['bucket_name'],
        iam_role_arn=export_data['iam_role_arn'],
        kms_key_id=export_data['kms_key_id'],
        region=export_data.get('region'),
        prefix=export_data.get('prefix') or "",
        access_key=export_data.get('access_key'),
        secret_key=export_data.get('secret_key'),
        export_only=export_data.get('export_only'),
        event_ids=export_data.get('event_ids') or [AUTOMATED_SNAPSHOT_CREATED],
        connect_timeout=int(export_data.get('connect_timeout', 5)),
        read_timeout=int(export_data.get('read_timeout', 10)),
        log_level=str(config_data.get('log_level', 'INFO')).upper()
    )

def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> ExportConfig:
    """
    Load configuration from environment variables injected at deployment time

    Args:
        environ: Mapping to read from, defaults to os.environ

    Returns:
        ExportConfig built from the environment

    Raises:
        ValueError: If a required variable is missing or empty
    """
    env = os.environ if environ is None else environ

    required = {}
    for name in ('S3_BUCKET_NAME', 'IAM_ROLE_ARN', 'KMS_ARN'):
        value = env.get(name)
        if not value:
            raise ValueError(f"Missing required environment variable: {name}")
        required[name] = value

    return ExportConfig(
        bucket_name=required['S3_BUCKET_NAME'],
        iam_role_arn=required['IAM_ROLE_ARN'],
        kms_key_id=required['KMS_ARN'],
        region=env.get('AWS_REGION'),
        prefix=env.get('S3_PREFIX', ''),
        export_only=_split_list(env.get('EXPORT_ONLY')),
        event_ids=_split_list(env.get('EXPORT_EVENT_IDS')) or [AUTOMATED_SNAPSHOT_CREATED],
        connect_timeout=int(env.get('EXPORT_CONNECT_TIMEOUT', 5)),
        read_timeout=int(env.get('EXPORT_READ_TIMEOUT', 10)),
        log_level=env.get('LOG_LEVEL', 'INFO').upper()
    )
