# /snapexport/cli.py
import sys
import json
import logging
import click
from botocore.exceptions import BotoCoreError, ClientError

from .config import load_config, load_config_from_env
from .version import __version__
from .errors import MalformedEventError
from .events import EventCategory, EventFilter, SnapshotEvent
from .exporter import RdsExporter
from .export_service import ExportTrigger
from .handler import handle_event

@click.group()
@click.option('--config', '-c', default='config.yaml', help='Path to config file')
@click.option('--from-env', is_flag=True, help='Read configuration from environment variables instead of a file')
@click.version_option(version=__version__, prog_name="snapexport")
@click.pass_context
def cli(ctx, config, from_env):
    """snapexport: RDS Snapshot Export Utility

    Start and inspect exports of cluster snapshots to S3.
    """
    try:
        ctx.obj = load_config_from_env() if from_env else load_config(config)

        # Configure logging
        logging.basicConfig(
            level=getattr(logging, ctx.obj.log_level, logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
    except FileNotFoundError:
        click.echo(f"Error: Config file not found: {config}", err=True)
        if config == 'config.yaml':
            click.echo("\nTip: Pass --config with the path to your config file,")
            click.echo("     or --from-env to use S3_BUCKET_NAME, IAM_ROLE_ARN and KMS_ARN.")
        sys.exit(1)
    except (KeyError, ValueError) as e:
        click.echo(f"Error loading configuration: {str(e)}", err=True)
        sys.exit(1)

def _echo_result(result):
    if result['accepted']:
        click.echo(f"Export task started: {result['job_identifier']}")
        click.echo(f"  Status: {result['status']}")
    else:
        click.echo(f"Export task rejected: {result['job_identifier']}", err=True)
        click.echo(f"  Reason: {result['reason']}: {result['message']}", err=True)

@cli.command()
@click.argument('event_file', type=click.File('r'))
@click.pass_obj
def trigger(config, event_file):
    """Replay an SNS notification payload through the export pipeline"""
    try:
        event = json.load(event_file)
        outcome = handle_event(event, config)
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        click.echo(f"Invalid event file: {str(e)}", err=True)
        sys.exit(1)
    except MalformedEventError as e:
        click.echo(f"Malformed event: {str(e)}", err=True)
        sys.exit(1)
    except (BotoCoreError, ClientError) as e:
        click.echo(f"Export service unavailable: {str(e)}", err=True)
        sys.exit(1)

    for result in outcome['results']:
        _echo_result(result)

    if outcome['skipped']:
        click.echo(f"Skipped {outcome['skipped']} event(s) not eligible for export")

    if any(not result['accepted'] for result in outcome['results']):
        sys.exit(1)

@cli.command()
@click.argument('snapshot_arn')
@click.pass_obj
def export(config, snapshot_arn):
    """Start an export for a specific snapshot"""
    event = SnapshotEvent(
        event_category=EventCategory.BACKUP,
        event_id=None,
        resource_reference=snapshot_arn
    )

    click.echo(f"Starting export for {snapshot_arn}...")
    try:
        result = ExportTrigger(config).trigger(event)
    except MalformedEventError as e:
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)
    except (BotoCoreError, ClientError) as e:
        click.echo(f"Export service unavailable: {str(e)}", err=True)
        sys.exit(1)

    _echo_result(result.to_dict())
    if not result.accepted:
        sys.exit(1)

@cli.command()
@click.option('--job-id', '-j', default=None, help='Export task identifier')
@click.option('--source-arn', '-s', default=None, help='Snapshot ARN to list exports for')
@click.pass_obj
def status(config, job_id, source_arn):
    """List export tasks and their status"""
    try:
        tasks = RdsExporter(config).describe_export_tasks(job_identifier=job_id, source_arn=source_arn)
    except (ClientError, BotoCoreError) as e:
        click.echo(f"Failed to list export tasks: {str(e)}", err=True)
        sys.exit(1)

    if not tasks:
        click.echo("No export tasks found.")
        return

    click.echo("Export tasks:")
    for task in tasks:
        click.echo(f"\n{task.get('ExportTaskIdentifier')}:")
        click.echo(f"  Source: {task.get('SourceArn')}")
        click.echo(f"  Status: {task.get('Status')} ({task.get('PercentProgress', 0)}%)")
        click.echo(f"  Destination: s3://{task.get('S3Bucket')}/{task.get('S3Prefix', '')}")
        if task.get('FailureCause'):
            click.echo(f"  Failure: {task['FailureCause']}")

@cli.command('filter-policy')
@click.pass_obj
def filter_policy(config):
    """Print the SNS subscription filter policy"""
    click.echo(json.dumps(EventFilter(config.event_ids).filter_policy(), indent=2))

if __name__ == '__main__':
    cli()
