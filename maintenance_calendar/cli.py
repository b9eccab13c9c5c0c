"""Command line interface module."""

import click
from typing import Optional

from .config import Config
from .maintenance_calendar_manager import MaintenanceCalendarManager
from .error_handler import (
    BaseApplicationError, ConfigurationError, IncompleteFetchError, ValidationError,
    get_error_handler, handle_error
)
from .security import validate_file_path_input, validate_region_input
from .logging_config import setup_logging, LogLevel, LogFormat, cleanup_logging


@click.command()
@click.option('--filename', '-f', required=True,
              help='Path of the ICS file to write (overwritten if it exists)')
@click.option('--region', '-r', help='AWS region the Health API is queried in (default: us-east-1)')
@click.option('--profile', '-p', help='AWS profile name')
@click.option('--config', '-c', help='Configuration file path')
@click.option('--timeout', type=click.FloatRange(min=1), help='Timeout in seconds for each AWS call')
@click.option('--max-attempts', type=click.IntRange(min=1), help='Attempts per AWS call, including retries')
@click.option('--strict', is_flag=True,
              help='Fail without writing the calendar when any health event cannot be read')
@click.option('--legacy-same-day-check', is_flag=True,
              help='Resolve same-day maintenance windows the way older calendars did')
@click.option('--debug', is_flag=True, help='Enable debug mode with verbose logging')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              default='WARNING', help='Set logging level')
@click.option('--log-format', type=click.Choice(['simple', 'detailed', 'json', 'structured']),
              default='simple', help='Set log format')
@click.option('--log-dir', help='Directory for log files (default: ~/.aws-health-calendar/logs)')
def cli(filename: str, region: Optional[str], profile: Optional[str], config: Optional[str],
        timeout: Optional[float], max_attempts: Optional[int], strict: bool,
        legacy_same_day_check: bool, debug: bool, log_level: str, log_format: str,
        log_dir: Optional[str]):
    """Write upcoming AWS scheduled maintenance to an ICS calendar.

    Reads open and upcoming scheduled changes from AWS Health, places RDS and
    ElastiCache maintenance in each resource's own maintenance window and
    writes one calendar event per affected resource.

    Examples:
      python main.py --filename maintenance.ics
      python main.py -f maintenance.ics --region eu-west-1 --strict
    """
    try:
        try:
            logging_manager = setup_logging(
                log_dir=log_dir,
                log_level=getattr(LogLevel, log_level),
                log_format=getattr(LogFormat, log_format.upper()),
                enable_performance_monitoring=debug,
                debug_mode=debug
            )

            app_config = Config(config)

            if profile:
                app_config.set('aws.profile', profile)
            if region:
                app_config.set('aws.region', validate_region_input(region))
            if timeout:
                app_config.set('aws.connect_timeout', timeout)
                app_config.set('aws.read_timeout', timeout)
            if max_attempts:
                app_config.set('aws.max_attempts', max_attempts)
            if legacy_same_day_check:
                app_config.set('calendar.legacy_same_day_check', True)

            output = str(validate_file_path_input(filename, allow_create=True))

        except ValidationError as e:
            handle_error(e, {"operation": "cli_initialization"})
            click.echo(f"Validation Error: {e.get_user_message()}", err=True)
            raise click.Abort()
        except (OSError, ValueError) as e:
            error = ConfigurationError(
                f"Failed to initialize application: {e}",
                operation="cli_initialization",
                cause=e
            )
            handle_error(error)
            click.echo(f"Error: {error.get_user_message()}", err=True)
            raise click.Abort()

        try:
            manager = MaintenanceCalendarManager.from_config(app_config, logging_manager=logging_manager)
            click.echo(f"Fetching scheduled changes in {manager.registry.region_name}...")
            summary = manager.generate(output, allow_partial=not strict)

        except IncompleteFetchError as e:
            handle_error(e, {"output": output})
            click.echo(f"Error: {e.get_user_message()}; calendar not written", err=True)
            for event_arn in e.failed_event_arns:
                click.echo(f"  skipped: {event_arn}", err=True)
            raise click.Abort()
        except BaseApplicationError as e:
            handle_error(e, {"output": output})
            click.echo(f"Error: {e.get_user_message()}", err=True)
            raise click.Abort()

        click.echo(f"Calendar saved to: {summary.output_path}")
        click.echo(f"  Events: {summary.event_count}")
        click.echo(f"  Calendar entries: {summary.entry_count}")

        if summary.is_partial:
            click.echo(f"  Skipped events: {len(summary.failures)}", err=True)
            for failure in summary.failures:
                click.echo(f"    {failure.event_arn}: {failure.reason}", err=True)

        if debug:
            stats = get_error_handler().get_error_statistics()
            click.echo(f"  Errors handled: {stats['total_errors']}")
            perf = logging_manager.get_performance_summary()
            if perf.get('total_operations'):
                click.echo(f"  Total time: {perf['duration_stats']['total']:.2f}s")

    finally:
        cleanup_logging()
