"""CLI interface for the date spine builder.

Usage: time-spine build --start-date 2020-01-01 --end-date 2030-12-31 --out ./build
"""
import click
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
import yaml

from adapters import EXPORTERS, WarehouseWriter
from generators import DBTSpineGenerator
from models import SpineConfig, SpineConfigError, config_to_yaml, load_config, validate_config
from models.time_spine import WeekStartConvention
from spine import SEQUENCE_CAPACITY, DateSpineBuilder, derive_calendar_fields


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)

logger = logging.getLogger(__name__)


def config_options(func):
    """Attach the shared range/naming options to a command."""
    options = [
        click.option('--config', 'config_file', type=click.Path(exists=True, path_type=Path),
                     help='YAML or JSON spine configuration file'),
        click.option('--start-date', envvar='TIME_SPINE_START_DATE',
                     help='First day of the spine (YYYY-MM-DD)'),
        click.option('--end-date', envvar='TIME_SPINE_END_DATE',
                     help='Last day of the spine, inclusive (YYYY-MM-DD)'),
        click.option('--week-start', envvar='TIME_SPINE_WEEK_START',
                     type=click.Choice([c.value for c in WeekStartConvention], case_sensitive=False),
                     help='First day of week for the week_* columns'),
        click.option('--model-name', help='Table / dbt model name'),
        click.option('--schema', 'schema_name', help='Target schema'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_config(config_file: Optional[Path], **overrides: Any) -> SpineConfig:
    """Merge file settings with command-line / environment overrides.

    Raises:
        SpineConfigError: If the merged settings are invalid
    """
    data: Dict[str, Any] = {}
    if config_file:
        data = load_config(config_file).model_dump(exclude_unset=True)

    field_map = {
        'start_date': 'start_date',
        'end_date': 'end_date',
        'week_start': 'week_start_convention',
        'model_name': 'model_name',
        'schema_name': 'schema_name',
    }
    for option_name, field_name in field_map.items():
        value = overrides.get(option_name)
        if value is not None:
            data[field_name] = value.lower() if option_name == 'week_start' else value

    return validate_config(data)


def _fail(message: str) -> None:
    logger.error(message)
    sys.exit(1)


def _cancel(message: str = "Cancelled by user") -> None:
    logger.info(message)
    sys.exit(130)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def cli(verbose: bool):
    """Calendar date spine builder."""
    load_dotenv()
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@config_options
@click.option(
    '--format', 'output_format',
    type=click.Choice(sorted(EXPORTERS), case_sensitive=False),
    default='csv',
    help='File format for the exported spine'
)
@click.option(
    '--out', 'output_dir',
    type=click.Path(path_type=Path),
    default='./output',
    help='Output directory for generated files'
)
@click.option(
    '--db-url',
    envvar='TIME_SPINE_DB_URL',
    help='SQLAlchemy URL of the database to materialize the table into'
)
@click.option('--no-export', is_flag=True, help='Skip the file export')
def build(config_file: Optional[Path], start_date: Optional[str], end_date: Optional[str],
          week_start: Optional[str], model_name: Optional[str], schema_name: Optional[str],
          output_format: str, output_dir: Path, db_url: Optional[str], no_export: bool):
    """Build the spine and export and/or materialize it."""
    try:
        config = resolve_config(config_file, start_date=start_date, end_date=end_date,
                                week_start=week_start, model_name=model_name,
                                schema_name=schema_name)
        builder = DateSpineBuilder(config)
        rows = builder.build()
    except KeyboardInterrupt:
        _cancel("Build cancelled by user")
        return
    except SpineConfigError as e:
        _fail(f"Configuration error: {e}")
        return

    report = builder.report(row_count=len(rows))

    try:
        output_dir.mkdir(parents=True, exist_ok=True)

        if not no_export:
            exporter = EXPORTERS[output_format.lower()]
            export_file = exporter(rows, output_dir / f"{config.model_name}.{output_format.lower()}")
            report.generated_files.append(str(export_file))

        if db_url:
            writer = WarehouseWriter(db_url, table_name=config.model_name, schema=config.schema_name)
            writer.materialize(rows)
            report.target_table = writer.qualified_name

        if no_export and not db_url:
            report.warnings.append("Nothing written: --no-export given without --db-url")

    except KeyboardInterrupt:
        _cancel("Build cancelled by user")
    except Exception as e:
        logger.error(f"Build failed: {e}")
        report.errors.append(str(e))
        report.success = False

    report_file = output_dir / f"{config.model_name}_run_report.json"
    with open(report_file, 'w', encoding='utf-8') as f:
        f.write(report.model_dump_json(indent=2))
    logger.info(f"Run report saved: {report_file}")

    click.echo("\n" + "="*50)
    click.echo("TIME SPINE SUMMARY")
    click.echo("="*50)
    click.echo(f"Model: {config.model_name}")
    click.echo(f"Range: {config.start_date} .. {config.end_date}")
    click.echo(f"Rows: {report.row_count}")
    for file_path in report.generated_files:
        click.echo(f"  - {file_path}")
    if report.target_table:
        click.echo(f"Table: {report.target_table}")
    for warning in report.warnings:
        click.echo(f"Warning: {warning}")

    if not report.success:
        sys.exit(1)


@cli.command('render-dbt')
@config_options
@click.option(
    '--out', 'output_dir',
    type=click.Path(path_type=Path),
    default='./dbt',
    help='dbt project directory to write into'
)
@click.option('--project-name', help='dbt project name for a new dbt_project.yml (defaults to the model name)')
@click.option('--profile', 'profile_name', help='dbt profile for a new dbt_project.yml (defaults to the project name)')
def render_dbt(config_file: Optional[Path], start_date: Optional[str], end_date: Optional[str],
               week_start: Optional[str], model_name: Optional[str], schema_name: Optional[str],
               output_dir: Path, project_name: Optional[str], profile_name: Optional[str]):
    """Render the spine as a dbt model with schema documentation."""
    try:
        config = resolve_config(config_file, start_date=start_date, end_date=end_date,
                                week_start=week_start, model_name=model_name,
                                schema_name=schema_name)
        generator = DBTSpineGenerator(config, project_name=project_name, profile_name=profile_name)
        result = generator.generate(str(output_dir))
    except KeyboardInterrupt:
        _cancel()
        return
    except SpineConfigError as e:
        _fail(f"Configuration error: {e}")
        return

    if not result['success']:
        logger.error("Failed to generate dbt artifacts:")
        for error in result['errors']:
            logger.error(f"  - {error}")
        sys.exit(1)

    for warning in result['warnings']:
        logger.warning(warning)

    models = generator.extract_model_info(str(output_dir))
    click.echo(f"Generated {len(result['files'])} files, {len(models)} models:")
    for file_path in result['files']:
        click.echo(f"  - {file_path}")


@cli.command()
@config_options
def validate(config_file: Optional[Path], start_date: Optional[str], end_date: Optional[str],
             week_start: Optional[str], model_name: Optional[str], schema_name: Optional[str]):
    """Validate a spine configuration without generating rows."""
    try:
        config = resolve_config(config_file, start_date=start_date, end_date=end_date,
                                week_start=week_start, model_name=model_name,
                                schema_name=schema_name)
        DateSpineBuilder(config).validate()
    except KeyboardInterrupt:
        _cancel()
        return
    except SpineConfigError as e:
        _fail(f"Configuration error: {e}")
        return

    click.echo(config_to_yaml(config).rstrip())
    click.echo(f"Days: {config.day_count} (capacity {SEQUENCE_CAPACITY})")


@cli.command()
@click.argument('day')
@click.option('--week-start', envvar='TIME_SPINE_WEEK_START',
              type=click.Choice([c.value for c in WeekStartConvention], case_sensitive=False),
              default=WeekStartConvention.ISO_MONDAY.value,
              help='First day of week for the week_* columns')
def show(day: str, week_start: str):
    """Show the derived calendar attributes of one DAY (YYYY-MM-DD)."""
    try:
        config = validate_config({'start_date': day, 'end_date': day,
                                  'week_start_convention': week_start.lower()})
        row = derive_calendar_fields(config.start_date, config.week_start_convention)
    except KeyboardInterrupt:
        _cancel()
        return
    except SpineConfigError as e:
        _fail(f"Configuration error: {e}")
        return

    click.echo(yaml.safe_dump(row.model_dump(mode='json'), default_flow_style=False, sort_keys=False).rstrip())


def main():
    cli()


if __name__ == '__main__':
    main()
