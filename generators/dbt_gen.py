"""dbt artifact generator for the date spine.

Renders the spine as a dbt model (SQL built on ``dbt.date_spine``), its
``schema.yml`` documentation with MetricFlow time spine configuration, and
a ``dbt_project.yml`` carrying the range as project vars. Output is
deterministic for a given configuration.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import sqlparse
import yaml
from jinja2 import Template

from models.time_spine import DateSpineRow, SpineConfig, WeekStartConvention
from spine.sequence import check_capacity

logger = logging.getLogger(__name__)


COLUMN_DESCRIPTIONS = {
    "date_day": "Calendar day; one row per day, unique and contiguous over the configured range",
    "prior_date_day": "The day before date_day",
    "next_date_day": "The day after date_day",
    "prior_year_date_day": "Same month and day one calendar year earlier (Feb 29 maps to Feb 28)",
    "prior_year_over_year_date_day": "Exactly 364 days earlier, on the same day of week",
    "day_of_week": "Day of week number, Sunday=1 through Saturday=7",
    "day_of_week_iso": "ISO day of week number, Monday=1 through Sunday=7",
    "day_of_week_name": "Full English day name",
    "day_of_week_name_short": "Three letter English day name",
    "day_of_month": "Day of the month",
    "day_of_year": "Day of the year",
    "week_start_date": "First day of the week containing date_day",
    "week_end_date": "Last day of the week containing date_day (week_start_date + 6)",
    "prior_year_week_start_date": "First day of the week containing prior_year_over_year_date_day",
    "prior_year_week_end_date": "Last day of the week containing prior_year_over_year_date_day",
    "week_of_year": "Week number of date_day",
    "iso_week_start_date": "Monday of the ISO week containing date_day",
    "iso_week_end_date": "Sunday of the ISO week containing date_day",
    "prior_year_iso_week_start_date": "Monday of the ISO week containing prior_year_over_year_date_day",
    "prior_year_iso_week_end_date": "Sunday of the ISO week containing prior_year_over_year_date_day",
    "iso_week_of_year": "ISO week number of date_day",
    "prior_year_week_of_year": "Week number of prior_year_over_year_date_day",
    "prior_year_iso_week_of_year": "ISO week number of prior_year_over_year_date_day",
    "month_of_year": "Month number, January=1",
    "month_name": "Full English month name",
    "month_name_short": "Three letter English month name",
    "month_start_date": "First day of the month",
    "month_end_date": "Last day of the month",
    "prior_year_month_start_date": "First day of the month containing prior_year_date_day",
    "prior_year_month_end_date": "Last day of the month containing prior_year_date_day",
    "quarter_of_year": "Quarter number, 1 through 4",
    "quarter_start_date": "First day of the quarter",
    "quarter_end_date": "Last day of the quarter",
    "year_number": "Calendar year",
    "year_start_date": "January 1 of the year",
    "year_end_date": "December 31 of the year",
}


MODEL_TEMPLATE = """{% raw %}{{ config(materialized='table') }}{% endraw %}

-- {{ model_name }}: one row per calendar day with derived calendar attributes.
-- Week convention: {{ convention }}

with base_dates as (

    {% raw %}{{
        dbt.date_spine(
            'day',
            "cast('" ~ var('time_spine_start_date') ~ "' as date)",
            "cast('" ~ var('time_spine_end_date') ~ "' as date) + interval 1 day"
        )
    }}{% endraw %}

),

dates_with_prior_year_dates as (

    select
        cast(d.date_day as date) as date_day,
        cast(add_months(d.date_day, -12) as date) as prior_year_date_day,
        cast(date_add(d.date_day, -364) as date) as prior_year_over_year_date_day
    from base_dates d

)

select
    d.date_day,
    cast(date_add(d.date_day, -1) as date) as prior_date_day,
    cast(date_add(d.date_day, 1) as date) as next_date_day,
    d.prior_year_date_day,
    d.prior_year_over_year_date_day,
    dayofweek(d.date_day) as day_of_week,
    weekday(d.date_day) + 1 as day_of_week_iso,
    date_format(d.date_day, 'EEEE') as day_of_week_name,
    date_format(d.date_day, 'E') as day_of_week_name_short,
    dayofmonth(d.date_day) as day_of_month,
    dayofyear(d.date_day) as day_of_year,

    {{ week_start('d.date_day') }} as week_start_date,
    date_add({{ week_start('d.date_day') }}, 6) as week_end_date,
    {{ week_start('d.prior_year_over_year_date_day') }} as prior_year_week_start_date,
    date_add({{ week_start('d.prior_year_over_year_date_day') }}, 6) as prior_year_week_end_date,
    {{ week_number('d.date_day') }} as week_of_year,

    {{ iso_week_start('d.date_day') }} as iso_week_start_date,
    date_add({{ iso_week_start('d.date_day') }}, 6) as iso_week_end_date,
    {{ iso_week_start('d.prior_year_over_year_date_day') }} as prior_year_iso_week_start_date,
    date_add({{ iso_week_start('d.prior_year_over_year_date_day') }}, 6) as prior_year_iso_week_end_date,
    {{ iso_week_number('d.date_day') }} as iso_week_of_year,

    {{ week_number('d.prior_year_over_year_date_day') }} as prior_year_week_of_year,
    {{ iso_week_number('d.prior_year_over_year_date_day') }} as prior_year_iso_week_of_year,

    month(d.date_day) as month_of_year,
    date_format(d.date_day, 'MMMM') as month_name,
    date_format(d.date_day, 'MMM') as month_name_short,
    cast(date_trunc('month', d.date_day) as date) as month_start_date,
    last_day(d.date_day) as month_end_date,
    cast(date_trunc('month', d.prior_year_date_day) as date) as prior_year_month_start_date,
    last_day(d.prior_year_date_day) as prior_year_month_end_date,

    quarter(d.date_day) as quarter_of_year,
    cast(date_trunc('quarter', d.date_day) as date) as quarter_start_date,
    date_add(add_months(cast(date_trunc('quarter', d.date_day) as date), 3), -1) as quarter_end_date,

    year(d.date_day) as year_number,
    cast(date_trunc('year', d.date_day) as date) as year_start_date,
    date_add(add_months(cast(date_trunc('year', d.date_day) as date), 12), -1) as year_end_date
from dates_with_prior_year_dates d
order by 1
"""


def _iso_week_start(column: str) -> str:
    return f"cast(date_trunc('week', {column}) as date)"


def _iso_week_number(column: str) -> str:
    return f"weekofyear({column})"


def _sunday_week_start(column: str) -> str:
    return f"date_add({column}, 1 - dayofweek({column}))"


def _sunday_week_number(column: str) -> str:
    return (f"cast(floor((dayofyear({column}) + dayofweek(cast(date_trunc('year', {column}) as date)) - 2) / 7)"
            f" as int) + 1")


def column_descriptions() -> Dict[str, str]:
    """Documentation for every spine column, in table order."""
    return {name: COLUMN_DESCRIPTIONS[name] for name in DateSpineRow.column_names()}


class DBTSpineGenerator:
    """Generator for the date spine dbt model and its documentation."""

    def __init__(self, config: SpineConfig, project_name: Optional[str] = None,
                 profile_name: Optional[str] = None):
        """Initialize dbt spine generator.

        Args:
            config: Spine configuration to render
            project_name: dbt project name for a new dbt_project.yml; defaults to the model name
            profile_name: dbt profile the project connects with; defaults to the project name
        """
        self.config = config
        self.project_name = project_name or config.model_name
        self.profile_name = profile_name or self.project_name

    def generate(self, output_dir: str) -> Dict[str, Any]:
        """Write dbt artifacts for the spine.

        Args:
            output_dir: Root of the dbt project to write into

        Returns:
            Generation result dictionary
        """
        logger.info(f"Generating dbt artifacts for model: {self.config.model_name}")

        result = {
            "success": False,
            "files": [],
            "warnings": [],
            "errors": []
        }

        try:
            check_capacity(self.config.start_date, self.config.end_date)
            if self.config.day_count == 0:
                result["warnings"].append(
                    f"end_date {self.config.end_date} is before start_date {self.config.start_date}; "
                    "the model will be empty"
                )

            output_path = Path(output_dir)
            model_dir = output_path / "models" / "utilities"
            model_dir.mkdir(parents=True, exist_ok=True)

            model_file = model_dir / f"{self.config.model_name}.sql"
            model_file.write_text(self.render_model_sql(), encoding="utf-8")
            result["files"].append(str(model_file))

            schema_file = model_dir / f"_{self.config.model_name}.yml"
            schema_file.write_text(self.render_schema_yml(), encoding="utf-8")
            result["files"].append(str(schema_file))

            project_file = output_path / "dbt_project.yml"
            if project_file.exists():
                result["warnings"].append(
                    f"{project_file} exists; add the vars from dbt_project.time_spine.yml manually"
                )
                project_file = output_path / "dbt_project.time_spine.yml"
                project_yml = self.render_project_yml(include_header=False)
            else:
                project_yml = self.render_project_yml()
            project_file.write_text(project_yml, encoding="utf-8")
            result["files"].append(str(project_file))

            result["success"] = True
            logger.info(f"Generated {len(result['files'])} dbt files in {output_path}")

        except Exception as e:
            logger.error(f"Failed to generate dbt artifacts: {e}")
            result["errors"].append(str(e))

        return result

    def render_model_sql(self) -> str:
        """Render the dbt model SQL."""
        convention = WeekStartConvention(self.config.week_start_convention)
        if convention == WeekStartConvention.SUNDAY:
            week_start, week_number = _sunday_week_start, _sunday_week_number
        else:
            week_start, week_number = _iso_week_start, _iso_week_number

        sql = Template(MODEL_TEMPLATE).render(
            model_name=self.config.model_name,
            convention=convention.value,
            week_start=week_start,
            week_number=week_number,
            iso_week_start=_iso_week_start,
            iso_week_number=_iso_week_number,
        )
        return sqlparse.format(sql, keyword_case="lower").rstrip() + "\n"

    def render_schema_yml(self) -> str:
        """Render schema.yml documentation and MetricFlow time spine config."""
        columns = []
        for name, description in column_descriptions().items():
            column: Dict[str, Any] = {"name": name, "description": description}
            if name == "date_day":
                column["granularity"] = "day"
                column["tests"] = ["unique", "not_null"]
            columns.append(column)

        schema_config = {
            "version": 2,
            "models": [
                {
                    "name": self.config.model_name,
                    "description": (
                        f"Date spine from {self.config.start_date.isoformat()} to "
                        f"{self.config.end_date.isoformat()}, one row per day"
                    ),
                    "time_spine": {"standard_granularity_column": "date_day"},
                    "columns": columns,
                }
            ],
        }
        return yaml.safe_dump(schema_config, default_flow_style=False, sort_keys=False, indent=2)

    def render_project_yml(self, include_header: bool = True) -> str:
        """Render dbt_project.yml for the spine.

        Args:
            include_header: Emit the project header (name, version, profile,
                paths). Without it only the vars and model settings are
                rendered, for merging into an existing project.
        """
        model_settings: Dict[str, Any] = {"+materialized": "table"}
        if self.config.schema_name:
            model_settings["+schema"] = self.config.schema_name

        project_config: Dict[str, Any] = {}
        if include_header:
            project_config.update({
                "name": self.project_name,
                "version": "1.0.0",
                "config-version": 2,
                "profile": self.profile_name,
                "model-paths": ["models"],
                "macro-paths": ["macros"],
                "test-paths": ["tests"],
                "target-path": "target",
                "clean-targets": ["target", "dbt_packages"],
            })
        project_config["models"] = {self.project_name: model_settings}
        project_config["vars"] = {
            "time_spine_start_date": self.config.start_date.isoformat(),
            "time_spine_end_date": self.config.end_date.isoformat(),
        }
        return f"""# dbt project settings for {self.config.model_name}

{yaml.safe_dump(project_config, default_flow_style=False, sort_keys=False, indent=2)}"""

    def extract_model_info(self, output_dir: str) -> List[Dict[str, str]]:
        """List generated model files under ``output_dir``."""
        models = []
        models_dir = Path(output_dir) / "models"

        if models_dir.exists():
            for sql_file in sorted(models_dir.rglob("*.sql")):
                rel_path = sql_file.relative_to(models_dir)
                layer = rel_path.parts[0] if len(rel_path.parts) > 1 else "root"
                models.append({
                    "name": sql_file.stem,
                    "path": str(sql_file),
                    "layer": layer
                })

        return models
