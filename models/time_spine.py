"""Data models for the calendar date spine.

These models define the configuration consumed by the spine builder and the
row schema shared by the file exporters, the warehouse writer and the dbt
generator. Column names match the ``metricflow_time_spine`` table referenced
by downstream semantic-layer models.
"""
import re
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from enum import Enum

from .errors import SpineConfigError


DEFAULT_START_DATE = date(2020, 1, 1)
DEFAULT_END_DATE = date(2030, 12, 31)
DEFAULT_MODEL_NAME = "metricflow_time_spine"
MIN_SUPPORTED_YEAR = 1000
MAX_SUPPORTED_YEAR = 9998

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class WeekStartConvention(str, Enum):
    """First day of the week used for the ``week_*`` column family."""
    ISO_MONDAY = "iso_monday"
    SUNDAY = "sunday"


class SpineConfig(BaseModel):
    """Configured date range and naming for one spine build."""
    start_date: date = Field(default=DEFAULT_START_DATE, description="First day, inclusive")
    end_date: date = Field(default=DEFAULT_END_DATE, description="Last day, inclusive")
    week_start_convention: WeekStartConvention = WeekStartConvention.ISO_MONDAY
    model_name: str = Field(default=DEFAULT_MODEL_NAME, description="Target table / dbt model name")
    schema_name: Optional[str] = Field(default=None, description="Target schema, if any")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        extra = "forbid"
        protected_namespaces = ()

    @field_validator("model_name", "schema_name")
    @classmethod
    def _check_identifier(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _IDENTIFIER.match(value):
            raise ValueError(f"'{value}' is not a valid SQL identifier")
        return value

    @model_validator(mode="after")
    def _check_bounds(self) -> "SpineConfig":
        # Derived columns reach one year back and one day forward.
        for name in ("start_date", "end_date"):
            value = getattr(self, name)
            if not MIN_SUPPORTED_YEAR <= value.year <= MAX_SUPPORTED_YEAR:
                raise ValueError(
                    f"{name} {value.isoformat()} is outside the supported years "
                    f"{MIN_SUPPORTED_YEAR}..{MAX_SUPPORTED_YEAR}"
                )
        return self

    @property
    def day_count(self) -> int:
        """Number of days in the range, zero when the range is inverted."""
        return max((self.end_date - self.start_date).days + 1, 0)

    @property
    def qualified_name(self) -> str:
        if self.schema_name:
            return f"{self.schema_name}.{self.model_name}"
        return self.model_name


class DateSpineRow(BaseModel):
    """One calendar day and its derived attributes."""
    date_day: date
    prior_date_day: date
    next_date_day: date
    prior_year_date_day: date = Field(description="Same month/day one calendar year earlier")
    prior_year_over_year_date_day: date = Field(description="Exactly 364 days earlier")
    day_of_week: int = Field(description="Sunday=1 .. Saturday=7")
    day_of_week_iso: int = Field(description="Monday=1 .. Sunday=7")
    day_of_week_name: str
    day_of_week_name_short: str
    day_of_month: int
    day_of_year: int

    week_start_date: date
    week_end_date: date
    prior_year_week_start_date: date
    prior_year_week_end_date: date
    week_of_year: int

    iso_week_start_date: date
    iso_week_end_date: date
    prior_year_iso_week_start_date: date
    prior_year_iso_week_end_date: date
    iso_week_of_year: int

    prior_year_week_of_year: int
    prior_year_iso_week_of_year: int

    month_of_year: int
    month_name: str
    month_name_short: str
    month_start_date: date
    month_end_date: date
    prior_year_month_start_date: date
    prior_year_month_end_date: date

    quarter_of_year: int
    quarter_start_date: date
    quarter_end_date: date

    year_number: int
    year_start_date: date
    year_end_date: date

    @classmethod
    def column_names(cls) -> List[str]:
        """Column names in table order."""
        return list(cls.model_fields.keys())


class SpineRunReport(BaseModel):
    """Outcome of one build / export / render run."""
    model_name: str
    start_date: date
    end_date: date
    week_start_convention: WeekStartConvention
    row_count: int = 0
    generated_files: List[str] = Field(default_factory=list)
    target_table: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    success: bool = True

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        protected_namespaces = ()


def config_to_json(config: SpineConfig) -> str:
    """Convert SpineConfig to JSON string."""
    return config.model_dump_json(indent=2)


def json_to_config(json_str: str) -> SpineConfig:
    """Convert JSON string to SpineConfig.

    Raises:
        SpineConfigError: If the JSON is malformed or does not match the model
    """
    try:
        return SpineConfig.model_validate_json(json_str)
    except ValidationError as e:
        raise SpineConfigError(f"Invalid spine configuration: {e}") from e
