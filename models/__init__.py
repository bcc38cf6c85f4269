"""Model utilities and validation helpers."""
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union
import json
import jsonschema
import yaml
from pydantic import ValidationError

from .errors import SpineCapacityError, SpineConfigError
from .time_spine import (
    DateSpineRow, SpineConfig, SpineRunReport, WeekStartConvention,
    config_to_json, json_to_config
)


def validate_config(data: Dict[str, Any]) -> SpineConfig:
    """Validate and create SpineConfig from dictionary data.

    Args:
        data: Dictionary representation of a spine configuration

    Returns:
        Validated SpineConfig instance

    Raises:
        SpineConfigError: If data doesn't match the configuration model
    """
    try:
        return SpineConfig.model_validate(data)
    except ValidationError as e:
        raise SpineConfigError(f"Invalid spine configuration: {e}") from e


def load_config(path: Union[str, Path]) -> SpineConfig:
    """Load a SpineConfig from a YAML or JSON file.

    The file may hold the settings at the top level or under a
    ``time_spine`` key, so the block can live inside a larger project file.

    Args:
        path: Path to a ``.yml``/``.yaml`` or ``.json`` file

    Returns:
        Validated SpineConfig instance

    Raises:
        SpineConfigError: If the file is missing, unparseable or invalid
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise SpineConfigError(f"Cannot read spine configuration {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SpineConfigError(f"Spine configuration {path} must be a mapping")
    if "time_spine" in data:
        data = data["time_spine"] or {}
    return validate_config(data)


def config_to_yaml(config: SpineConfig) -> str:
    """Convert SpineConfig to a YAML document with ISO dates."""
    return yaml.safe_dump(
        {"time_spine": config.model_dump(mode="json", exclude_none=True)},
        default_flow_style=False,
        sort_keys=False,
    )


def rows_to_json(rows: Iterable[DateSpineRow]) -> List[Dict[str, Any]]:
    """Convert rows to JSON-safe dictionaries (dates as ISO strings)."""
    return [row.model_dump(mode="json") for row in rows]


def generate_row_schema() -> Dict[str, Any]:
    """Generate JSON schema for spine row validation.

    Returns:
        JSON schema dictionary
    """
    schema = DateSpineRow.model_json_schema()
    schema["additionalProperties"] = False
    return schema


class SpineRowValidator:
    """JSON schema validator for exported spine rows."""

    def __init__(self):
        self.schema = generate_row_schema()
        self.validator = jsonschema.Draft7Validator(
            self.schema, format_checker=jsonschema.FormatChecker()
        )

    def validate(self, data: Dict[str, Any]) -> List[str]:
        """Validate row data against schema.

        Args:
            data: Dictionary to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        for error in self.validator.iter_errors(data):
            errors.append(f"{'.'.join(str(p) for p in error.path)}: {error.message}")
        return errors

    def is_valid(self, data: Dict[str, Any]) -> bool:
        """Check if data is a valid spine row.

        Args:
            data: Dictionary to validate

        Returns:
            True if valid, False otherwise
        """
        return len(self.validate(data)) == 0


__all__ = [
    "DateSpineRow",
    "SpineConfig",
    "SpineRunReport",
    "WeekStartConvention",
    "SpineConfigError",
    "SpineCapacityError",
    "validate_config",
    "load_config",
    "config_to_json",
    "json_to_config",
    "config_to_yaml",
    "rows_to_json",
    "generate_row_schema",
    "SpineRowValidator",
]
