"""Test configuration and utilities."""
import pytest
import tempfile
from datetime import date
from pathlib import Path
from typing import Generator
import logging

from models.time_spine import SpineConfig, WeekStartConvention

# Configure test logging
logging.basicConfig(level=logging.DEBUG)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def reference_config() -> SpineConfig:
    """The 2020-01-01 .. 2030-12-31 reference range."""
    return SpineConfig()


@pytest.fixture
def leap_year_config() -> SpineConfig:
    """A short range spanning the 2024 leap day."""
    return SpineConfig(start_date=date(2024, 2, 20), end_date=date(2024, 3, 15))


@pytest.fixture
def sunday_config() -> SpineConfig:
    """Two years with Sunday-start weeks."""
    return SpineConfig(
        start_date=date(2023, 1, 1),
        end_date=date(2024, 12, 31),
        week_start_convention=WeekStartConvention.SUNDAY,
    )


@pytest.fixture
def sample_config_yaml() -> str:
    """YAML configuration nested under the time_spine key."""
    return '''time_spine:
  start_date: 2022-01-01
  end_date: 2022-12-31
  week_start_convention: sunday
  model_name: fct_time_spine
  schema_name: analytics
'''
