"""Test dbt artifact generation."""
import pytest
import yaml
from datetime import date, timedelta
from pathlib import Path

from generators import DBTSpineGenerator, column_descriptions
from models.time_spine import DateSpineRow, SpineConfig, WeekStartConvention
from spine import SEQUENCE_CAPACITY


def test_column_descriptions_cover_every_column():
    descriptions = column_descriptions()

    assert list(descriptions) == DateSpineRow.column_names()
    assert all(descriptions.values())


def test_generate_project(reference_config, temp_dir):
    generator = DBTSpineGenerator(reference_config)
    result = generator.generate(str(temp_dir))

    assert result["success"] == True
    assert result["errors"] == []
    assert len(result["files"]) == 3
    for file_path in result["files"]:
        assert Path(file_path).exists()

    model_file = temp_dir / "models" / "utilities" / "metricflow_time_spine.sql"
    assert str(model_file) in result["files"]

    models = generator.extract_model_info(str(temp_dir))
    assert models == [{
        "name": "metricflow_time_spine",
        "path": str(model_file),
        "layer": "utilities",
    }]


def test_model_sql_iso(reference_config):
    sql = DBTSpineGenerator(reference_config).render_model_sql()

    assert "{{ config(materialized='table') }}" in sql
    assert "dbt.date_spine(" in sql
    assert "var('time_spine_start_date')" in sql
    assert "date_add(d.date_day, -364)" in sql
    assert "cast(date_trunc('week', d.date_day) as date) as week_start_date" in sql
    assert "cast(date_trunc('week', d.date_day) as date) as iso_week_start_date" in sql
    for column in DateSpineRow.column_names():
        assert column in sql


def test_model_sql_sunday():
    config = SpineConfig(week_start_convention=WeekStartConvention.SUNDAY)
    sql = DBTSpineGenerator(config).render_model_sql()

    assert "date_add(d.date_day, 1 - dayofweek(d.date_day)) as week_start_date" in sql
    assert "cast(date_trunc('week', d.date_day) as date) as iso_week_start_date" in sql
    assert "Week convention: sunday" in sql


def test_model_sql_is_deterministic(reference_config):
    first = DBTSpineGenerator(reference_config).render_model_sql()
    second = DBTSpineGenerator(reference_config).render_model_sql()
    assert first == second


def test_schema_yml(reference_config):
    schema = yaml.safe_load(DBTSpineGenerator(reference_config).render_schema_yml())

    assert schema["version"] == 2
    model = schema["models"][0]
    assert model["name"] == "metricflow_time_spine"
    assert model["time_spine"] == {"standard_granularity_column": "date_day"}
    assert [c["name"] for c in model["columns"]] == DateSpineRow.column_names()

    date_day = model["columns"][0]
    assert date_day["granularity"] == "day"
    assert date_day["tests"] == ["unique", "not_null"]


def test_project_yml_vars():
    config = SpineConfig(start_date=date(2021, 1, 1), end_date=date(2025, 12, 31), schema_name="utils")
    project = yaml.safe_load(DBTSpineGenerator(config).render_project_yml())

    assert project["vars"] == {
        "time_spine_start_date": "2021-01-01",
        "time_spine_end_date": "2025-12-31",
    }
    assert project["models"]["metricflow_time_spine"]["+schema"] == "utils"


def test_project_yml_header(reference_config):
    project = yaml.safe_load(DBTSpineGenerator(reference_config).render_project_yml())

    assert project["name"] == "metricflow_time_spine"
    assert project["version"] == "1.0.0"
    assert project["config-version"] == 2
    assert project["profile"] == "metricflow_time_spine"
    assert project["model-paths"] == ["models"]
    assert project["models"] == {"metricflow_time_spine": {"+materialized": "table"}}


def test_project_yml_named_project(reference_config, temp_dir):
    generator = DBTSpineGenerator(reference_config, project_name="analytics", profile_name="warehouse")
    generator.generate(str(temp_dir))

    project = yaml.safe_load((temp_dir / "dbt_project.yml").read_text(encoding="utf-8"))
    assert project["name"] == "analytics"
    assert project["profile"] == "warehouse"
    assert "analytics" in project["models"]


def test_existing_project_file_is_not_overwritten(reference_config, temp_dir):
    project_file = temp_dir / "dbt_project.yml"
    project_file.write_text("name: analytics\n", encoding="utf-8")

    result = DBTSpineGenerator(reference_config).generate(str(temp_dir))

    assert result["success"] == True
    assert project_file.read_text(encoding="utf-8") == "name: analytics\n"
    assert (temp_dir / "dbt_project.time_spine.yml").exists()
    assert len(result["warnings"]) == 1

    merge = yaml.safe_load((temp_dir / "dbt_project.time_spine.yml").read_text(encoding="utf-8"))
    assert set(merge) == {"models", "vars"}
    assert merge["vars"]["time_spine_start_date"] == reference_config.start_date.isoformat()


def test_empty_range_warns(temp_dir):
    config = SpineConfig(start_date=date(2025, 6, 1), end_date=date(2025, 5, 31))
    result = DBTSpineGenerator(config).generate(str(temp_dir))

    assert result["success"] == True
    assert any("empty" in warning for warning in result["warnings"])


def test_range_beyond_capacity_fails(temp_dir):
    start = date(2020, 1, 1)
    config = SpineConfig(start_date=start, end_date=start + timedelta(days=SEQUENCE_CAPACITY))
    result = DBTSpineGenerator(config).generate(str(temp_dir))

    assert result["success"] == False
    assert "capacity" in result["errors"][0]
    assert not (temp_dir / "models").exists()
