"""Test file exporters and warehouse materialization."""
import csv
import json
import os
import stat
import pytest
from datetime import date

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError

from adapters import WarehouseWriter, write_csv, write_jsonl
from adapters.warehouse import _begin_sqlite_transaction
from models import SpineRowValidator
from models.time_spine import DateSpineRow, SpineConfig
from spine import DateSpineBuilder


@pytest.fixture
def leap_rows(leap_year_config):
    return DateSpineBuilder(leap_year_config).build()


def test_write_csv(leap_rows, temp_dir):
    output = write_csv(leap_rows, temp_dir / "spine.csv")

    with open(output, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        records = list(reader)

    assert reader.fieldnames == DateSpineRow.column_names()
    assert len(records) == 25
    assert records[0]["date_day"] == "2024-02-20"
    assert records[9]["month_end_date"] == "2024-02-29"
    assert records[-1]["day_of_week_name"] == "Friday"


def test_write_jsonl(leap_rows, temp_dir):
    output = write_jsonl(leap_rows, temp_dir / "nested" / "spine.jsonl")
    lines = output.read_text(encoding="utf-8").splitlines()

    assert len(lines) == 25
    validator = SpineRowValidator()
    for line in lines:
        assert validator.is_valid(json.loads(line))


def test_exports_are_byte_identical(leap_year_config, temp_dir):
    """Regenerating with the same configuration gives identical files."""
    first = write_csv(DateSpineBuilder(leap_year_config).build(), temp_dir / "a.csv")
    second = write_csv(DateSpineBuilder(leap_year_config).build(), temp_dir / "b.csv")

    assert first.read_bytes() == second.read_bytes()


def test_export_replaces_existing_file(leap_rows, temp_dir):
    target = temp_dir / "spine.csv"
    target.write_text("stale\n", encoding="utf-8")

    write_csv(leap_rows[:3], target)

    content = target.read_text(encoding="utf-8").splitlines()
    assert len(content) == 4
    assert "stale" not in content
    assert sorted(p.name for p in temp_dir.iterdir()) == ["spine.csv"]


def _current_umask():
    umask = os.umask(0)
    os.umask(umask)
    return umask


def test_new_export_gets_default_file_mode(leap_rows, temp_dir):
    output = write_jsonl(leap_rows, temp_dir / "spine.jsonl")

    assert stat.S_IMODE(output.stat().st_mode) == 0o666 & ~_current_umask()


def test_export_keeps_existing_file_mode(leap_rows, temp_dir):
    target = temp_dir / "spine.csv"
    target.write_text("stale\n", encoding="utf-8")
    os.chmod(target, 0o644)

    write_csv(leap_rows, target)

    assert stat.S_IMODE(target.stat().st_mode) == 0o644


def test_materialize_and_read_back(leap_rows, temp_dir):
    writer = WarehouseWriter(f"sqlite:///{temp_dir / 'spine.db'}")

    assert writer.materialize(leap_rows) == 25
    assert writer.row_count() == 25

    records = writer.read_back()
    assert records[0]["date_day"] == date(2024, 2, 20)
    assert records[-1]["date_day"] == date(2024, 3, 15)
    assert records[9]["month_end_date"] == date(2024, 2, 29)
    assert list(records[0].keys()) == DateSpineRow.column_names()


def test_materialize_full_replace(leap_rows, temp_dir):
    """A second run replaces the table rather than appending."""
    writer = WarehouseWriter(f"sqlite:///{temp_dir / 'spine.db'}", table_name="time_spine")
    writer.materialize(leap_rows)

    smaller = SpineConfig(start_date=date(2025, 1, 1), end_date=date(2025, 1, 7))
    writer.materialize(DateSpineBuilder(smaller).build())

    records = writer.read_back()
    assert len(records) == 7
    assert records[0]["date_day"] == date(2025, 1, 1)


def test_failed_materialize_keeps_previous_table(leap_rows, temp_dir):
    writer = WarehouseWriter(f"sqlite:///{temp_dir / 'spine.db'}")
    writer.materialize(leap_rows)

    with pytest.raises(IntegrityError):
        writer.materialize([leap_rows[0], leap_rows[0]])

    assert writer.row_count() == 25


def test_failed_materialize_keeps_previous_table_with_shared_engine(leap_rows, temp_dir):
    engine = create_engine(f"sqlite:///{temp_dir / 'spine.db'}")
    writer = WarehouseWriter(engine=engine)
    writer.materialize(leap_rows)

    with pytest.raises(IntegrityError):
        writer.materialize([leap_rows[0], leap_rows[0]])

    assert writer.row_count() == 25


def test_writers_sharing_an_engine_register_begin_once(leap_rows, temp_dir):
    engine = create_engine(f"sqlite:///{temp_dir / 'spine.db'}")
    first = WarehouseWriter(engine=engine, table_name="spine_a")
    second = WarehouseWriter(engine=engine, table_name="spine_b")

    assert event.contains(engine, "begin", _begin_sqlite_transaction)
    assert first.materialize(leap_rows) == 25
    assert second.materialize(leap_rows[:5]) == 5
    assert first.row_count() == 25
    assert second.row_count() == 5


def test_writer_requires_target():
    with pytest.raises(ValueError):
        WarehouseWriter()
