"""File exporters for spine rows.

Both exporters write to a sibling temporary file and rename it over the
target, so a reader never sees a partially written spine.
"""
import csv
import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Iterable, Union

from models.time_spine import DateSpineRow

logger = logging.getLogger(__name__)


def _target_mode(path: Path) -> int:
    # mkstemp creates 0600 files; keep the mode a plain open() would give
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _replace_atomically(path: Path, write) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = _target_mode(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
            write(f)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return path


def write_csv(rows: Iterable[DateSpineRow], path: Union[str, Path]) -> Path:
    """Write spine rows to CSV with a header row.

    Args:
        rows: Spine rows in output order
        path: Output file path

    Returns:
        The path of the written file
    """
    columns = DateSpineRow.column_names()

    def _write(f):
        writer = csv.DictWriter(f, fieldnames=columns, lineterminator="\n")
        writer.writeheader()
        for row in rows:
            writer.writerow(row.model_dump(mode="json"))

    output = _replace_atomically(Path(path), _write)
    logger.info(f"Wrote spine CSV: {output}")
    return output


def write_jsonl(rows: Iterable[DateSpineRow], path: Union[str, Path]) -> Path:
    """Write spine rows as JSON lines, one object per day."""

    def _write(f):
        for row in rows:
            f.write(json.dumps(row.model_dump(mode="json")))
            f.write("\n")

    output = _replace_atomically(Path(path), _write)
    logger.info(f"Wrote spine JSON lines: {output}")
    return output


EXPORTERS = {
    "csv": write_csv,
    "jsonl": write_jsonl,
}
