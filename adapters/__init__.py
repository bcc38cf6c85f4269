"""Adapters package for writing spine rows to files and databases."""

from .files import EXPORTERS, write_csv, write_jsonl
from .warehouse import WarehouseWriter

__all__ = ["EXPORTERS", "WarehouseWriter", "write_csv", "write_jsonl"]
