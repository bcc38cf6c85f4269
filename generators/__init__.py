"""Generators package for dbt artifacts.

This package renders the date spine as a dbt model with its schema
documentation, so the same table can be built inside the warehouse.
"""

from .dbt_gen import DBTSpineGenerator, column_descriptions

__all__ = [
    "DBTSpineGenerator",
    "column_descriptions",
]
