# src/predspace/io/__init__.py
from .load_data import load_table, read_grid, write_grid, write_table

__all__ = ["load_table", "read_grid", "write_grid", "write_table"]
