"""Chat command parsing package."""

from stockbook.parsing.parser import parse_command, split_fields

__all__ = ["parse_command", "split_fields"]
