"""CLI module for fs2laynii."""

from .cli import (
    parse_args,
    build_parser,
    configure_logging,
    log_minimal,
    MINIMAL
)

__all__ = [
    'parse_args',
    'build_parser',
    'configure_logging',
    'log_minimal',
    'MINIMAL'
]
