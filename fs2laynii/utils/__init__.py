"""Utility functions for fs2laynii."""

from .utils import format_number, launch_command, stderr_tail

__all__ = [
    'format_number',
    'launch_command',
    'stderr_tail',
]
