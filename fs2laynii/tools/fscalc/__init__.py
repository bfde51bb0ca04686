"""Voxel arithmetic with Freesurfer's fscalc."""

from .tool import FscalcTool

TOOL_CLASS = FscalcTool

__all__ = ['FscalcTool', 'TOOL_CLASS']
