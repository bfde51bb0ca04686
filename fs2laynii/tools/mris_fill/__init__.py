"""Surface filling with Freesurfer's mris_fill."""

from .tool import MrisFillTool

TOOL_CLASS = MrisFillTool

__all__ = ['MrisFillTool', 'TOOL_CLASS']
