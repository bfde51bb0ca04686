"""Surface expansion with Freesurfer's mris_expand."""

from .tool import MrisExpandTool

TOOL_CLASS = MrisExpandTool

__all__ = ['MrisExpandTool', 'TOOL_CLASS']
