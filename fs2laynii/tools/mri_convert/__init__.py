"""Volume resampling with Freesurfer's mri_convert."""

from .tool import MriConvertTool

# Export the tool class for automatic discovery
TOOL_CLASS = MriConvertTool

__all__ = ['MriConvertTool', 'TOOL_CLASS']
