"""
LayNii layering engine.

This module provides the LN2_LAYERS integration used on the final rim
volumes, supporting the equivolume and equidistant models.
"""

from .tool import Ln2LayersTool, EQUIVOLUME, EQUIDISTANT, MODELS

# Export the tool class for automatic discovery
TOOL_CLASS = Ln2LayersTool

__all__ = ['Ln2LayersTool', 'TOOL_CLASS', 'EQUIVOLUME', 'EQUIDISTANT', 'MODELS']
