"""
External tool registry for fs2laynii.

Every external collaborator (resampler, surface expander, surface filler,
voxel calculator, layering engine) lives in its own subdirectory under
tools/ and implements the BaseTool interface.

To add a new tool:
1. Create a new directory under tools/ (e.g., tools/mytool/)
2. Create an __init__.py that exports a class inheriting from BaseTool
3. Implement build_command
4. The tool will be automatically discovered and registered
"""

from .base import BaseTool, ToolRegistry, ToolResult

# Global tool registry instance
registry = ToolRegistry()


def discover_tools():
    """Discover and register all tools from the tools/ directory."""
    import importlib
    import pkgutil
    from pathlib import Path
    
    tools_dir = Path(__file__).parent
    
    for _, module_name, is_pkg in pkgutil.iter_modules([str(tools_dir)]):
        if is_pkg and module_name not in ('base', '__pycache__'):
            try:
                module = importlib.import_module(f'.{module_name}', package='fs2laynii.tools')
                if hasattr(module, 'TOOL_CLASS'):
                    registry.register(module.TOOL_CLASS)
            except Exception as e:
                import logging
                logging.getLogger(__name__).warning(f"Failed to load tool '{module_name}': {e}")


def get_tool(name: str):
    """Get a specific tool by name.
    
    Args:
        name: The tool name (e.g., 'mris_expand', 'ln2_layers')
        
    Returns:
        Type[BaseTool]: The tool class
    """
    return registry[name]


# Discover tools on import
discover_tools()

__all__ = [
    'BaseTool',
    'ToolRegistry',
    'ToolResult',
    'registry',
    'discover_tools',
    'get_tool',
]
