"""
Base classes and interfaces for the external tools driven by fs2laynii.

This module defines the BaseTool abstract base class that every external
collaborator wrapper must implement. It provides a consistent interface for:
- Executable resolution (with environment overrides)
- Command construction
- Input checks
- Launching with an explicit, per-invocation environment
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Type

from fs2laynii.utils.defaults import DEFAULT_EXECUTABLES
from fs2laynii.utils.utils import launch_command, stderr_tail

logger = logging.getLogger(__name__)

ENV_PREFIX = "FS2LAYNII_"


@dataclass
class ToolResult:
    """Outcome of a single external tool invocation."""
    tool: str
    command: List[str]
    returncode: int
    cause: Optional[str] = None
    
    @property
    def ok(self) -> bool:
        return self.returncode == 0
    
    @property
    def command_line(self) -> str:
        return " ".join(self.command)


class BaseTool(ABC):
    """Abstract base class for all external tools.
    
    To add a tool, inherit from this class and implement build_command.
    Place the wrapper in fs2laynii/tools/<toolname>/ and ensure its
    __init__.py exports TOOL_CLASS pointing to the class.
    
    Example
    -------
    ```python
    # fs2laynii/tools/mytool/__init__.py
    from .tool import MyTool
    TOOL_CLASS = MyTool
    ```
    
    Attributes
    ----------
    name : str
        Unique identifier for the tool, also the key into DEFAULT_EXECUTABLES
    help_text : str
        Brief description of the contract the pipeline relies on
    """
    
    name: str = ""
    help_text: str = ""
    
    @classmethod
    def executable(cls) -> str:
        """Return the executable to launch.
        
        ``FS2LAYNII_<NAME>`` in the environment takes precedence over the
        default executable name.
        """
        override = os.environ.get(f"{ENV_PREFIX}{cls.name.upper()}")
        if override:
            return override
        return DEFAULT_EXECUTABLES.get(cls.name, cls.name)
    
    @classmethod
    @abstractmethod
    def build_command(cls, **kwargs) -> List[str]:
        """Build the command line for this tool.
        
        Parameters
        ----------
        **kwargs : dict
            Tool-specific parameters (paths and numeric options)
            
        Returns
        -------
        List[str]
            Command as list of strings, executable first
        """
        pass
    
    @classmethod
    def missing_inputs(cls, inputs: List[Path]) -> List[Path]:
        """Return the inputs that do not exist on disk."""
        return [p for p in inputs if not Path(p).exists()]
    
    @classmethod
    def run(
        cls,
        inputs: List[Path],
        env: Optional[Mapping[str, str]] = None,
        runner: Callable = launch_command,
        **kwargs
    ) -> ToolResult:
        """Check inputs, build the command and launch it.
        
        A failing tool never raises: the failure is reported in the
        returned ToolResult so the caller decides whether to go on.
        
        Parameters
        ----------
        inputs : List[Path]
            Files the tool reads
        env : Optional[Mapping[str, str]]
            Environment for this invocation only
        runner : Callable
            Launcher with the signature of launch_command
        **kwargs : dict
            Forwarded to build_command
            
        Returns
        -------
        ToolResult
            Return code and failure cause, if any
        """
        cmd = cls.build_command(**kwargs)
        
        missing = cls.missing_inputs(inputs)
        if missing:
            cause = f"missing input: {', '.join(str(p) for p in missing)}"
            logger.error(f"{cls.name}: {cause}")
            return ToolResult(cls.name, cmd, 1, cause)
        
        proc = runner(cmd, env=env)
        if proc.returncode != 0:
            cause = stderr_tail(proc.stderr) or f"exit status {proc.returncode}"
            logger.error(f"{cls.name} failed ({proc.returncode}): {cause}")
            return ToolResult(cls.name, cmd, proc.returncode, cause)
        
        return ToolResult(cls.name, cmd, 0)


class ToolRegistry:
    """Registry for the available external tools.
    
    Attributes
    ----------
    _tools : Dict[str, Type[BaseTool]]
        Mapping of tool names to their classes
    """
    
    def __init__(self):
        self._tools: Dict[str, Type[BaseTool]] = {}
    
    def register(self, tool_class: Type[BaseTool]) -> None:
        """Register a tool class.
        
        Raises
        ------
        ValueError
            If the tool class has no name
        """
        if not tool_class.name:
            raise ValueError(f"Tool class {tool_class.__name__} has no name defined")
        
        if tool_class.name in self._tools:
            logger.warning(f"Tool '{tool_class.name}' already registered, overwriting")
        
        self._tools[tool_class.name] = tool_class
        logger.debug(f"Registered tool: {tool_class.name}")
    
    def __getitem__(self, name: str) -> Type[BaseTool]:
        try:
            return self._tools[name]
        except KeyError:
            raise KeyError(f"Unknown tool '{name}'. Available: {', '.join(self.list_tools())}")
    
    def list_tools(self) -> List[str]:
        return sorted(self._tools.keys())
