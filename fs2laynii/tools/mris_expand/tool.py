"""Freesurfer surface boundary expander."""

from pathlib import Path
from typing import List

from fs2laynii.tools.base import BaseTool
from fs2laynii.utils.utils import format_number


class MrisExpandTool(BaseTool):
    """Displace a surface along its normals.
    
    With ``thickness=True`` the displacement is a fraction of the local
    cortical thickness; otherwise it is a distance in mm. Negative values
    move the surface inwards.
    """
    
    name = "mris_expand"
    help_text = "(surface, signed displacement[, thickness]) -> derived surface"
    
    @classmethod
    def build_command(
        cls,
        surface: Path,
        output: Path,
        displacement: float,
        thickness: bool = False,
        **kwargs
    ) -> List[str]:
        cmd = [cls.executable()]
        if thickness:
            cmd.append("-thickness")
        cmd.extend([str(surface), format_number(displacement), str(output)])
        return cmd
