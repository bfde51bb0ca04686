"""Freesurfer surface-to-volume filler."""

from pathlib import Path
from typing import List

from fs2laynii.tools.base import BaseTool
from fs2laynii.utils.utils import format_number


class MrisFillTool(BaseTool):
    """Rasterize the interior of a closed surface into a binary volume."""
    
    name = "mris_fill"
    help_text = "(template volume, voxel size, surface) -> binary volume"
    
    @classmethod
    def build_command(
        cls,
        surface: Path,
        output: Path,
        template: Path,
        resolution: float,
        **kwargs
    ) -> List[str]:
        return [
            cls.executable(),
            "-c",
            "-r", format_number(resolution),
            "-t", str(template),
            str(surface),
            str(output),
        ]
