"""Freesurfer volume resampler."""

from pathlib import Path
from typing import List

from fs2laynii.tools.base import BaseTool
from fs2laynii.utils.utils import format_number


class MriConvertTool(BaseTool):
    """Resample a volume to an isotropic voxel size with cubic interpolation."""
    
    name = "mri_convert"
    help_text = "(source volume, isotropic voxel size) -> resampled volume"
    
    @classmethod
    def build_command(
        cls,
        source: Path,
        output: Path,
        voxel_size: float,
        **kwargs
    ) -> List[str]:
        size = format_number(voxel_size)
        return [
            cls.executable(),
            str(source),
            str(output),
            "-vs", size, size, size,
            "-rt", "cubic",
        ]
