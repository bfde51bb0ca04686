"""Freesurfer voxel-wise calculator."""

from pathlib import Path
from typing import List, Sequence, Tuple, Union

from fs2laynii.tools.base import BaseTool

OPERATIONS = ("sub", "add", "mul")

Term = Tuple[str, Union[Path, str, int]]


class FscalcTool(BaseTool):
    """Evaluate a left-to-right chain such as ``a sub b mul 3``."""
    
    name = "fscalc"
    help_text = "(operands, sub|add, scalar multiply) -> output volume"
    
    @classmethod
    def build_command(
        cls,
        first: Path,
        terms: Sequence[Term],
        output: Path,
        **kwargs
    ) -> List[str]:
        cmd = [cls.executable(), str(first)]
        for operation, operand in terms:
            if operation not in OPERATIONS:
                raise ValueError(f"Unsupported fscalc operation '{operation}'")
            cmd.extend([operation, str(operand)])
        cmd.extend(["-o", str(output)])
        return cmd
