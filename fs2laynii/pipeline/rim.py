"""
Rim composition.

Filled volumes are combined voxel by voxel into three tissue labels per
hemisphere, which are summed into a hemisphere rim; both hemisphere rims
are then summed into the combined rim read by LN2_LAYERS.

    csf = (csf_outer - gm_outer)   * 1
    wm  = (gm_inner  - wm_boundary) * 2
    gm  = (gm_outer  - gm_inner)   * 3

Filled volumes are expected to be binary masks; this is not checked.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import nibabel as nib
from nibabel.filebasedimages import ImageFileError
import numpy as np

from fs2laynii.pipeline.cache import StageResult, collect, run_gated
from fs2laynii.pipeline.params import RunParameters
from fs2laynii.pipeline.paths import (
    BOTH,
    CSF,
    CSF_OUTER,
    GM,
    GM_INNER,
    GM_OUTER,
    HEMISPHERES,
    TISSUES,
    WM,
    WM_BOUNDARY,
    SubjectContext,
)
from fs2laynii.tools import ToolResult, get_tool
from fs2laynii.utils.utils import launch_command

logger = logging.getLogger(__name__)

LABEL_CODES = {CSF: 1, WM: 2, GM: 3}

# tissue -> (minuend role, subtrahend role)
LABEL_RECIPES = {
    CSF: (CSF_OUTER, GM_OUTER),
    WM: (GM_INNER, WM_BOUNDARY),
    GM: (GM_OUTER, GM_INNER),
}

LABEL_DTYPE = np.int16


class VolumeMismatchError(ValueError):
    """Raised when operand volumes do not share a grid."""


class NumpyCalculator:
    """Voxel arithmetic in-process with nibabel and numpy."""
    
    name = "numpy"
    
    def _load(self, path: Path):
        img = nib.load(str(path))
        return img, np.asanyarray(img.dataobj).astype(LABEL_DTYPE)
    
    def _save(self, data: np.ndarray, reference, output: Path) -> None:
        out = nib.Nifti1Image(data.astype(LABEL_DTYPE), reference.affine)
        out.set_data_dtype(LABEL_DTYPE)
        nib.save(out, str(output))
    
    def _check_shapes(self, arrays, paths) -> None:
        shapes = {arr.shape for arr in arrays}
        if len(shapes) > 1:
            detail = ", ".join(f"{p.name}={a.shape}" for p, a in zip(paths, arrays))
            raise VolumeMismatchError(f"Operand shapes differ: {detail}")
    
    def subtract(self, left: Path, right: Path, output: Path, factor: int) -> ToolResult:
        """Write ``(left - right) * factor``."""
        command = [self.name, str(left), "sub", str(right), "mul", str(factor), "-o", str(output)]
        try:
            left_img, a = self._load(left)
            _, b = self._load(right)
        except ImageFileError as e:
            return ToolResult(self.name, command, 1, str(e))
        
        self._check_shapes([a, b], [Path(left), Path(right)])
        self._save((a - b) * factor, left_img, output)
        return ToolResult(self.name, command, 0)
    
    def add(self, operands: Sequence[Path], output: Path) -> ToolResult:
        """Write the voxel-wise sum of ``operands``."""
        command = [self.name, str(operands[0])]
        for operand in operands[1:]:
            command.extend(["add", str(operand)])
        command.extend(["-o", str(output)])
        try:
            loaded = [self._load(p) for p in operands]
        except ImageFileError as e:
            return ToolResult(self.name, command, 1, str(e))
        
        arrays = [arr for _, arr in loaded]
        self._check_shapes(arrays, [Path(p) for p in operands])
        self._save(np.sum(arrays, axis=0, dtype=LABEL_DTYPE), loaded[0][0], output)
        return ToolResult(self.name, command, 0)


class FscalcCalculator:
    """Voxel arithmetic delegated to Freesurfer's fscalc."""
    
    name = "fscalc"
    
    def __init__(self, ctx: SubjectContext, runner: Callable = launch_command):
        self.ctx = ctx
        self.runner = runner
        self.tool = get_tool("fscalc")
    
    def subtract(self, left: Path, right: Path, output: Path, factor: int) -> ToolResult:
        return self.tool.run(
            inputs=[left, right],
            env=self.ctx.tool_environment(),
            runner=self.runner,
            first=left,
            terms=[("sub", right), ("mul", factor)],
            output=output,
        )
    
    def add(self, operands: Sequence[Path], output: Path) -> ToolResult:
        return self.tool.run(
            inputs=list(operands),
            env=self.ctx.tool_environment(),
            runner=self.runner,
            first=operands[0],
            terms=[("add", operand) for operand in operands[1:]],
            output=output,
        )


def make_calculator(backend: str, ctx: SubjectContext, runner: Callable = launch_command):
    if backend == "fscalc":
        return FscalcCalculator(ctx, runner)
    return NumpyCalculator()


def compose_labels(
    ctx: SubjectContext,
    hemi: str,
    calculator,
    on_result: Optional[Callable] = None
) -> List[StageResult]:
    """Compute the CSF, WM and GM label volumes of one hemisphere."""
    results = []
    for tissue in TISSUES:
        minuend, subtrahend = LABEL_RECIPES[tissue]
        left, right = ctx.filled(hemi, minuend), ctx.filled(hemi, subtrahend)
        
        def produce(tmp: Path, left=left, right=right, tissue=tissue) -> ToolResult:
            return calculator.subtract(left, right, tmp, LABEL_CODES[tissue])
        
        collect(results, run_gated(f"label:{tissue}", ctx.label(hemi, tissue), produce), on_result)
    return results


def compose_hemisphere_rim(ctx: SubjectContext, hemi: str, calculator) -> StageResult:
    operands = [ctx.label(hemi, tissue) for tissue in TISSUES]
    return run_gated("rim", ctx.rim(hemi), lambda tmp: calculator.add(operands, tmp))


def compose_combined_rim(
    ctx: SubjectContext,
    calculator,
    hemispheres: Sequence[str] = HEMISPHERES
) -> StageResult:
    operands = [ctx.rim(hemi) for hemi in hemispheres]
    return run_gated("rim", ctx.rim(BOTH), lambda tmp: calculator.add(operands, tmp))


def compose_rims(
    ctx: SubjectContext,
    params: RunParameters,
    runner: Callable = launch_command,
    calculator: Optional[object] = None,
    hemispheres: Sequence[str] = HEMISPHERES,
    on_result: Optional[Callable] = None
) -> List[StageResult]:
    """Build the label volumes, the hemisphere rims and the combined rim."""
    if calculator is None:
        calculator = make_calculator(params.arithmetic, ctx, runner)
    
    results = []
    for hemi in hemispheres:
        results.extend(compose_labels(ctx, hemi, calculator, on_result))
        collect(results, compose_hemisphere_rim(ctx, hemi, calculator), on_result)
    collect(results, compose_combined_rim(ctx, calculator, hemispheres), on_result)
    return results
