"""
Boundary surface generation.

For each hemisphere, four surfaces are derived from the Freesurfer white
and pial surfaces: the outer CSF boundary, the outer and inner gray matter
boundaries, and the white matter boundary.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from fs2laynii.pipeline.cache import StageResult, collect, run_gated
from fs2laynii.pipeline.params import RunParameters
from fs2laynii.pipeline.paths import (
    CSF_OUTER,
    GM_INNER,
    GM_OUTER,
    HEMISPHERES,
    WM_BOUNDARY,
    SubjectContext,
)
from fs2laynii.tools import ToolResult, get_tool
from fs2laynii.utils.utils import launch_command

logger = logging.getLogger(__name__)

STAGE = "surface"


@dataclass(frozen=True)
class SurfaceStep:
    """How one boundary surface is obtained from a source surface.
    
    A step without displacement is a verbatim copy of its source.
    """
    role: str
    source: Path
    displacement: Optional[float] = None
    thickness: bool = False
    
    @property
    def is_copy(self) -> bool:
        return self.displacement is None


def resolve_pial(ctx: SubjectContext, hemi: str) -> Path:
    """Return the first existing pial surface variant.
    
    Falls back to the base pial path when no variant exists; the
    missing file is then reported by the stage that consumes it.
    """
    candidates = ctx.pial_candidates(hemi)
    for candidate in candidates:
        if candidate.exists():
            logger.debug(f"Using pial surface {candidate}")
            return candidate
    logger.warning(f"No pial surface found for {hemi} in {ctx.surf_dir}")
    return candidates[-1]


def surface_plan(ctx: SubjectContext, params: RunParameters, hemi: str) -> List[SurfaceStep]:
    """Return the four surface steps for ``hemi``, in role order."""
    pial = resolve_pial(ctx, hemi)
    white = ctx.white(hemi)
    
    if params.thickness_mode:
        return [
            SurfaceStep(CSF_OUTER, pial, params.expand, thickness=True),
            SurfaceStep(GM_OUTER, pial, params.inward_expand, thickness=True),
            SurfaceStep(WM_BOUNDARY, white, params.shrink, thickness=True),
            SurfaceStep(GM_INNER, white, params.inward_shrink, thickness=True),
        ]
    
    # Distance mode: the gray matter boundaries are the original surfaces
    return [
        SurfaceStep(CSF_OUTER, pial, params.resolution),
        SurfaceStep(GM_OUTER, pial),
        SurfaceStep(WM_BOUNDARY, white, params.shrink),
        SurfaceStep(GM_INNER, white),
    ]


def _copy_surface(source: Path, output: Path) -> ToolResult:
    shutil.copyfile(source, output)
    return ToolResult("copy", ["cp", str(source), str(output)], 0)


def build_surface(
    ctx: SubjectContext,
    hemi: str,
    step: SurfaceStep,
    runner: Callable = launch_command
) -> StageResult:
    """Produce a single boundary surface, unless it already exists."""
    expander = get_tool("mris_expand")
    
    def produce(tmp: Path) -> ToolResult:
        if step.is_copy:
            return _copy_surface(step.source, tmp)
        return expander.run(
            inputs=[step.source],
            env=ctx.tool_environment(),
            runner=runner,
            surface=step.source,
            output=tmp,
            displacement=step.displacement,
            thickness=step.thickness,
        )
    
    return run_gated(f"{STAGE}:{step.role}", ctx.surface(hemi, step.role), produce)


def generate_surfaces(
    ctx: SubjectContext,
    params: RunParameters,
    runner: Callable = launch_command,
    hemispheres: Sequence[str] = HEMISPHERES,
    on_result: Optional[Callable] = None
) -> List[StageResult]:
    """Generate the boundary surfaces of every hemisphere."""
    results = []
    for hemi in hemispheres:
        for step in surface_plan(ctx, params, hemi):
            collect(results, build_surface(ctx, hemi, step, runner), on_result)
    return results
