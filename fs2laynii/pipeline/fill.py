"""
Surface-to-volume filling.

Every boundary surface is rasterized into a binary volume at the target
resolution, on the grid of the upsampled brain volume.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from fs2laynii.pipeline.cache import StageResult, collect, run_gated
from fs2laynii.pipeline.params import RunParameters
from fs2laynii.pipeline.paths import HEMISPHERES, SURFACE_ROLES, SubjectContext
from fs2laynii.tools import ToolResult, get_tool
from fs2laynii.utils.utils import launch_command

logger = logging.getLogger(__name__)


def ensure_reference(
    ctx: SubjectContext,
    params: RunParameters,
    runner: Callable = launch_command
) -> StageResult:
    """Upsample brain.finalsurfs.mgz to the target isotropic resolution."""
    resampler = get_tool("mri_convert")
    
    def produce(tmp: Path) -> ToolResult:
        return resampler.run(
            inputs=[ctx.reference_source],
            env=ctx.tool_environment(),
            runner=runner,
            source=ctx.reference_source,
            output=tmp,
            voxel_size=params.resolution,
        )
    
    return run_gated("reference", ctx.reference_volume(params.resolution), produce)


def fill_pairs(ctx: SubjectContext, hemispheres: Sequence[str] = HEMISPHERES):
    """Yield the (hemi, role, surface, filled volume) quadruples in fill order."""
    for hemi in hemispheres:
        for role in SURFACE_ROLES:
            yield hemi, role, ctx.surface(hemi, role), ctx.filled(hemi, role)


def fill_surfaces(
    ctx: SubjectContext,
    params: RunParameters,
    runner: Callable = launch_command,
    hemispheres: Sequence[str] = HEMISPHERES,
    on_result: Optional[Callable] = None
) -> List[StageResult]:
    """Rasterize every boundary surface against the reference volume."""
    filler = get_tool("mris_fill")
    template = ctx.reference_volume(params.resolution)
    results = []
    
    for hemi, role, surface, filled in fill_pairs(ctx, hemispheres):
        def produce(tmp: Path, surface=surface) -> ToolResult:
            return filler.run(
                inputs=[surface, template],
                env=ctx.tool_environment(),
                runner=runner,
                surface=surface,
                output=tmp,
                template=template,
                resolution=params.resolution,
            )
        
        collect(results, run_gated(f"fill:{role}", filled, produce), on_result)
    
    return results
