"""
Layering of the rim volumes with LayNii.

Unlike the other stages, LN2_LAYERS writes its outputs next to the rim it
reads and picks their names itself, so the stage is gated on the layer
volume the engine is known to produce rather than on a path we choose.
"""

import logging
from typing import Callable, List, Optional, Sequence

from fs2laynii.pipeline.cache import StageResult, StageStatus, collect
from fs2laynii.pipeline.params import RunParameters
from fs2laynii.pipeline.paths import BOTH, HEMISPHERES, SubjectContext
from fs2laynii.tools import get_tool
from fs2laynii.utils.utils import launch_command

logger = logging.getLogger(__name__)

STAGE = "layering"


def layering_targets(ctx: SubjectContext, hemispheres: Sequence[str] = HEMISPHERES):
    """Rims to layer: each hemisphere, then both."""
    return [ctx.rim(hemi) for hemi in hemispheres] + [ctx.rim(BOTH)]


def layer_rim(
    ctx: SubjectContext,
    params: RunParameters,
    rim,
    runner: Callable = launch_command
) -> StageResult:
    """Run LN2_LAYERS on one rim, unless its layer volume already exists."""
    engine = get_tool("ln2_layers")
    
    existing = engine.find_output(rim, params.model)
    if existing is not None and not params.force_layering:
        logger.info(f"{existing.name} exists, skipping {STAGE}")
        return StageResult(STAGE, existing, StageStatus.CACHED)
    
    layers = engine.output_path(rim, params.model)
    logger.info(f"{STAGE}: {params.model} layers from {rim.name}")
    outcome = engine.run(
        inputs=[rim],
        env=ctx.tool_environment(),
        runner=runner,
        rim=rim,
        n_layers=params.n_layers,
        model=params.model,
    )
    if not outcome.ok:
        return StageResult(STAGE, layers, StageStatus.FAILED,
                           cause=outcome.cause, command=outcome.command_line)
    
    written = engine.find_output(rim, params.model)
    if written is None:
        cause = f"{outcome.tool} reported success but wrote no output"
        logger.error(f"{STAGE}: {cause}")
        return StageResult(STAGE, layers, StageStatus.FAILED,
                           cause=cause, command=outcome.command_line)
    return StageResult(STAGE, written, StageStatus.CREATED, command=outcome.command_line)


def run_layering(
    ctx: SubjectContext,
    params: RunParameters,
    runner: Callable = launch_command,
    hemispheres: Sequence[str] = HEMISPHERES,
    on_result: Optional[Callable] = None
) -> List[StageResult]:
    """Run LN2_LAYERS on every rim, unless layering is switched off."""
    if not params.run_layering:
        logger.info("Layering disabled, stopping after rim composition")
        return []
    
    results = []
    for rim in layering_targets(ctx, hemispheres):
        collect(results, layer_rim(ctx, params, rim, runner), on_result)
    return results
