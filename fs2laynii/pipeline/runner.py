"""
Pipeline orchestration.

Stages run strictly in sequence: reference upsampling, boundary surfaces,
surface filling, rim composition and layering. Each stage is gated on its
own artifacts, so re-running the pipeline resumes from the first missing
one.
"""

import logging
from collections import Counter
from typing import Callable, Dict, List, Optional

from fs2laynii.cli import log_minimal
from fs2laynii.pipeline.cache import StageFailure, StageResult
from fs2laynii.pipeline.fill import ensure_reference, fill_surfaces
from fs2laynii.pipeline.layering import run_layering
from fs2laynii.pipeline.params import RunParameters
from fs2laynii.pipeline.paths import SubjectContext
from fs2laynii.pipeline.rim import compose_rims
from fs2laynii.pipeline.surfaces import generate_surfaces
from fs2laynii.utils.utils import launch_command

logger = logging.getLogger(__name__)


class LayniiPipeline:
    """Freesurfer subject to LayNii rim (and layers).
    
    Parameters
    ----------
    ctx : SubjectContext
        Subject whose surfaces are converted
    params : RunParameters
        Resolved run parameters
    runner : Callable
        Launcher for external commands, see launch_command
    calculator : optional
        Voxel arithmetic backend; chosen from params.arithmetic when None
    """
    
    def __init__(
        self,
        ctx: SubjectContext,
        params: RunParameters,
        runner: Callable = launch_command,
        calculator: Optional[object] = None
    ):
        self.ctx = ctx
        self.params = params
        self.runner = runner
        self.calculator = calculator
        self.results: List[StageResult] = []
    
    def prepare(self) -> None:
        """Create the working directory inside the subject."""
        self.ctx.work_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Working directory: {self.ctx.work_dir}")
    
    def _record(self, result: StageResult) -> None:
        """Keep ``result``; in strict mode a failure stops the run here."""
        self.results.append(result)
        if result.failed and self.params.strict:
            raise StageFailure(result)
    
    def run(self) -> List[StageResult]:
        """Run every stage in order and return the stage results.
        
        Raises
        ------
        StageFailure
            In strict mode, on the first failed stage
        """
        ctx, params = self.ctx, self.params
        self.results = []
        self.prepare()
        
        log_minimal(logger, f"Preparing rim for subject {ctx.subject} ({params.metric} metric)")
        self._record(ensure_reference(ctx, params, self.runner))
        
        log_minimal(logger, "Generating boundary surfaces")
        generate_surfaces(ctx, params, self.runner, on_result=self._record)
        
        log_minimal(logger, "Filling surfaces")
        fill_surfaces(ctx, params, self.runner, on_result=self._record)
        
        log_minimal(logger, "Composing rims")
        compose_rims(ctx, params, self.runner, calculator=self.calculator, on_result=self._record)
        
        if params.run_layering:
            log_minimal(logger, f"Running {params.model} layering with {params.n_layers} layers")
        run_layering(ctx, params, self.runner, on_result=self._record)
        
        counts = summarize(self.results)
        log_minimal(
            logger,
            f"Done: {counts['created']} created, {counts['cached']} cached, {counts['failed']} failed"
        )
        return self.results


def summarize(results: List[StageResult]) -> Dict[str, int]:
    """Count stage results by status."""
    counts = Counter(result.status.value for result in results)
    return {status: counts.get(status, 0) for status in ("created", "cached", "failed")}
