"""
File-existence cache shared by every pipeline stage.

An artifact's presence on disk is its cache entry. Outputs are produced
under a temporary sibling name and moved into place only once the producer
has succeeded, so an interrupted run never leaves a partial file that a
later run would mistake for a finished one.
"""

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from fs2laynii.tools.base import ToolResult

logger = logging.getLogger(__name__)

PARTIAL_PREFIX = ".partial-"


class StageStatus(Enum):
    """Outcome of a cache-gated stage."""
    CREATED = "created"
    CACHED = "cached"
    FAILED = "failed"


@dataclass
class StageResult:
    """Tagged result of a single stage."""
    stage: str
    artifact: Path
    status: StageStatus
    cause: Optional[str] = None
    command: Optional[str] = None
    
    @property
    def failed(self) -> bool:
        return self.status is StageStatus.FAILED


class StageFailure(RuntimeError):
    """Raised in strict mode when a stage fails."""
    
    def __init__(self, result: StageResult):
        self.result = result
        super().__init__(f"Stage '{result.stage}' failed for {result.artifact}: {result.cause}")


def is_cached(path: Path) -> bool:
    return Path(path).exists()


def partial_path(path: Path) -> Path:
    """Temporary sibling of ``path`` that keeps its extension."""
    path = Path(path)
    return path.with_name(f"{PARTIAL_PREFIX}{path.name}")


class AtomicOutput:
    """Handle yielded by atomic_output."""
    
    def __init__(self, path: Path):
        self.path = Path(path)
        self.tmp = partial_path(self.path)
        self.committed = False
    
    def commit(self) -> None:
        self.committed = True


@contextmanager
def atomic_output(path: Path) -> Iterator[AtomicOutput]:
    """Write to a temporary path and rename into place on commit.
    
    The producer writes ``out.tmp`` and calls ``out.commit()`` once it
    succeeded. Anything left uncommitted is removed on exit, including
    when the block raises.
    """
    out = AtomicOutput(path)
    if out.tmp.exists():
        # left over from an interrupted run
        out.tmp.unlink()
    try:
        yield out
        if out.committed and out.tmp.exists():
            os.replace(out.tmp, out.path)
    finally:
        if out.tmp.exists():
            out.tmp.unlink()


def run_gated(
    stage: str,
    artifact: Path,
    produce: Callable[[Path], ToolResult]
) -> StageResult:
    """Run ``produce`` unless ``artifact`` already exists.
    
    Parameters
    ----------
    stage : str
        Stage name, used in logs and reports
    artifact : Path
        Final output path; its existence short-circuits the stage
    produce : Callable[[Path], ToolResult]
        Writes the output to the temporary path it is given
        
    Returns
    -------
    StageResult
        CACHED, CREATED, or FAILED with the cause
    """
    artifact = Path(artifact)
    if is_cached(artifact):
        logger.info(f"{artifact.name} exists, skipping {stage}")
        return StageResult(stage, artifact, StageStatus.CACHED)
    
    logger.info(f"{stage}: creating {artifact.name}")
    with atomic_output(artifact) as out:
        try:
            outcome = produce(out.tmp)
        except (OSError, ValueError) as e:
            logger.error(f"{stage} failed for {artifact.name}: {e}")
            return StageResult(stage, artifact, StageStatus.FAILED, cause=str(e))
        
        if outcome.ok and out.tmp.exists():
            out.commit()
    
    if not outcome.ok:
        return StageResult(stage, artifact, StageStatus.FAILED,
                           cause=outcome.cause, command=outcome.command_line)
    if not artifact.exists():
        cause = f"{outcome.tool} reported success but wrote no output"
        logger.error(f"{stage}: {cause}")
        return StageResult(stage, artifact, StageStatus.FAILED,
                           cause=cause, command=outcome.command_line)
    return StageResult(stage, artifact, StageStatus.CREATED, command=outcome.command_line)


def collect(
    results: List[StageResult],
    result: StageResult,
    on_result: Optional[Callable[[StageResult], None]] = None
) -> StageResult:
    """Append ``result`` and hand it to ``on_result`` before the next stage starts.
    
    ``on_result`` may raise (StageFailure in strict mode) to stop the
    remaining stages of a group from running.
    """
    results.append(result)
    if on_result is not None:
        on_result(result)
    return result
