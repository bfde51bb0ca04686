"""Entry point for the fs2laynii command."""

import logging
import sys
from typing import List, Optional

from fs2laynii.cli import configure_logging, parse_args
from fs2laynii.pipeline import (
    LayniiPipeline,
    ParameterError,
    StageFailure,
    SubjectContext,
    resolve_parameters,
)
from fs2laynii.utils.report import write_report

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the pipeline for one subject.
    
    Returns 0 once the pipeline has gone through every stage, even if
    some external tools failed; missing outputs are picked up by the next
    run. Only parameter errors and strict-mode failures return 1.
    """
    args = parse_args(argv)
    configure_logging(args.verbosity)
    
    try:
        params = resolve_parameters(
            resolution=args.resolution,
            metric=args.metric,
            expand=args.expand,
            shrink=args.shrink,
            n_layers=args.n_layers,
            model=args.model,
            stop_layering=args.stop_layering,
            strict=args.strict,
            force_layering=args.force_layering,
            arithmetic=args.arithmetic,
        )
    except ParameterError as e:
        logger.error(str(e))
        return 1
    
    ctx = SubjectContext(args.subjects_dir, args.subject)
    if not ctx.subject_dir.is_dir():
        logger.warning(f"Subject directory {ctx.subject_dir} does not exist")
    
    pipeline = LayniiPipeline(ctx, params)
    try:
        results = pipeline.run()
    except StageFailure as e:
        logger.error(str(e))
        results = pipeline.results
        if args.report:
            write_report(results, args.report)
        return 1
    
    if args.report:
        write_report(results, args.report)
    return 0


if __name__ == '__main__':
    sys.exit(main())
