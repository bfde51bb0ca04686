"""Tabular run report."""

import logging
from pathlib import Path
from typing import List

import pandas as pd


logger = logging.getLogger(__name__)

REPORT_COLUMNS = ["stage", "artifact", "status", "cause", "command"]


def results_to_frame(results: List) -> pd.DataFrame:
    """Convert stage results to a DataFrame, one row per stage."""
    rows = [
        {
            "stage": r.stage,
            "artifact": str(r.artifact),
            "status": r.status.value,
            "cause": r.cause or "",
            "command": r.command or "",
        }
        for r in results
    ]
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def write_report(results: List, output_path: Path) -> Path:
    """Write stage results as a tab-separated file.
    
    Args:
        results: Stage results of a pipeline run
        output_path: Where to save the report
        
    Returns:
        Path to the written report
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df = results_to_frame(results)
    df.to_csv(output_path, sep='\t', index=False)
    logger.info(f"Wrote run report with {len(df)} stages to {output_path}")
    return output_path
