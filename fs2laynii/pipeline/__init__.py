"""Staged, re-entrant Freesurfer to LayNii rim pipeline."""

from .cache import StageFailure, StageResult, StageStatus
from .params import ParameterError, RunParameters, resolve_parameters, resolve_run_layering
from .paths import SubjectContext
from .runner import LayniiPipeline, summarize

__all__ = [
    'LayniiPipeline',
    'ParameterError',
    'RunParameters',
    'StageFailure',
    'StageResult',
    'StageStatus',
    'SubjectContext',
    'resolve_parameters',
    'resolve_run_layering',
    'summarize',
]
