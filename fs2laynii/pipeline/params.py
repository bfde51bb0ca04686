"""
Run parameter resolution.

Turns raw option values into a fully populated RunParameters record.
Nothing here touches the filesystem.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple, Union

from fs2laynii.tools.ln2_layers import EQUIDISTANT, EQUIVOLUME
from fs2laynii.utils.defaults import (
    DEFAULT_ARITHMETIC,
    DEFAULT_EXPAND,
    DEFAULT_METRIC,
    DEFAULT_MODEL,
    DEFAULT_N_LAYERS,
    DEFAULT_RESOLUTION,
    DEFAULT_SHRINK,
    INWARD_DELTA,
)

logger = logging.getLogger(__name__)

THICKNESS = "thickness"
DISTANCE = "distance"

METRIC_CODES = {"t": THICKNESS, "d": DISTANCE, THICKNESS: THICKNESS, DISTANCE: DISTANCE}
MODEL_CODES = {"v": EQUIVOLUME, "d": EQUIDISTANT, EQUIVOLUME: EQUIVOLUME, EQUIDISTANT: EQUIDISTANT}
ARITHMETIC_BACKENDS = ("numpy", "fscalc")

TWO_PLACES = Decimal("0.01")


class ParameterError(ValueError):
    """Raised when an option value cannot be resolved."""


@dataclass(frozen=True)
class RunParameters:
    """Resolved parameters for one pipeline run."""
    resolution: float
    expand: float
    shrink: float
    n_layers: int
    model: str
    metric: str
    run_layering: bool
    inward_expand: Optional[float] = None
    inward_shrink: Optional[float] = None
    strict: bool = False
    force_layering: bool = False
    arithmetic: str = DEFAULT_ARITHMETIC
    
    @property
    def thickness_mode(self) -> bool:
        return self.metric == THICKNESS


def resolve_run_layering(value: Optional[str]) -> bool:
    """Map the stop-layering option onto the run-layering flag.
    
    The mapping is three-way and deliberately preserved:
    
    - unset or empty: run layering
    - the literal ``"0"``: run layering (a stop value of zero means "do not stop")
    - anything else: skip layering
    """
    if value is None or value == "":
        return True
    if value == "0":
        return True
    return False


def inward_offsets(expand: float, shrink: float) -> Tuple[float, float]:
    """Return (inward_expand, inward_shrink) with fixed two-decimal arithmetic.
    
    >>> inward_offsets(0.3, -0.3)
    (0.2, -0.2)
    """
    delta = Decimal(INWARD_DELTA)
    inward_expand = (Decimal(str(expand)) - delta).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    inward_shrink = (Decimal(str(shrink)) + delta).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return float(inward_expand), float(inward_shrink)


def _lookup(value: Optional[str], codes: dict, default: str, option: str) -> str:
    if value is None or value == "":
        return default
    try:
        return codes[str(value).lower()]
    except KeyError:
        raise ParameterError(
            f"Invalid value '{value}' for {option}. "
            f"Expected one of: {', '.join(sorted(codes))}"
        )


def _number(value: Union[None, str, float], default, cast, option: str):
    if value is None or value == "":
        return default
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ParameterError(f"Invalid numeric value '{value}' for {option}")


def resolve_parameters(
    resolution: Union[None, str, float] = None,
    metric: Optional[str] = None,
    expand: Union[None, str, float] = None,
    shrink: Union[None, str, float] = None,
    n_layers: Union[None, str, int] = None,
    model: Optional[str] = None,
    stop_layering: Optional[str] = None,
    strict: bool = False,
    force_layering: bool = False,
    arithmetic: str = DEFAULT_ARITHMETIC
) -> RunParameters:
    """Resolve raw option values into RunParameters.
    
    Parameters
    ----------
    resolution : float or str, optional
        Target isotropic voxel size in mm (default 0.3)
    metric : str, optional
        ``t``/``thickness`` or ``d``/``distance`` (default distance)
    expand : float or str, optional
        Outward factor for the CSF boundary (default 0.3)
    shrink : float or str, optional
        Inward factor for the WM boundary (default -0.3)
    n_layers : int or str, optional
        Number of layers, positive and odd (default 11)
    model : str, optional
        ``v``/``equivolume`` or ``d``/``equidistant`` (default equivolume)
    stop_layering : str, optional
        Raw stop-layering value, see resolve_run_layering
    strict : bool
        Abort on the first failed stage
    force_layering : bool
        Re-run layering even when its outputs exist
    arithmetic : str
        Voxel arithmetic backend, ``numpy`` or ``fscalc``
        
    Returns
    -------
    RunParameters
        
    Raises
    ------
    ParameterError
        If a value is malformed or out of range
    """
    resolved_metric = _lookup(metric, METRIC_CODES, DEFAULT_METRIC, "metric (-m)")
    resolved_model = _lookup(model, MODEL_CODES, DEFAULT_MODEL, "model (-x)")
    
    res = _number(resolution, DEFAULT_RESOLUTION, float, "resolution (-r)")
    exp = _number(expand, DEFAULT_EXPAND, float, "expand factor (-p)")
    shr = _number(shrink, DEFAULT_SHRINK, float, "shrink factor (-w)")
    layers = _number(n_layers, DEFAULT_N_LAYERS, int, "layer count (-n)")
    
    if res <= 0:
        raise ParameterError(f"Resolution must be positive, got {res}")
    if layers <= 0 or layers % 2 == 0:
        raise ParameterError(f"Layer count must be a positive odd integer, got {layers}")
    if arithmetic not in ARITHMETIC_BACKENDS:
        raise ParameterError(f"Unknown arithmetic backend '{arithmetic}'")
    
    # Not enforced, only made visible
    if exp <= 0:
        logger.warning(f"Expand factor {exp} is not positive; the CSF boundary will not move outwards")
    if shr >= 0:
        logger.warning(f"Shrink factor {shr} is not negative; the WM boundary will not move inwards")
    
    inward_expand = inward_shrink = None
    if resolved_metric == THICKNESS:
        inward_expand, inward_shrink = inward_offsets(exp, shr)
    
    params = RunParameters(
        resolution=res,
        expand=exp,
        shrink=shr,
        n_layers=layers,
        model=resolved_model,
        metric=resolved_metric,
        run_layering=resolve_run_layering(stop_layering),
        inward_expand=inward_expand,
        inward_shrink=inward_shrink,
        strict=strict,
        force_layering=force_layering,
        arithmetic=arithmetic,
    )
    logger.debug(f"Resolved parameters: {params}")
    return params
