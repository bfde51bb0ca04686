"""
LayNii layering engine.

LN2_LAYERS reads a rim volume (1 = CSF side, 2 = WM side, 3 = gray matter)
and writes layer and metric volumes next to it.
"""

from pathlib import Path
from typing import List, Optional

from fs2laynii.tools.base import BaseTool

EQUIVOLUME = "equivolume"
EQUIDISTANT = "equidistant"
MODELS = (EQUIVOLUME, EQUIDISTANT)

LAYER_TAGS = {
    EQUIVOLUME: ("_layers_equivol",),
    EQUIDISTANT: ("_layers", "_layers_equidist"),
}


class Ln2LayersTool(BaseTool):
    """LayNii LN2_LAYERS cortical depth estimation.
    
    The equivolume model adds the volume-preserving flag and disables
    smoothing of the equivolume factors; the equidistant model uses neither.
    Borders are always included in the layering.
    """
    
    name = "ln2_layers"
    help_text = "(rim, layer count, model flags, include borders) -> layer volumes"
    
    @classmethod
    def model_flags(cls, model: str) -> List[str]:
        if model == EQUIVOLUME:
            return ["-equivol", "-iter_smooth", "0"]
        if model == EQUIDISTANT:
            return []
        raise ValueError(f"Unknown layering model '{model}'")
    
    @classmethod
    def build_command(
        cls,
        rim: Path,
        n_layers: int,
        model: str,
        **kwargs
    ) -> List[str]:
        return [
            cls.executable(),
            "-rim", str(rim),
            "-nr_layers", str(n_layers),
            *cls.model_flags(model),
            "-incl_borders",
        ]
    
    @classmethod
    def output_candidates(cls, rim: Path, model: str) -> List[Path]:
        """Return the names LN2_LAYERS may give the layer volume of ``rim``.
        
        LayNii 2.x writes ``_layers_equivol`` for the equivolume model. The
        equidistant volume is ``_layers`` in most releases and
        ``_layers_equidist`` in some; either one counts.
        """
        rim = Path(rim)
        name = rim.name
        for ext in (".nii.gz", ".nii"):
            if name.endswith(ext):
                stem, suffix = name[:-len(ext)], ext
                break
        else:
            stem, suffix = rim.stem, rim.suffix
        
        tags = LAYER_TAGS.get(model, LAYER_TAGS[EQUIDISTANT])
        return [rim.with_name(f"{stem}{tag}{suffix}") for tag in tags]
    
    @classmethod
    def output_path(cls, rim: Path, model: str) -> Path:
        """Return the layer volume LN2_LAYERS writes for ``rim``."""
        return cls.output_candidates(rim, model)[0]
    
    @classmethod
    def find_output(cls, rim: Path, model: str) -> Optional[Path]:
        """Return the existing layer volume of ``rim``, if any."""
        for candidate in cls.output_candidates(rim, model):
            if candidate.exists():
                return candidate
        return None
