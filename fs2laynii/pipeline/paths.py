"""Subject context and deterministic artifact naming."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from fs2laynii.utils.defaults import PIAL_CANDIDATES, REFERENCE_SOURCE, WORK_DIRNAME

HEMISPHERES = ("lh", "rh")
BOTH = "both"

CSF_OUTER = "csf_outer"
GM_OUTER = "gm_outer"
WM_BOUNDARY = "wm_boundary"
GM_INNER = "gm_inner"
SURFACE_ROLES = (CSF_OUTER, GM_OUTER, WM_BOUNDARY, GM_INNER)

CSF = "csf"
WM = "wm"
GM = "gm"
TISSUES = (CSF, WM, GM)


@dataclass(frozen=True)
class SubjectContext:
    """Where a subject's inputs live and where its artifacts go.
    
    Every artifact path is derived from the subjects root, the subject id,
    the hemisphere and the role; the existence of that path is the cache
    entry for the stage that produces it.
    """
    subjects_dir: Path
    subject: str
    
    def __post_init__(self):
        object.__setattr__(self, "subjects_dir", Path(self.subjects_dir))
    
    @property
    def subject_dir(self) -> Path:
        return self.subjects_dir / self.subject
    
    @property
    def mri_dir(self) -> Path:
        return self.subject_dir / "mri"
    
    @property
    def surf_dir(self) -> Path:
        return self.subject_dir / "surf"
    
    @property
    def work_dir(self) -> Path:
        return self.subject_dir / WORK_DIRNAME
    
    # Freesurfer inputs
    
    @property
    def reference_source(self) -> Path:
        return self.mri_dir / REFERENCE_SOURCE
    
    def white(self, hemi: str) -> Path:
        return self.surf_dir / f"{hemi}.white"
    
    def pial_candidates(self, hemi: str):
        return [self.surf_dir / f"{hemi}.{name}" for name in PIAL_CANDIDATES]
    
    # Artifacts
    
    def reference_volume(self, resolution: float) -> Path:
        return self.work_dir / f"brain.finalsurfs.{resolution:g}mm.nii.gz"
    
    def surface(self, hemi: str, role: str) -> Path:
        return self.work_dir / f"{hemi}.{role}"
    
    def filled(self, hemi: str, role: str) -> Path:
        return self.work_dir / f"{hemi}.{role}.filled.nii.gz"
    
    def label(self, hemi: str, tissue: str) -> Path:
        return self.work_dir / f"{hemi}.{tissue}.nii.gz"
    
    def rim(self, hemi: str) -> Path:
        return self.work_dir / f"{hemi}.rim.nii.gz"
    
    def tool_environment(self, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Environment for one external invocation, with SUBJECTS_DIR set.
        
        The process environment itself is left untouched.
        """
        env = dict(os.environ if base is None else base)
        env["SUBJECTS_DIR"] = str(self.subjects_dir)
        return env
