"""Default values for fs2laynii."""

DEFAULT_RESOLUTION = 0.3
DEFAULT_EXPAND = 0.3
DEFAULT_SHRINK = -0.3
DEFAULT_N_LAYERS = 11
DEFAULT_MODEL = "equivolume"
DEFAULT_METRIC = "distance"
DEFAULT_ARITHMETIC = "numpy"

# Thickness mode places the inner boundaries one tenth closer to the source
INWARD_DELTA = "0.1"

# Working directory created inside each subject
WORK_DIRNAME = "laynii"

# Freesurfer inputs
REFERENCE_SOURCE = "brain.finalsurfs.mgz"
PIAL_CANDIDATES = ("pial.T2", "pial.T1", "pial")

# External executables, overridable with FS2LAYNII_<NAME>
DEFAULT_EXECUTABLES = {
    "mri_convert": "mri_convert",
    "mris_expand": "mris_expand",
    "mris_fill": "mris_fill",
    "fscalc": "fscalc",
    "ln2_layers": "LN2_LAYERS",
}
