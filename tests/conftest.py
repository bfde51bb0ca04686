"""Shared fixtures for the test suite."""

import subprocess
from pathlib import Path

import nibabel as nib
import numpy as np
import pytest

from fs2laynii.pipeline.params import resolve_parameters
from fs2laynii.pipeline.paths import SubjectContext

GRID = 12

# Nested cubes: csf_outer contains gm_outer contains gm_inner contains wm_boundary
MASK_HALF_WIDTHS = {
    "csf_outer": 5,
    "gm_outer": 4,
    "gm_inner": 3,
    "wm_boundary": 2,
}


def cube_mask(half_width, n=GRID):
    """Binary cube of the given half width centred in an n^3 grid."""
    mask = np.zeros((n, n, n), dtype=np.uint8)
    c = n // 2
    mask[c - half_width:c + half_width, c - half_width:c + half_width, c - half_width:c + half_width] = 1
    return mask


def save_volume(path, data, affine=None):
    img = nib.Nifti1Image(np.asarray(data), np.eye(4) if affine is None else affine)
    nib.save(img, str(path))
    return Path(path)


def load_volume(path):
    return np.asanyarray(nib.load(str(path)).dataobj)


class FakeRunner:
    """Stands in for launch_command.
    
    Records every command and writes plausible outputs: bytes for surfaces
    and the reference volume, NIfTI masks for mris_fill and an empty layer
    file for LN2_LAYERS.
    """
    
    def __init__(self, fail_on=(), silent_on=()):
        self.calls = []
        self.fail_on = set(fail_on)
        # tools that exit 0 without writing anything
        self.silent_on = set(silent_on)
    
    def tools(self):
        return [Path(cmd[0]).name for cmd, _ in self.calls]
    
    def count(self, tool):
        return self.tools().count(tool)
    
    def __call__(self, cmd, env=None):
        self.calls.append((list(cmd), env))
        tool = Path(cmd[0]).name
        if tool in self.fail_on:
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr=f"{tool}: boom\n")
        if tool in self.silent_on:
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")
        
        if tool == "mri_convert":
            Path(cmd[2]).write_bytes(b"upsampled " + Path(cmd[1]).read_bytes())
        elif tool == "mris_expand":
            source, displacement, output = cmd[-3], cmd[-2], cmd[-1]
            Path(output).write_bytes(Path(source).read_bytes() + f" expanded {displacement}".encode())
        elif tool == "mris_fill":
            surface, output = Path(cmd[-2]), cmd[-1]
            role = surface.name.split(".", 1)[1]
            save_volume(output, cube_mask(MASK_HALF_WIDTHS[role]))
        elif tool == "LN2_LAYERS":
            from fs2laynii.tools.ln2_layers import Ln2LayersTool
            model = "equivolume" if "-equivol" in cmd else "equidistant"
            Ln2LayersTool.output_path(Path(cmd[cmd.index("-rim") + 1]), model).write_bytes(b"layers")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")


@pytest.fixture
def subjects_dir(tmp_path):
    """A Freesurfer subjects directory with one minimal subject."""
    root = tmp_path / "subjects"
    subject = root / "sub-01"
    (subject / "mri").mkdir(parents=True)
    (subject / "surf").mkdir()
    (subject / "mri" / "brain.finalsurfs.mgz").write_bytes(b"brain")
    for hemi in ("lh", "rh"):
        (subject / "surf" / f"{hemi}.white").write_bytes(f"{hemi} white surface".encode())
        (subject / "surf" / f"{hemi}.pial").write_bytes(f"{hemi} pial surface".encode())
    return root


@pytest.fixture
def ctx(subjects_dir):
    context = SubjectContext(subjects_dir, "sub-01")
    context.work_dir.mkdir()
    return context


@pytest.fixture
def params():
    return resolve_parameters()


@pytest.fixture
def runner():
    return FakeRunner()
