"""Freesurfer surfaces to LayNii rim volumes."""

__version__ = "1.0.0"
