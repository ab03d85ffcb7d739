"""winsweep: disk-space reclamation for Windows endpoints."""

__version__ = "0.3.0"
