"""Manage stacked Git branches with plain Git: stacking, syncing, retargeting and graphing."""

__version__ = "0.1.0"
__all__ = ["__version__"]