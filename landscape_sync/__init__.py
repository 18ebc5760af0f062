"""Reconcile DevStats projects.yaml against the CNCF landscape.yml."""

__version__ = "0.1.0"
