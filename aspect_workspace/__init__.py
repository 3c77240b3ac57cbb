# Aspect Model Workspace Backend
"""
Aspect Model Workspace Backend

This package manages a workspace of Aspect Model files (RDF/Turtle) laid out
as ``<namespace>/<version>/<file>.ttl``. Locations are always derived from the
semantic identity inside a model, never from where a file came from.

Architecture:
- Import/Export: ZIP packages with zip-slip-safe extraction
- Migration: workspace-wide meta-model upgrade with optional version bump
- Backup: timestamped workspace snapshots
- Store: single-file CRUD on the workspace
"""

__version__ = "1.0.0"
