"""
Tideline: a deterministic turn-based fishing RPG engine.

The engine consumes an immutable content bundle and the previous snapshot and
returns a new snapshot carrying one event describing what happened.
"""

__version__ = "0.1.0"
