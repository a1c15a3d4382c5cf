"""
replcheck Command Line Interface.

Runs the range replication check against a local or external cluster.
"""

from .main import cli, main

__all__ = ["main", "cli"]
