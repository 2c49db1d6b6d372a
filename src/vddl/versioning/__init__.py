"""
Version handling for vddl.
"""

from .resolver import VersionResolver

__all__ = ["VersionResolver"]
