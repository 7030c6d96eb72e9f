"""
Target build driver: platform-specific compile, link and package pipelines.
"""

from .runner import CLEAN_PATTERNS, TargetBuildDriver
from .target import Action, BuildMode, BuildTarget, NetworkMode, Platform, parse_choice

__all__ = [
    "CLEAN_PATTERNS",
    "TargetBuildDriver",
    "Action",
    "BuildMode",
    "BuildTarget",
    "NetworkMode",
    "Platform",
    "parse_choice",
]
