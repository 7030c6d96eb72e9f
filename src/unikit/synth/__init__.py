"""
Source synthesis: AppConfig to ``main.ml`` and ``main.obuild``.
"""

from .fragments import render_main, render_manifest
from .generator import (
    Generator,
    GeneratorResult,
    MainModuleGenerator,
    ManifestGenerator,
    SourceSynthesizer,
)

__all__ = [
    "render_main",
    "render_manifest",
    "Generator",
    "GeneratorResult",
    "MainModuleGenerator",
    "ManifestGenerator",
    "SourceSynthesizer",
]
