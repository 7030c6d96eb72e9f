"""
External command pipelines.

Steps are plain descriptions; CommandRunner executes them in order and
aborts on the first non-zero exit.
"""

from .orchestrator import ArtifactBuilder, BuildReport
from .steps import CommandRunner, Step, StepOutcome, run_steps

__all__ = [
    "ArtifactBuilder",
    "BuildReport",
    "CommandRunner",
    "Step",
    "StepOutcome",
    "run_steps",
]
