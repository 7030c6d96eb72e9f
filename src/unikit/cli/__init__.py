"""
unikit command line tools.

- synth.py: ``unikit``, descriptor to generated sources and build
- target.py: ``unikit-target``, platform build driver
- utils.py: shared helpers
"""

from unikit.cli.synth import app as synth_app
from unikit.cli.target import app as target_app
from unikit.cli.utils import version_callback

__all__ = [
    "synth_app",
    "target_app",
    "version_callback",
]
