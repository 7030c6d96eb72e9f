"""
Artifact build orchestrator.

Turns a synthesized application into an executable (or xen image):

1. embed each filesystem mount as a generated module
2. configure and build in the descriptor's directory
3. point the stable ``mir-<name>`` symlink at the fresh executable
4. for xen, convert the compiled object into a bootable image

Steps run in that order and the first failing command aborts the rest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..config import ToolchainConfig
from ..core.models import AppConfig
from .steps import CommandRunner, Step, StepOutcome, run_steps

logger = logging.getLogger(__name__)

XEN_CONFIGURE_FLAG = "--executable-as-obj"


@dataclass
class BuildReport:
    """Outcome of an orchestrated build."""

    outcomes: list[StepOutcome] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    artifacts: list[Path] = field(default_factory=list)

    def add_skipped(self, reason: str) -> None:
        self.skipped.append(reason)


class ArtifactBuilder:
    """
    Plans and runs the build of one application.

    Usage:
        builder = ArtifactBuilder(config, tools, xen=True)
        report = builder.run(CommandRunner())
    """

    def __init__(
        self,
        config: AppConfig,
        tools: ToolchainConfig | None = None,
        xen: bool = False,
        cwd: Path | None = None,
    ):
        self.config = config
        self.tools = tools or ToolchainConfig()
        self.xen = xen
        self.cwd = (cwd or Path.cwd()).resolve()

    @property
    def build_dir(self) -> Path:
        """Where obuild puts the executable, relative to the descriptor directory."""
        return Path("dist") / "build" / self.config.name

    @property
    def executable(self) -> Path:
        return self.config.output_dir / self.build_dir / self.config.name

    @property
    def link_name(self) -> str:
        return f"mir-{self.config.name}"

    @property
    def xen_object(self) -> Path:
        return self.build_dir / f"{self.config.name}.native.obj"

    @property
    def xen_image(self) -> Path:
        return self.build_dir / f"{self.config.name}.xen"

    def crunch_steps(self) -> list[Step]:
        steps = []
        for mount in self.config.filesystem.mounts:
            module = self.config.filesystem_module_path(mount.name)
            steps.append(
                Step(
                    argv=(self.tools.crunch, "-name", mount.name, str(mount.source_path)),
                    stdout=module,
                    description=f"embed filesystem {mount.name}",
                    message=f"Creating {module}.",
                )
            )
        return steps

    def build_steps(self) -> list[Step]:
        build_cwd = self.config.output_dir if self.config.output_dir != self.cwd else None
        configure = [self.tools.obuild, "configure"]
        if self.xen:
            configure.append(XEN_CONFIGURE_FLAG)
        return [
            Step(argv=tuple(configure), cwd=build_cwd, description="configure"),
            Step(argv=(self.tools.obuild, "build"), cwd=build_cwd, description="build"),
        ]

    def link_steps(self) -> list[Step]:
        link = str(self.cwd / self.link_name)
        return [
            Step(argv=("rm", "-f", link), description="remove old link"),
            Step(
                argv=("ln", "-s", str(self.executable), link),
                description="link executable",
            ),
        ]

    def xen_steps(self, report: BuildReport | None = None) -> list[Step]:
        """
        Image conversion for xen, if the compiled object exists.

        A missing object is not an error: the step is skipped and the skip
        is logged and recorded on *report*.
        """
        obj = self.config.output_dir / self.xen_object
        if not obj.exists():
            reason = f"xen object {obj} not found, skipping image conversion"
            logger.warning(reason)
            if report is not None:
                report.add_skipped(reason)
            return []
        return [
            Step(
                argv=(
                    self.tools.mir_build,
                    "-b",
                    "xen-native",
                    "-o",
                    str(self.xen_image),
                    str(self.xen_object),
                ),
                cwd=self.config.output_dir,
                description="convert xen image",
            )
        ]

    def run(self, runner: CommandRunner) -> BuildReport:
        """
        Run crunch, build, link and (for xen) image conversion.

        Raises:
            CommandError: From the first failing command
        """
        report = BuildReport()
        for planned in (self.crunch_steps, self.build_steps, self.link_steps):
            report.outcomes.extend(run_steps(planned(), runner))
        report.artifacts.append(self.cwd / self.link_name)

        if self.xen:
            steps = self.xen_steps(report)
            report.outcomes.extend(run_steps(steps, runner))
            if steps:
                report.artifacts.append(self.config.output_dir / self.xen_image)
        return report
