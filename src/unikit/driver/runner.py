"""
Target build driver.

Plans the external command sequence for a BuildTarget and runs it:

- clean: one fixed cleanup command, whatever the platform
- unix: compile object, link against the unix runtime, move the binary
- xen: compile object, rename sections for the kernel memory layout,
  link against the xen kernel, move the compressed image and keep an
  uncompressed copy for debugging
- browser: compile to javascript with the support libraries, move the
  script and copy the HTML harness

There is no rollback: after a failure, earlier outputs stay in place.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import ToolchainConfig
from ..core.errors import TargetError
from ..pipeline.steps import CommandRunner, Step, StepOutcome, run_steps
from .target import Action, BuildMode, BuildTarget, Platform

logger = logging.getLogger(__name__)

CLEAN_PATTERNS = (
    "*.cma",
    "*.cmi",
    "*.cmx",
    "*.a",
    "*.o",
    "*.annot",
    "mirage-unix",
    "mirage-os",
    "mirage-os.gz",
    "app.js",
    "app.html",
)

EXCLUDED_DIRS = "tools,runtime,syntax"

XEN_SECTIONS = (
    (".data", ".mldata"),
    (".rodata", ".mlrodata"),
    (".text", ".mltext"),
)

BROWSER_LIBS = (
    "primitives",
    "support",
    "console_stubs",
    "clock_stubs",
    "websocket_stubs",
    "evtchn_stubs",
)


class TargetBuildDriver:
    """
    Builds or cleans one application module for one platform.

    Usage:
        target = BuildTarget.from_flags("app/main", platform="xen")
        TargetBuildDriver(target).run(CommandRunner())
    """

    def __init__(
        self,
        target: BuildTarget,
        tools: ToolchainConfig | None = None,
        cwd: Path | None = None,
    ):
        self.target = target
        self.tools = tools or ToolchainConfig()
        self.cwd = (cwd or Path.cwd()).resolve()

    @property
    def object_root(self) -> Path:
        """Where ocamlbuild leaves compiled objects."""
        return self.cwd / "_build"

    def runtime_root(self) -> Path:
        """
        Root of the runtime sources for the selected build mode.

        Raises:
            TargetError: For installed mode without ``install_root``
        """
        if self.target.mode is BuildMode.TREE:
            return self.object_root
        if self.tools.install_root is None:
            raise TargetError(
                "Installed mode needs an install root; set install_root "
                "in the [tools] table of unikit.toml"
            )
        return self.tools.install_root

    def runtime_dir(self, platform: Platform) -> Path:
        return self.runtime_root() / "runtime" / platform.value

    @property
    def output_dir(self) -> Path:
        return self.cwd / self.target.build_dir

    def _object(self, suffix: str) -> Path:
        return self.object_root / f"{self.target.module_path}{suffix}"

    def _ocamlbuild(self, *extra: str, goal: str) -> Step:
        argv = [self.tools.ocamlbuild, "-Xs", EXCLUDED_DIRS]
        if self.tools.ocamlopt:
            argv += ["-ocamlopt", self.tools.ocamlopt]
        if self.tools.ocamldep:
            argv += ["-ocamldep", self.tools.ocamldep]
        if self.tools.extra_flags:
            argv += ["-cflags", self.tools.extra_flags]
        argv += [*extra, goal]
        return Step(argv=tuple(argv), cwd=self.cwd, description="compile")

    def _make(self, app_lib: Path, directory: Path) -> Step:
        argv = [self.tools.make, f"APP_LIB={app_lib}"]
        if self.tools.cc:
            argv.append(f"CC={self.tools.cc}")
        return Step(argv=tuple(argv), cwd=directory, description="link runtime")

    # -------------------------------------------------------------------------
    # Plans
    # -------------------------------------------------------------------------

    def clean_steps(self) -> list[Step]:
        return [
            Step(
                argv=("rm", "-f", *CLEAN_PATTERNS),
                cwd=self.cwd,
                shell=True,
                description="clean",
            )
        ]

    def unix_steps(self) -> list[Step]:
        runtime = self.runtime_dir(Platform.UNIX)
        app_object = self._object(".o")
        return [
            self._ocamlbuild(goal=f"{self.target.module_path}.o"),
            self._make(app_object, runtime / "main"),
            Step(
                argv=("mv", str(runtime / "main" / "app"), str(self.output_dir / "mirage-unix")),
                description="install binary",
            ),
        ]

    def xen_steps(self) -> list[Step]:
        runtime = self.runtime_dir(Platform.XEN)
        app_object = self._object(".o")
        xen_object = self._object("-xen.o")
        renames: list[str] = []
        for section, renamed in XEN_SECTIONS:
            renames += ["--rename-section", f"{section}={renamed}"]
        kernel_gz = self.output_dir / "mirage-os.gz"
        return [
            self._ocamlbuild(goal=f"{self.target.module_path}.o"),
            Step(
                argv=(self.tools.objcopy, *renames, str(app_object), str(xen_object)),
                description="relocate sections",
            ),
            self._make(xen_object, runtime / "kernel"),
            Step(
                argv=("mv", str(runtime / "kernel" / "obj" / "mirage-os.gz"), str(kernel_gz)),
                description="install kernel",
            ),
            Step(
                argv=("zcat", str(kernel_gz)),
                stdout=self.output_dir / "mirage-os",
                description="uncompressed kernel",
            ),
        ]

    def browser_steps(self) -> list[Step]:
        runtime = self.runtime_dir(Platform.BROWSER)
        cclibs: list[str] = []
        for lib in BROWSER_LIBS:
            cclibs += ["-cclib", str(runtime / f"{lib}.js")]
        return [
            self._ocamlbuild(*cclibs, goal=f"{self.target.module_path}.js"),
            Step(
                argv=("mv", str(self.cwd / f"{self.target.module_path}.js"), str(self.output_dir)),
                description="install script",
            ),
            Step(
                argv=("cp", str(runtime / "app.html"), str(self.output_dir)),
                description="install html harness",
            ),
        ]

    def plan(self) -> list[Step]:
        """Return the ordered steps for the target, without running anything."""
        if self.target.action is Action.CLEAN:
            return self.clean_steps()

        planners = {
            Platform.UNIX: self.unix_steps,
            Platform.XEN: self.xen_steps,
            Platform.BROWSER: self.browser_steps,
        }
        return planners[self.target.platform]()

    def run(self, runner: CommandRunner) -> list[StepOutcome]:
        """
        Plan and execute.

        Raises:
            TargetError: If the plan cannot be made
            CommandError: From the first failing command
        """
        steps = self.plan()
        logger.debug(
            "%s %s for %s (%s mode, %s network): %d steps",
            self.target.action.value,
            self.target.module_path,
            self.target.platform.value,
            self.target.mode.value,
            self.target.network.value,
            len(steps),
        )
        return run_steps(steps, runner)
