"""Tests for the artifact build orchestrator's planned commands."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from unikit.config import ToolchainConfig
from unikit.core import load_app_config
from unikit.core.errors import CommandError
from unikit.pipeline import ArtifactBuilder, BuildReport, CommandRunner


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    app = tmp_path / "app"
    (app / "htdocs").mkdir(parents=True)
    (app / "www.conf").write_text("fs-static: htdocs\nmain-ip: Start\nip-use-dhcp: true\n")
    return app


@pytest.fixture
def config(app_dir: Path):
    return load_app_config(app_dir / "www.conf")


def _runner() -> CommandRunner:
    return CommandRunner(console=Console(file=io.StringIO()))


class TestPlanning:
    def test_crunch_one_step_per_mount(self, config, app_dir: Path) -> None:
        steps = ArtifactBuilder(config).crunch_steps()
        assert len(steps) == 1
        app = app_dir.resolve()
        assert steps[0].argv == ("mir-crunch", "-name", "static", str(app / "htdocs"))
        assert steps[0].stdout == app / "filesystem_static.ml"

    def test_build_runs_in_descriptor_dir(self, config, tmp_path: Path, app_dir: Path) -> None:
        steps = ArtifactBuilder(config, cwd=tmp_path).build_steps()
        assert [s.argv for s in steps] == [("obuild", "configure"), ("obuild", "build")]
        assert all(s.cwd == app_dir.resolve() for s in steps)

    def test_build_in_place_keeps_cwd(self, config, app_dir: Path) -> None:
        steps = ArtifactBuilder(config, cwd=app_dir).build_steps()
        assert all(s.cwd is None for s in steps)

    def test_xen_configure_flag(self, config) -> None:
        steps = ArtifactBuilder(config, xen=True).build_steps()
        assert steps[0].argv == ("obuild", "configure", "--executable-as-obj")

    def test_link_replaces_symlink(self, config, tmp_path: Path, app_dir: Path) -> None:
        steps = ArtifactBuilder(config, cwd=tmp_path).link_steps()
        link = str(tmp_path.resolve() / "mir-www")
        exe = str(app_dir.resolve() / "dist" / "build" / "www" / "www")
        assert [s.argv for s in steps] == [("rm", "-f", link), ("ln", "-s", exe, link)]

    def test_tool_names_from_config(self, config) -> None:
        tools = ToolchainConfig(crunch="/opt/bin/mir-crunch", obuild="ob")
        builder = ArtifactBuilder(config, tools)
        assert builder.crunch_steps()[0].program == "/opt/bin/mir-crunch"
        assert builder.build_steps()[1].argv == ("ob", "build")


class TestXenConversion:
    def test_missing_object_is_skipped(self, config, caplog: pytest.LogCaptureFixture) -> None:
        builder = ArtifactBuilder(config, xen=True)
        report = BuildReport()
        with caplog.at_level(logging.WARNING, logger="unikit.pipeline.orchestrator"):
            assert builder.xen_steps(report) == []
        assert len(report.skipped) == 1
        assert "www.native.obj" in caplog.text

    def test_present_object_is_converted(self, config, app_dir: Path) -> None:
        obj = app_dir / "dist" / "build" / "www" / "www.native.obj"
        obj.parent.mkdir(parents=True)
        obj.write_bytes(b"\x7fELF")
        steps = ArtifactBuilder(config, xen=True).xen_steps()
        assert len(steps) == 1
        assert steps[0].argv == (
            "mir-build",
            "-b",
            "xen-native",
            "-o",
            "dist/build/www/www.xen",
            "dist/build/www/www.native.obj",
        )
        assert steps[0].cwd == app_dir.resolve()


class TestRun:
    @patch("unikit.pipeline.steps.subprocess.run")
    def test_runs_all_stages_in_order(self, mock_run: MagicMock, config, tmp_path: Path) -> None:
        mock_run.return_value = MagicMock(returncode=0)
        report = ArtifactBuilder(config, cwd=tmp_path).run(_runner())
        programs = [o.step.program for o in report.outcomes]
        assert programs == ["mir-crunch", "obuild", "obuild", "rm", "ln"]
        assert report.artifacts == [tmp_path.resolve() / "mir-www"]

    @patch("unikit.pipeline.steps.subprocess.run")
    def test_xen_without_object_still_succeeds(
        self, mock_run: MagicMock, config, tmp_path: Path
    ) -> None:
        mock_run.return_value = MagicMock(returncode=0)
        report = ArtifactBuilder(config, xen=True, cwd=tmp_path).run(_runner())
        assert report.outcomes[-1].step.program == "ln"
        assert len(report.skipped) == 1

    @patch("unikit.pipeline.steps.subprocess.run")
    def test_build_failure_aborts_before_link(
        self, mock_run: MagicMock, config, tmp_path: Path
    ) -> None:
        mock_run.side_effect = [MagicMock(returncode=0), MagicMock(returncode=4)]
        with pytest.raises(CommandError) as exc_info:
            ArtifactBuilder(config, cwd=tmp_path).run(_runner())
        assert exc_info.value.exit_code == 4
        assert exc_info.value.command == "obuild configure"
        assert mock_run.call_count == 2

    @patch("unikit.pipeline.steps.subprocess.run")
    def test_each_mount_announced_before_its_crunch(
        self, mock_run: MagicMock, app_dir: Path, tmp_path: Path
    ) -> None:
        mock_run.return_value = MagicMock(returncode=0)
        (app_dir / "templates").mkdir()
        descriptor = app_dir / "site.conf"
        descriptor.write_text("fs-static: htdocs\nfs-templates: templates\nmain-ip: Start\n")
        runner = CommandRunner(console=Console(file=io.StringIO(), width=500))

        ArtifactBuilder(load_app_config(descriptor), cwd=tmp_path).run(runner)

        output = runner.console.file.getvalue()
        positions = [
            output.index("Creating"),
            output.index("mir-crunch -name static"),
            output.index("filesystem_templates.ml."),
            output.index("mir-crunch -name templates"),
        ]
        assert positions == sorted(positions)
        assert output.count("Creating") == 2
