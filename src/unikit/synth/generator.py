"""
Generators that write the synthesized sources to disk.

- MainModuleGenerator writes ``main.ml``, keeping the previous version as
  ``main.ml.save``.
- ManifestGenerator writes ``main.obuild``, overwriting it.
- SourceSynthesizer runs both.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from ..core.models import BACKUP_SUFFIX, AppConfig
from .fragments import render_main, render_manifest

logger = logging.getLogger(__name__)


@dataclass
class GeneratorResult:
    """
    Result from a generator execution.

    Attributes:
        files_created: Files that were written
        backups: Previous versions that were renamed out of the way
        warnings: Anything worth telling the user
    """

    files_created: list[Path] = field(default_factory=list)
    backups: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_file(self, path: Path, content: str | None = None) -> None:
        """
        Record a file that was created.

        If content is provided, the file is also written to disk.
        """
        if content is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        self.files_created.append(path)

    def add_backup(self, path: Path) -> None:
        self.backups.append(path)

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def merge(self, other: GeneratorResult) -> None:
        """Merge another result into this one."""
        self.files_created.extend(other.files_created)
        self.backups.extend(other.backups)
        self.warnings.extend(other.warnings)


class Generator(ABC):
    """Base class for generators of one output file."""

    def __init__(self, config: AppConfig):
        self.config = config

    @abstractmethod
    def generate(self) -> GeneratorResult:
        pass


def backup_path(path: Path) -> Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


class MainModuleGenerator(Generator):
    """Writes the entry-point module."""

    def generate(self) -> GeneratorResult:
        result = GeneratorResult()
        target = self.config.main_path
        if target.exists():
            backup = backup_path(target)
            target.replace(backup)
            result.add_backup(backup)
            logger.debug("Saved previous %s as %s", target.name, backup.name)
        result.add_file(target, render_main(self.config))
        return result


class ManifestGenerator(Generator):
    """Writes the build manifest."""

    def generate(self) -> GeneratorResult:
        result = GeneratorResult()
        content = render_manifest(self.config.name, self.config.dependencies)
        result.add_file(self.config.manifest_path, content)
        return result


class SourceSynthesizer(Generator):
    """Generates every source file for an application."""

    def get_generators(self) -> list[Generator]:
        return [
            MainModuleGenerator(self.config),
            ManifestGenerator(self.config),
        ]

    def generate(self) -> GeneratorResult:
        combined = GeneratorResult()
        if self.config.entry_point.kind == "http" and self.config.http is None:
            combined.add_warning(
                "main-http is used without http-port/http-address; "
                "the generated module will not compile"
            )
        for generator in self.get_generators():
            combined.merge(generator.generate())
        return combined
