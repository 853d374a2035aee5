"""
Packaging of function sources into deployable archives.
"""
import logging
import os
import shutil
import tempfile
import zipfile
from abc import ABC, abstractmethod
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from lambda_uploader.errors import PackagingError
from lambda_uploader.futures import default_executor

logger = logging.getLogger(__name__)

EXCLUDED_DIRECTORIES = {'__pycache__', '.git', '.pytest_cache'}
EXCLUDED_SUFFIXES = {'.pyc'}


@dataclass(frozen=True)
class Artifact:
    """A packaged, deployable archive."""

    location: Path


class Packager(ABC):
    """Turns a function source into a deployable archive."""

    @abstractmethod
    def create_package(self, module: Union[str, Path], source_file: Union[str, Path]) -> "Future[Artifact]":
        """
        Build the archive of a function.

        Args:
            module: Root of the function sources
            source_file: File holding the function handler

        Returns:
            Future resolving to the built artifact
        """

    @abstractmethod
    def supports_runtime(self, runtime: Optional[str]) -> bool:
        """Whether functions of ``runtime`` can be packaged."""

    def release(self, artifact: Artifact) -> None:
        """Discard a built artifact once it is no longer needed."""


class ZipPackager(Packager):
    """
    Zips a source directory into ``<directory-name>.zip``.

    Archives are written to a fresh temporary directory under ``build_dir`` (or the
    system temporary directory), so concurrent packaging never shares an output file.
    The directory is removed by ``release`` or when packaging fails.
    """

    SUPPORTED_RUNTIME_PREFIXES: Tuple[str, ...] = ('python', 'nodejs', 'ruby', 'java')

    def __init__(self, build_dir: Optional[Union[str, Path]] = None, executor: Optional[Executor] = None):
        self.build_dir = Path(build_dir) if build_dir else None
        self.executor = executor or default_executor()

    def supports_runtime(self, runtime: Optional[str]) -> bool:
        return bool(runtime) and runtime.startswith(self.SUPPORTED_RUNTIME_PREFIXES)

    def _zip_directory(self, module: Path, source_file: Path) -> Artifact:
        if not module.is_dir():
            raise PackagingError(f"Source directory {module} does not exist")

        handler_file = source_file if source_file.is_absolute() else module / source_file
        try:
            handler_file.resolve().relative_to(module.resolve())
        except ValueError:
            raise PackagingError(f"Source file {source_file} is not inside {module}") from None
        if not handler_file.is_file():
            raise PackagingError(f"Source file {handler_file} does not exist")

        if self.build_dir:
            self.build_dir.mkdir(parents=True, exist_ok=True)
        output_dir = Path(tempfile.mkdtemp(prefix='lambda-package-', dir=self.build_dir))
        archive = output_dir / f"{module.resolve().name}.zip"

        try:
            with zipfile.ZipFile(archive, 'w', zipfile.ZIP_DEFLATED) as zip_file:
                for root, dirs, files in os.walk(module):
                    dirs[:] = sorted(d for d in dirs if d not in EXCLUDED_DIRECTORIES)
                    for name in sorted(files):
                        file_path = Path(root) / name
                        if file_path.suffix in EXCLUDED_SUFFIXES:
                            continue
                        zip_file.write(file_path, file_path.relative_to(module))
        except OSError as e:
            logger.error(f"Error packaging {module}: {e}")
            shutil.rmtree(output_dir, ignore_errors=True)
            raise PackagingError(f"Failed to package {module}: {e}") from e

        logger.info(f"Created package {archive}")
        return Artifact(location=archive)

    def release(self, artifact: Artifact) -> None:
        output_dir = artifact.location.parent
        try:
            shutil.rmtree(output_dir)
        except OSError as e:
            logger.warning(f"Could not remove package directory {output_dir}: {e}")
        else:
            logger.debug(f"Removed package directory {output_dir}")

    def create_package(self, module: Union[str, Path], source_file: Union[str, Path]) -> "Future[Artifact]":
        return self.executor.submit(self._zip_directory, Path(module), Path(source_file))
