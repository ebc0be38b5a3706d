"""Export file writing and archive bundling for download mode."""

import importlib.util
import logging
import os
import tarfile
from datetime import date
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "crossref"

# compression -> module tarfile needs for it
COMPRESSION_MODULES = {"gz": "zlib", "bz2": "bz2", "xz": "lzma"}


class ConfigurationError(Exception):
    """Raised when exports cannot be archived with the current setup."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def _anonymize(info: tarfile.TarInfo) -> tarfile.TarInfo:
    info.uid = info.gid = 0
    info.uname = info.gname = "root"
    return info


class ExportArchiver:
    """Write export files and bundle them into one compressed archive.

    Attributes:
        export_dir: Directory export files and archives are written to
        compression: tarfile compression ("gz", "bz2" or "xz")
        prefix: File name prefix
    """

    def __init__(
        self,
        export_dir: Path,
        compression: str = "gz",
        prefix: str = DEFAULT_PREFIX,
    ):
        self.export_dir = export_dir
        self.compression = compression
        self.prefix = prefix

    def check_available(self) -> None:
        """Verify that archives can be written.

        Raises:
            ConfigurationError: If the compression is unsupported by this
                interpreter or the export directory is not writable
        """
        module = COMPRESSION_MODULES.get(self.compression)
        if module is None:
            raise ConfigurationError(f"Unknown archive compression: {self.compression}")
        if importlib.util.find_spec(module) is None:
            raise ConfigurationError(
                f"Archive compression {self.compression} needs the {module} module, "
                "which is not available"
            )

        try:
            self.export_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot create export directory {self.export_dir}: {e}"
            ) from e
        if not os.access(self.export_dir, os.W_OK):
            raise ConfigurationError(f"Export directory {self.export_dir} is not writable")

    def export_path(
        self,
        objects_part: str,
        object_id: str,
        extension: str = ".xml",
        export_date: date | None = None,
    ) -> Path:
        """Path of an export file, e.g. crossref-19-10-2026-monograph-17.xml."""
        export_date = export_date or date.today()
        name = f"{self.prefix}-{export_date:%d-%m-%Y}-{objects_part}-{object_id}{extension}"
        return self.export_dir / name

    def archive_path(self, context_id: str, export_date: date | None = None) -> Path:
        """Path of the archive bundling several monograph exports."""
        return self.export_path(
            "monographs",
            context_id,
            extension=f".tar.{self.compression}",
            export_date=export_date,
        )

    def write(self, path: Path, content: bytes) -> Path:
        """Write one export file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        logger.debug(f"Wrote export file {path}")
        return path

    def bundle(self, target: Path, files: list[Path]) -> Path:
        """Bundle files into a compressed tar archive.

        Members are stored under their base names only, owned by root.

        Args:
            target: Archive path to create
            files: Files to include

        Returns:
            The archive path
        """
        with tarfile.open(target, f"w:{self.compression}") as tar:
            for path in files:
                tar.add(path, arcname=path.name, filter=_anonymize)
        logger.info(f"Bundled {len(files)} export files into {target}")
        return target

    def delete(self, path: Path) -> None:
        """Remove an export file if it exists."""
        path.unlink(missing_ok=True)
        logger.debug(f"Removed export file {path}")
