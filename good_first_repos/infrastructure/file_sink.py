"""File system implementation of the artifact sink."""
import logging
import os
from pathlib import Path
from typing import Union
from good_first_repos.domain.errors import ConfigurationError
from good_first_repos.domain.sink_interface import IArtifactSink


logger = logging.getLogger(__name__)


class FileArtifactSink(IArtifactSink):
    """Writes the generated JavaScript module to a file.

    Parent directories are created on demand; the file is replaced as a whole.
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize the sink.

        Args:
            path: Destination file, e.g. frontend/src/generated/data.js
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Destination file."""
        return self._path

    def ensure_writable(self) -> None:
        """Create the parent directories and confirm the file can be written.

        An existing file is left untouched; nothing is created at the
        destination itself.

        Raises:
            ConfigurationError: When the destination is not writable
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"Cannot create output directory {self._path.parent}: {e}") from e

        if self._path.is_dir():
            raise ConfigurationError(f"Output path {self._path} is a directory")
        if self._path.exists():
            writable = os.access(self._path, os.W_OK)
        else:
            writable = os.access(self._path.parent, os.W_OK | os.X_OK)
        if not writable:
            raise ConfigurationError(f"Output path {self._path} is not writable")

    def write(self, text: str) -> None:
        """Write the text as UTF-8, replacing any previous contents."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(text, encoding="utf-8")
        except OSError as e:
            logger.error(f"Error writing {self._path}: {e}")
            raise
        logger.info(f"Wrote {len(text)} characters to {self._path}")
