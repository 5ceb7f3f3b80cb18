from pathlib import Path
import shutil
import tempfile

from keycloak_testcontainer.util.logging import log


class StagingDirectory:
    """
    Host-side temporary directory for files, which are used by clients of a container
    and must be passed by path (e.g. CA bundles).
    """
    def __init__(self, prefix: str = "keycloak-"):
        self._prefix = prefix
        self._path: Path | None = None

    @property
    def path(self) -> Path:
        """ Staging directory path; the directory is created on first access. """
        if self._path is None:
            self._path = Path(tempfile.mkdtemp(prefix=self._prefix))
            log(f"Created staging directory '{self._path}'.")
        return self._path

    def cleanup(self) -> None:
        """ Removes the staging directory with its contents. """
        if self._path is not None:
            shutil.rmtree(self._path, ignore_errors=True)
            self._path = None
