import io
import os
from pathlib import Path
import zipfile

from keycloak_testcontainer.exceptions import ExtensionDeploymentException


MANIFEST_NAME = "META-INF/MANIFEST.MF"
_DEFAULT_MANIFEST = "Manifest-Version: 1.0\r\nCreated-By: keycloak-testcontainer\r\n\r\n"


def build_provider_jar(source_dir: str | os.PathLike) -> bytes:
    """
    Packs all files under `source_dir` into a JAR (an exploded directory import) and returns its contents.
    Entry names are relative to `source_dir`; a default manifest is added, if the directory has none.
    """
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        raise ExtensionDeploymentException(f"Extension folder '{source_dir}' is not a directory.")

    buffer = io.BytesIO()
    try:
        entries = {
            file.relative_to(source_dir).as_posix(): file
            for file in sorted(p for p in source_dir.rglob("*") if p.is_file())
        }

        with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as jar:
            # Manifest goes first, as expected by `java.util.jar.JarInputStream`
            if MANIFEST_NAME in entries:
                jar.write(entries.pop(MANIFEST_NAME), arcname=MANIFEST_NAME)
            else:
                jar.writestr(MANIFEST_NAME, _DEFAULT_MANIFEST)

            for name, file in entries.items():
                jar.write(file, arcname=name)
    except OSError as e:
        raise ExtensionDeploymentException(f"Failed to package extension folder '{source_dir}'.") from e

    return buffer.getvalue()
