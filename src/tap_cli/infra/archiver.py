"""Infrastructure: packing the working directory for ``application push``.

Rules
-----
* The archive is a gzip tarball with member names relative to the
  packed folder; symlinks are stored as links, not followed.
* ``run.sh`` must exist at the folder root.
* No ``print()``; progress goes to the logger.
"""

from __future__ import annotations

import logging
import os
import tarfile
import tempfile
from pathlib import Path

from tap_cli.exceptions import ArchiveError

RUN_SCRIPT = "run.sh"


def create_application_archive(
    folder: Path, logger: logging.Logger | None = None,
) -> Path:
    """Pack *folder* into a temporary ``.tar.gz`` and return its path.

    The caller owns the returned file and must delete it.

    Raises
    ------
    ArchiveError
        If ``run.sh`` is missing or the archive cannot be written.
    """
    log = logger or logging.getLogger(__name__)
    folder = folder.resolve()

    if not (folder / RUN_SCRIPT).is_file():
        raise ArchiveError(
            f"{RUN_SCRIPT} does not exist",
            hint=(
                "Create a script with commands how to install required "
                "dependencies offline and run your application."
            ),
        )

    fd, archive_name = tempfile.mkstemp(prefix="blob", suffix=".tar.gz")
    os.close(fd)
    archive_path = Path(archive_name)

    try:
        with tarfile.open(archive_path, "w:gz") as tar:
            for root, dirs, files in os.walk(folder):
                dirs.sort()
                for name in [*dirs, *sorted(files)]:
                    path = Path(root) / name
                    relative = path.relative_to(folder).as_posix()
                    tar.add(path, arcname=relative, recursive=False)
                    log.info("Added to archive: %s", relative)
    except OSError as exc:
        archive_path.unlink(missing_ok=True)
        raise ArchiveError(f"cannot create application archive: {exc}") from exc

    return archive_path
