"""Package the composition source into a servable bundle."""

import hashlib
import logging
import os
import shutil
import uuid
from pathlib import Path

from ayahrender.models.errors import BundleError
from ayahrender.models.render import Bundle

logger = logging.getLogger(__name__)


def source_digest(source_dir: Path) -> str:
    """Hash of every file's relative path and contents under source_dir."""
    digest = hashlib.sha256()
    for path in sorted(p for p in source_dir.rglob("*") if p.is_file()):
        digest.update(path.relative_to(source_dir).as_posix().encode())
        digest.update(b"\0")
        digest.update(path.read_bytes())
    return digest.hexdigest()[:16]


def bundle_source(entry: Path, out_dir: Path) -> Bundle:
    """Copy the directory holding entry into out_dir/<digest>.

    A bundle with the same digest is reused. New bundles are staged under a
    unique name and renamed into place so concurrent requests never see a
    partial copy.
    """
    if not entry.is_file():
        raise BundleError(
            f"Composition entry not found: {entry}",
            details={"entry": str(entry)},
        )
    source_dir = entry.parent
    try:
        digest = source_digest(source_dir)
        target = out_dir / digest
        if not target.is_dir():
            out_dir.mkdir(parents=True, exist_ok=True)
            staging = out_dir / f".staging-{uuid.uuid4().hex}"
            shutil.copytree(source_dir, staging)
            try:
                os.replace(staging, target)
            except OSError:
                # another request finished the same bundle first
                shutil.rmtree(staging, ignore_errors=True)
                if not target.is_dir():
                    raise
            logger.info("Bundled %s into %s", source_dir, target)
    except OSError as e:
        raise BundleError(
            f"Failed to bundle compositions: {e}",
            details={"entry": str(entry), "out_dir": str(out_dir)},
        )
    return Bundle(root=target, entry=target / entry.name)
