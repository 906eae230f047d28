"""
Export writers - put an export mapping on disk.

Both writers take the mapping produced by
:func:`~luxscene.export.serializer.serialize_scene`, skip entries without
a path or body, and return the mapping unchanged. Write errors are the
native ``OSError`` and abort the remaining writes; files written before
the failure are left in place.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import BinaryIO, Mapping, Optional, Union

from ..bodies import ExportEntry
from ..utils.paths import ensure_parent

logger = logging.getLogger(__name__)

ExportMapping = Mapping[str, ExportEntry]


def export_scene(exported: ExportMapping, root: Optional[Union[str, Path]] = None) -> ExportMapping:
    """
    Write every exportable entry to its own file.

    Args:
        exported: Export mapping
        root: Directory that relative entry paths are resolved against
              (the current directory when omitted)
    """
    for entry_id, entry in exported.items():
        if not entry.exportable:
            logger.debug("Skipping %s: nothing to export", entry_id)
            continue
        target = Path(root) / entry.path if root is not None else Path(entry.path)
        logger.info("Exporting %s", target)
        ensure_parent(target).write_bytes(entry.body.as_bytes())
    return exported


def export_archived_scene(exported: ExportMapping, archive: Union[str, Path, BinaryIO]) -> ExportMapping:
    """
    Write every exportable entry into one DEFLATE-compressed zip archive.

    Entries are written in mapping order; each archive member is named
    after its entry's path.

    Args:
        exported: Export mapping
        archive: Destination path or a writable binary stream
    """
    if isinstance(archive, (str, Path)):
        archive = ensure_parent(archive)
        logger.info("Creating archive %s", archive)
    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for entry_id, entry in exported.items():
            if not entry.exportable:
                logger.debug("Skipping %s: nothing to archive", entry_id)
                continue
            logger.debug("Archiving %s as %s", entry_id, entry.path)
            zf.writestr(entry.path, entry.body.as_bytes())
    return exported
