"""Report persistence — one atomic write of ``report.json`` per run."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from uxa.errors import PersistenceFailed
from uxa.schemas.report import AuditReport

logger = logging.getLogger(__name__)

REPORT_FILENAME = "report.json"


def write_report(report: AuditReport, out_dir: Path) -> Path:
    """Write ``report`` to ``out_dir/report.json`` and return the path.

    The JSON is written to a temporary sibling and renamed into place, so a
    failed write never leaves a partial ``report.json``.  An existing report
    is never overwritten.
    """
    out_dir = Path(out_dir)
    path = out_dir / REPORT_FILENAME
    tmp_path = out_dir / f".{REPORT_FILENAME}.tmp"

    if path.exists():
        raise PersistenceFailed(f"Refusing to overwrite existing report: {path}")

    try:
        with open(tmp_path, "w", encoding="utf-8") as fh:
            fh.write(report.to_json())
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise PersistenceFailed(f"Could not write {path}: {exc}") from exc

    logger.info("Report written to %s", path)
    return path
