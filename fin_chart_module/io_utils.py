"""I/O utilities for persisting chart artifacts and opening them."""
from __future__ import annotations

import logging
import os
import re
import time
import webbrowser
from pathlib import Path
from typing import Optional

from PIL import Image

from .errors import ArtifactWriteError, ViewerLaunchError

logger = logging.getLogger(__name__)

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def chart_filename(title: Optional[str], extension: str = "html", timestamp_ms: Optional[int] = None) -> str:
    """Build ``<slug>_<epoch ms>.<extension>`` from the chart title."""

    slug = _SLUG_PATTERN.sub("_", (title or "chart").lower())[:30]
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{slug}_{timestamp_ms}.{extension}"


def ensure_outdir(out_dir: str) -> str:
    """Create the output directory if it does not exist."""

    try:
        os.makedirs(out_dir, exist_ok=True)
    except OSError as exc:
        raise ArtifactWriteError(f"Cannot create output directory {out_dir!r}: {exc}") from exc
    return out_dir


def save_document(html: str, path: str) -> str:
    """Write the HTML document to disk as UTF-8."""

    ensure_outdir(os.path.dirname(path) or ".")
    try:
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(html)
    except OSError as exc:
        raise ArtifactWriteError(f"Failed to write chart to {path!r}: {exc}") from exc
    return path


def save_image(image: Image.Image, path: str) -> str:
    """Persist the PIL image to disk as PNG."""

    ensure_outdir(os.path.dirname(path) or ".")
    try:
        image.save(path, format="PNG")
    except OSError as exc:
        raise ArtifactWriteError(f"Failed to write snapshot to {path!r}: {exc}") from exc
    return path


def _launch(path: str) -> None:
    try:
        url = Path(path).resolve().as_uri()
        opened = webbrowser.open(url)
    except Exception as exc:
        raise ViewerLaunchError(f"Could not open {path}: {exc}") from exc
    if not opened:
        raise ViewerLaunchError(f"No browser available to open {url}")


def open_in_viewer(path: str) -> bool:
    """Open the artifact in the default browser; failures are logged, never raised."""

    try:
        _launch(path)
    except ViewerLaunchError as exc:
        logger.warning("%s", exc)
        return False
    logger.info("Opened %s in browser", path)
    return True
