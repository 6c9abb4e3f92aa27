"""Top-level chart generation: normalise, render, write and open."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from .config import DEFAULT_OUT_DIR, ChartOptions, SnapshotConfig
from .document import build_document
from .io_utils import chart_filename, open_in_viewer, save_document, save_image
from .metadata import summarize
from .processing import normalize

logger = logging.getLogger(__name__)


def generate_chart(
    data: Any,
    title: Optional[str] = None,
    chart_type: Optional[str] = None,
    x_label: Optional[str] = None,
    y_label: Optional[str] = None,
    out_dir: str = DEFAULT_OUT_DIR,
    filename: Optional[str] = None,
    open_browser: bool = True,
    snapshot: bool = False,
    snapshot_cfg: Optional[SnapshotConfig] = None,
) -> Dict[str, Any]:
    """Generate an interactive HTML chart from loosely structured data.

    Never raises: any failure is reported as ``{"success": False, "error": ...}``.
    A browser that cannot be opened does not count as a failure.
    """

    try:
        options = ChartOptions.create(
            title=title, chart_type=chart_type, x_label=x_label, y_label=y_label
        )
        observations = normalize(data)
        logger.info(
            "Rendering %s chart with %d data point(s)", options.chart_type, len(observations)
        )

        path = os.path.join(out_dir, filename or chart_filename(options.display_title))
        summary = summarize(observations, options.chart_type)
        save_document(build_document(observations, options, summary), path)
        logger.info("Chart written to %s", path)

        result: Dict[str, Any] = {
            "success": True,
            "message": "Chart generated",
            "filepath": path,
            "chart_type": options.chart_type,
            "data_points": len(observations),
            "summary": summary,
        }

        if snapshot:
            # matplotlib is only loaded when a snapshot is requested.
            from .render import render_snapshot

            image = render_snapshot(observations, options, snapshot_cfg or SnapshotConfig())
            result["snapshot_path"] = save_image(image, os.path.splitext(path)[0] + ".png")
    except Exception as exc:
        logger.error("Chart generation failed: %s", exc)
        return {"success": False, "error": str(exc)}

    if open_browser and open_in_viewer(path):
        result["message"] = "Chart generated and opened in browser"
    return result
