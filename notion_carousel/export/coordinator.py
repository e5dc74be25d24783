"""Sequential slide export."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Protocol, Sequence

from ..errors import ExportFailure
from ..models.export import ExportedSlide, ExportReport
from ..models.visual import RasterOptions, SlideHandle

logger = logging.getLogger(__name__)

# Ancestor style keys that belong to the preview's shrink-to-fit wrappers.
PREVIEW_ONLY_KEYS = frozenset(
    {"transform", "transform_origin", "scale", "width", "height", "max_width", "max_height", "overflow"}
)


class Rasterizer(Protocol):
    async def rasterize(self, handle: SlideHandle, options: RasterOptions) -> bytes: ...


def export_filename(index: int, extension: str = "jpg") -> str:
    """1-based, zero padded: 0 -> ``01.jpg``."""
    return f"{index + 1:02d}.{extension}"


def export_override(handle: SlideHandle, options: RasterOptions) -> SlideHandle:
    """Return a copy of ``handle`` laid out for export instead of preview."""
    root_style: Dict[str, Any] = dict(handle.tree.style)
    root_style.update(
        {
            "transform": "none",
            "background_color": options.background_color,
        }
    )
    tree = handle.tree.model_copy(
        update={"style": root_style, "width": options.width_px, "height": options.height_px}
    )
    ancestors = [
        {key: value for key, value in style.items() if key not in PREVIEW_ONLY_KEYS}
        for style in handle.ancestors
    ]
    return handle.model_copy(update={"tree": tree, "ancestors": ancestors})


async def export_all(
    handles: Sequence[SlideHandle],
    rasterizer: Rasterizer,
    options: RasterOptions,
    deliver: Optional[Callable[[ExportedSlide], None]] = None,
    on_progress: Optional[Callable[[int, int], None]] = None,
    extension: str = "jpg",
) -> ExportReport:
    """Rasterize every slide in order, delivering each as soon as it is ready.

    The first failure aborts the batch: slides already delivered stay
    delivered and ``ExportFailure`` reports how many there were.
    """
    report = ExportReport(total=len(handles))
    for index, handle in enumerate(handles):
        if on_progress is not None:
            on_progress(index + 1, len(handles))
        try:
            data = await rasterizer.rasterize(export_override(handle, options), options)
        except Exception as exc:
            logger.error("Rasterizing slide %d failed: %s", index + 1, exc)
            raise ExportFailure(index, len(report.exported), exc) from exc
        slide = ExportedSlide(index=index, filename=export_filename(index, extension), data=data)
        report.exported.append(slide.filename)
        if deliver is not None:
            deliver(slide)
    return report
