"""Bundle exported slide images into a PPTX deck."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Sequence

from pptx import Presentation
from pptx.oxml.ns import qn
from pptx.util import Emu

from ..models.export import ExportedSlide

EMU_PER_PX = 9525
BLANK_LAYOUT_INDEX = 6


def px_to_emu(pixels: float) -> Emu:
    return Emu(int(round(pixels * EMU_PER_PX)))


def build_deck(
    slides: Sequence[ExportedSlide], width_px: int, height_px: int, output_path: Path
) -> Path:
    """Write one full-bleed picture slide per exported image, in order."""
    prs = Presentation()
    prs.slide_width = px_to_emu(width_px)
    prs.slide_height = px_to_emu(height_px)
    layout = prs.slide_layouts[BLANK_LAYOUT_INDEX]

    for slide_image in sorted(slides, key=lambda item: item.index):
        slide = prs.slides.add_slide(layout)
        picture = slide.shapes.add_picture(
            io.BytesIO(slide_image.data),
            0,
            0,
            width=prs.slide_width,
            height=prs.slide_height,
        )
        _set_alt_text(picture, slide_image.filename)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    prs.save(str(output_path))
    return output_path


def _set_alt_text(shape, text: str) -> None:
    nvPicPr = shape.element.find(qn("p:nvPicPr"))
    if nvPicPr is not None:
        cNvPr = nvPicPr.find(qn("p:cNvPr"))
        if cNvPr is not None:
            cNvPr.set("descr", text)
