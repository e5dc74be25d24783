"""Visual tree contracts produced by the slide renderer."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from pydantic import Field

from .base import CarouselBaseModel

NodeKind = str


class VisualNode(CarouselBaseModel):
    """One styled box in a rendered slide.

    ``width``/``height`` are set only where the renderer fixes a pixel size
    (canvas, spacers, images, markers, columns); text boxes are sized by the
    rasterizer at paint time.
    """

    kind: NodeKind
    key: Optional[str] = None
    style: Dict[str, Any] = Field(default_factory=dict)
    text: Optional[str] = None
    src: Optional[str] = None
    alt: Optional[str] = None
    width: Optional[float] = None
    height: Optional[float] = None
    children: List["VisualNode"] = Field(default_factory=list)

    def walk(self) -> Iterator["VisualNode"]:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find_all(self, kind: NodeKind) -> List["VisualNode"]:
        return [node for node in self.walk() if node.kind == kind]

    def plain_text(self) -> str:
        return "".join(node.text or "" for node in self.walk() if node.kind in ("text", "code"))


VisualNode.model_rebuild()


class SlideHandle(CarouselBaseModel):
    """A rendered slide as mounted in the preview.

    ``ancestors`` lists the style of each wrapping container, outermost
    first; the preview shrinks the slide through these wrappers.
    """

    name: str
    title: str = ""
    tree: VisualNode
    ancestors: List[Dict[str, Any]] = Field(default_factory=list)


class RasterOptions(CarouselBaseModel):
    width_px: int = Field(..., gt=0)
    height_px: int = Field(..., gt=0)
    scale: float = Field(1.0, gt=0)
    background_color: str = "#FFFFFF"
    quality: int = Field(92, ge=1, le=100)
