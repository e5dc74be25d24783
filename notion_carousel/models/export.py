"""Export result contracts."""

from __future__ import annotations

from typing import Any, List

from pydantic import Field

from .base import CarouselBaseModel


class ExportedSlide(CarouselBaseModel):
    index: int
    filename: str
    data: bytes

    def to_dict(self) -> dict[str, Any]:
        # bytes are not JSON friendly; report the size instead
        return {"index": self.index, "filename": self.filename, "size": len(self.data)}


class ExportReport(CarouselBaseModel):
    """Outcome of a completed batch; a failed batch raises ``ExportFailure`` instead."""

    total: int
    exported: List[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return len(self.exported) == self.total
