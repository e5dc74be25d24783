"""Error types surfaced to callers."""

from __future__ import annotations

from typing import Optional


class CarouselError(Exception):
    """Base class for recoverable pipeline errors."""


class InvalidReference(CarouselError):
    """A page/database reference could not be resolved to an identifier."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"Invalid page ID or URL: {reference!r}")
        self.reference = reference


class SourceUnavailable(CarouselError):
    """Fetching from the content source failed (network, auth or source side)."""

    def __init__(
        self, message: str, status: Optional[int] = None, code: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code


class ExportFailure(CarouselError):
    """Rasterizing one slide failed; the remaining batch was abandoned."""

    def __init__(self, slide_index: int, exported_count: int, cause: BaseException) -> None:
        super().__init__(
            f"Export failed on slide {slide_index + 1} "
            f"after {exported_count} exported: {cause}"
        )
        self.slide_index = slide_index
        self.exported_count = exported_count
        self.cause = cause
