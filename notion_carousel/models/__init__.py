"""Pydantic models for notion-carousel contracts."""

from .base import CarouselBaseModel, FrozenModel
from .blocks import (
    Annotations,
    Block,
    BlockKind,
    BlockTree,
    CalloutBlock,
    CalloutIcon,
    ChildPage,
    Column,
    ColumnListBlock,
    CustomEmoji,
    DatabaseRef,
    DividerBlock,
    ImageBlock,
    ListItemBlock,
    RichTextRun,
    SUPPORTED_KINDS,
    TextBlock,
)
from .config import Config
from .export import ExportedSlide, ExportReport
from .style import CANVAS_HEIGHT, CANVAS_WIDTH, ResolvedStyleSheet, StyleConfig
from .visual import RasterOptions, SlideHandle, VisualNode

__all__ = [
    "Annotations",
    "Block",
    "BlockKind",
    "BlockTree",
    "CANVAS_HEIGHT",
    "CANVAS_WIDTH",
    "CalloutBlock",
    "CalloutIcon",
    "CarouselBaseModel",
    "ChildPage",
    "Column",
    "ColumnListBlock",
    "Config",
    "CustomEmoji",
    "DatabaseRef",
    "DividerBlock",
    "ExportReport",
    "ExportedSlide",
    "FrozenModel",
    "ImageBlock",
    "ListItemBlock",
    "RasterOptions",
    "ResolvedStyleSheet",
    "RichTextRun",
    "SUPPORTED_KINDS",
    "SlideHandle",
    "StyleConfig",
    "TextBlock",
    "VisualNode",
]
