"""Normalized block contracts.

The block model is closed: only the kinds listed in ``BlockKind`` survive
normalization, and each variant carries the payload of its own kind only.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field

from .base import CarouselBaseModel


class BlockKind(str, Enum):
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    PARAGRAPH = "paragraph"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    IMAGE = "image"
    DIVIDER = "divider"
    QUOTE = "quote"
    CALLOUT = "callout"
    COLUMN_LIST = "column_list"


SUPPORTED_KINDS = frozenset(kind.value for kind in BlockKind)

TextKind = Literal["heading_1", "heading_2", "heading_3", "paragraph", "quote"]
ListKind = Literal["bulleted_list_item", "numbered_list_item"]


class Annotations(CarouselBaseModel):
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    code: bool = False
    color: str = "default"


class CustomEmoji(CarouselBaseModel):
    url: str
    name: str = ""


class RichTextRun(CarouselBaseModel):
    text: str = ""
    annotations: Annotations = Field(default_factory=Annotations)
    href: Optional[str] = None
    emoji: Optional[CustomEmoji] = None


class CalloutIcon(CarouselBaseModel):
    kind: Literal["emoji", "external", "file"]
    emoji: Optional[str] = None
    url: Optional[str] = None


class _BlockBase(CarouselBaseModel):
    id: str
    has_children: bool = False


class TextBlock(_BlockBase):
    type: TextKind
    rich_text: List[RichTextRun] = Field(default_factory=list)


class ListItemBlock(_BlockBase):
    type: ListKind
    rich_text: List[RichTextRun] = Field(default_factory=list)
    nested: List["Block"] = Field(default_factory=list)


class ImageBlock(_BlockBase):
    type: Literal["image"] = "image"
    url: Optional[str] = None
    caption: List[RichTextRun] = Field(default_factory=list)


class DividerBlock(_BlockBase):
    type: Literal["divider"] = "divider"


class CalloutBlock(_BlockBase):
    type: Literal["callout"] = "callout"
    rich_text: List[RichTextRun] = Field(default_factory=list)
    icon: Optional[CalloutIcon] = None
    color: str = "default"


class Column(CarouselBaseModel):
    id: str
    ratio: Optional[float] = None
    blocks: List["Block"] = Field(default_factory=list)


class ColumnListBlock(_BlockBase):
    type: Literal["column_list"] = "column_list"
    columns: List[Column] = Field(default_factory=list)


Block = Annotated[
    Union[TextBlock, ListItemBlock, ImageBlock, DividerBlock, CalloutBlock, ColumnListBlock],
    Field(discriminator="type"),
]

ListItemBlock.model_rebuild()
Column.model_rebuild()
ColumnListBlock.model_rebuild()


class BlockTree(CarouselBaseModel):
    """Normalized content of one page."""

    page_id: str
    blocks: List[Block] = Field(default_factory=list)


class ChildPage(CarouselBaseModel):
    id: str
    title: str = "Untitled"
    url: Optional[str] = None


class DatabaseRef(CarouselBaseModel):
    id: str
    title: str = "Untitled Database"
