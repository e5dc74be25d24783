"""Normalized blocks to visual tree renderer."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..models.blocks import (
    Block,
    CalloutBlock,
    ColumnListBlock,
    DividerBlock,
    ImageBlock,
    ListItemBlock,
    TextBlock,
)
from ..models.style import NestedListItemStyle, ResolvedStyleSheet, TextStyle
from ..models.visual import SlideHandle, VisualNode
from . import palette
from .rich_text import UrlTransform, identity, render_rich_text

DEFAULT_CALLOUT_ICON = "\U0001F4A1"

Size = Tuple[int, int]


def build_numbering_map(blocks: Sequence[Block]) -> Dict[str, int]:
    """Map each numbered item id to its position in its contiguous run."""
    numbering: Dict[str, int] = {}
    counter = 0
    previous: Optional[str] = None
    for block in blocks:
        if block.type == "numbered_list_item":
            counter = counter + 1 if previous == "numbered_list_item" else 1
            numbering[block.id] = counter
        previous = block.type
    return numbering


def nested_letter(index: int) -> str:
    """0 -> a, 25 -> z, 26 -> aa."""
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("a") + remainder) + letters
    return letters


def fit_image(
    intrinsic: Optional[Size], max_width: float, max_height: float
) -> Tuple[float, float]:
    """Size an image box to the available width, capped at ``max_height``.

    Without intrinsic dimensions the full width x max height placeholder is
    reserved.
    """
    if not intrinsic or intrinsic[0] <= 0 or intrinsic[1] <= 0:
        return float(max_width), float(max_height)
    intrinsic_width, intrinsic_height = intrinsic
    height = max_width * intrinsic_height / intrinsic_width
    if height > max_height:
        return max_height * intrinsic_width / intrinsic_height, float(max_height)
    return float(max_width), height


def column_weights(ratios: Sequence[Optional[float]]) -> List[float]:
    weights = [ratio if ratio is not None and ratio > 0 else 1.0 for ratio in ratios]
    total = sum(weights) or len(weights) or 1
    return [weight / total for weight in weights]


def _text_style(style: TextStyle) -> dict:
    return {
        "font_size": style.font_size,
        "font_weight": style.font_weight,
        "line_height": style.line_height,
        "color": style.color,
        "font_family": style.font_family,
        "margin_bottom": style.margin_bottom,
    }


class SlideRenderer:
    """Render normalized blocks with one resolved style sheet.

    ``url_transform`` is applied to every image/icon source (proxying);
    ``intrinsic_sizes`` maps original image URLs to their pixel size once
    known.
    """

    def __init__(
        self,
        sheet: ResolvedStyleSheet,
        url_transform: UrlTransform = identity,
        intrinsic_sizes: Optional[Mapping[str, Size]] = None,
    ) -> None:
        self.sheet = sheet
        self.url_transform = url_transform
        self.intrinsic_sizes = dict(intrinsic_sizes or {})

    def render(self, blocks: Sequence[Block]) -> VisualNode:
        canvas = self.sheet.canvas
        content = VisualNode(
            kind="content",
            width=canvas.content_width,
            height=canvas.content_height,
            style={"overflow": "hidden"},
            children=self._render_sequence(blocks, canvas.content_width, in_column=False),
        )
        return VisualNode(
            kind="slide",
            width=canvas.width,
            height=canvas.height,
            style={
                "background_color": canvas.background_color,
                "color": canvas.color,
                "font_family": canvas.font_family,
                "padding_top": canvas.padding_top,
                "padding_right": canvas.padding_right,
                "padding_bottom": canvas.padding_bottom,
                "padding_left": canvas.padding_left,
                "overflow": "hidden",
            },
            children=[content],
        )

    def _render_sequence(
        self, blocks: Sequence[Block], width: float, in_column: bool
    ) -> List[VisualNode]:
        numbering = build_numbering_map(blocks)
        nodes: List[VisualNode] = []
        for block in blocks:
            node = self._render_block(block, numbering, width, in_column)
            if node is not None:
                nodes.append(node)
        return nodes

    def _render_block(
        self, block: Block, numbering: Dict[str, int], width: float, in_column: bool
    ) -> Optional[VisualNode]:
        if isinstance(block, TextBlock):
            return self._render_text(block, width)
        if isinstance(block, ListItemBlock):
            return self._render_list_item(block, numbering)
        if isinstance(block, DividerBlock):
            return self._render_divider(block, width)
        if isinstance(block, CalloutBlock):
            return self._render_callout(block)
        if isinstance(block, ColumnListBlock):
            # columns inside columns are not laid out
            return None if in_column else self._render_columns(block, width)
        if isinstance(block, ImageBlock):
            return self._render_image(block, width)
        return None

    def _render_text(self, block: TextBlock, width: float) -> VisualNode:
        sheet = self.sheet
        inlines = render_rich_text(block.rich_text, sheet, self.url_transform)
        if block.type == "quote":
            if not inlines:
                return self._spacer(block.id, width, sheet.quote.text, sheet.quote.margin_bottom)
            quote = sheet.quote
            return VisualNode(
                kind="quote",
                key=block.id,
                style={
                    "border_left_width": quote.border_width,
                    "border_color": quote.border_color,
                    "padding_left": quote.padding_left,
                    "margin_bottom": quote.margin_bottom,
                },
                children=[
                    VisualNode(kind="text_block", style=_text_style(quote.text), children=inlines)
                ],
            )
        style: TextStyle = getattr(sheet, block.type)
        if block.type == "paragraph" and not inlines:
            return self._spacer(block.id, width, style, style.margin_bottom)
        return VisualNode(kind=block.type, key=block.id, style=_text_style(style), children=inlines)

    def _spacer(self, key: str, width: float, style: TextStyle, margin_bottom: int) -> VisualNode:
        return VisualNode(
            kind="spacer",
            key=key,
            width=width,
            height=style.line_px,
            style={"margin_bottom": margin_bottom},
        )

    def _marker(self, text: Optional[str], shape: Optional[str], width: float,
                text_style: TextStyle, size: int, border: float = 0) -> VisualNode:
        style = {"text_align": "right", **_text_style(text_style), "margin_bottom": 0}
        if shape is not None:
            style.update(
                {
                    "shape": shape,
                    "size": size,
                    "border_width": border,
                    # centre the disc on the first line
                    "offset_top": max(0.0, (text_style.line_px - size) / 2),
                }
            )
        return VisualNode(kind="marker", text=text, width=width, style=style)

    def _render_list_item(self, block: ListItemBlock, numbering: Dict[str, int]) -> VisualNode:
        sheet = self.sheet
        numbered = block.type == "numbered_list_item"
        item = sheet.number if numbered else sheet.bullet
        if numbered:
            marker = self._marker(f"{numbering.get(block.id, 1)}.", None, item.marker_width,
                                  item.text, item.bullet_size)
        else:
            marker = self._marker(None, "disc", item.marker_width, item.text, item.bullet_size)
        row = VisualNode(
            kind="list_row",
            style={"gap": item.gap},
            children=[
                marker,
                VisualNode(
                    kind="text_block",
                    style=_text_style(item.text),
                    children=render_rich_text(block.rich_text, sheet, self.url_transform),
                ),
            ],
        )
        children = [row]
        nested_style = sheet.nested_number if numbered else sheet.nested_bullet
        for index, child in enumerate(block.nested):
            children.append(self._render_nested(child, index, numbered, nested_style))
        return VisualNode(
            kind=block.type,
            key=block.id,
            style={"margin_bottom": item.margin_bottom},
            children=children,
        )

    def _render_nested(
        self, child: Block, index: int, lettered: bool, style: NestedListItemStyle
    ) -> VisualNode:
        if lettered:
            marker = self._marker(f"{nested_letter(index)}.", None, style.marker_width,
                                  style.text, style.bullet_size)
        else:
            marker = self._marker(None, "circle", style.bullet_size, style.text,
                                  style.bullet_size, style.bullet_border_width)
        runs = getattr(child, "rich_text", [])
        return VisualNode(
            kind="nested_item",
            key=child.id,
            style={
                "margin_left": style.indent,
                "margin_top": style.margin_top,
                "margin_bottom": style.margin_bottom,
                "gap": style.gap,
            },
            children=[
                marker,
                VisualNode(
                    kind="text_block",
                    style=_text_style(style.text),
                    children=render_rich_text(runs, self.sheet, self.url_transform),
                ),
            ],
        )

    def _render_divider(self, block: DividerBlock, width: float) -> VisualNode:
        divider = self.sheet.divider
        return VisualNode(
            kind="divider",
            key=block.id,
            width=width,
            height=divider.thickness,
            style={
                "background_color": divider.color,
                "margin_top": divider.margin_top,
                "margin_bottom": divider.margin_bottom,
            },
        )

    def _callout_icon(self, block: CalloutBlock) -> VisualNode:
        size = self.sheet.callout.icon.size
        icon = block.icon
        if icon is not None and icon.kind == "emoji" and icon.emoji:
            return VisualNode(kind="callout_icon", text=icon.emoji, style={"font_size": size})
        if icon is not None and icon.kind in ("external", "file") and icon.url:
            return VisualNode(
                kind="callout_icon",
                src=self.url_transform(icon.url),
                alt="",
                width=size,
                height=size,
                style={"font_size": size},
            )
        if icon is not None and icon.emoji:
            return VisualNode(kind="callout_icon", text=icon.emoji, style={"font_size": size})
        return VisualNode(kind="callout_icon", text=DEFAULT_CALLOUT_ICON, style={"font_size": size})

    def _render_callout(self, block: CalloutBlock) -> Optional[VisualNode]:
        inlines = render_rich_text(block.rich_text, self.sheet, self.url_transform)
        if not inlines:
            return None
        callout = self.sheet.callout
        body_style = _text_style(callout.text)
        container = {
            "border_radius": callout.radius,
            "padding": callout.padding,
            "gap": callout.gap,
            "margin_bottom": callout.margin_bottom,
        }
        neutral = {
            "background_color": callout.neutral_background,
            "border_width": callout.border_width,
            "border_color": callout.border_color,
        }
        key = block.color or "default"
        if key == "default":
            container.update(neutral)
        elif palette.is_background_key(key):
            container["background_color"] = palette.background_color(key) or callout.neutral_background
        else:
            container.update(neutral)
            body_style["color"] = palette.text_color(key) or callout.text.color
        return VisualNode(
            kind="callout",
            key=block.id,
            style=container,
            children=[
                self._callout_icon(block),
                VisualNode(kind="text_block", style=body_style, children=inlines),
            ],
        )

    def _render_columns(self, block: ColumnListBlock, width: float) -> Optional[VisualNode]:
        if not block.columns:
            return None
        columns_style = self.sheet.columns
        weights = column_weights([column.ratio for column in block.columns])
        available = max(0.0, width - columns_style.gap * (len(block.columns) - 1))
        children = []
        for column, weight in zip(block.columns, weights):
            column_width = available * weight
            children.append(
                VisualNode(
                    kind="column",
                    key=column.id,
                    width=column_width,
                    style={"flex_grow": weight},
                    children=self._render_sequence(column.blocks, column_width, in_column=True),
                )
            )
        return VisualNode(
            kind="columns",
            key=block.id,
            width=width,
            style={"gap": columns_style.gap, "margin_bottom": columns_style.margin_bottom},
            children=children,
        )

    def _render_image(self, block: ImageBlock, width: float) -> Optional[VisualNode]:
        if not block.url:
            return None
        image = self.sheet.image
        box_width, box_height = fit_image(
            self.intrinsic_sizes.get(block.url), min(width, image.max_width), image.max_height
        )
        return VisualNode(
            kind="image",
            key=block.id,
            src=self.url_transform(block.url),
            alt="",
            width=box_width,
            height=box_height,
            style={"margin_bottom": image.margin_bottom, "align": "center"},
        )


def render_slide(
    blocks: Sequence[Block],
    sheet: ResolvedStyleSheet,
    url_transform: UrlTransform = identity,
    intrinsic_sizes: Optional[Mapping[str, Size]] = None,
) -> VisualNode:
    """Render one slide. A pure function of its arguments."""
    return SlideRenderer(sheet, url_transform, intrinsic_sizes).render(blocks)


def preview_ancestors(preview_width: int, canvas_width: int, canvas_height: int) -> List[dict]:
    """Wrapper styles of the shrink-to-fit preview, outermost first."""
    scale = preview_width / canvas_width
    return [
        {
            "width": preview_width,
            "height": round(canvas_height * scale),
            "overflow": "hidden",
        },
        {
            "width": canvas_width,
            "height": canvas_height,
            "transform": f"scale({scale:.5f})",
            "transform_origin": "top left",
        },
    ]


def render_deck(
    slides: Sequence[Tuple[str, Sequence[Block]]],
    sheet: ResolvedStyleSheet,
    url_transform: UrlTransform = identity,
    intrinsic_sizes: Optional[Mapping[str, Size]] = None,
    preview_width: int = 400,
) -> List[SlideHandle]:
    """Render (title, blocks) pairs into preview-mounted slide handles."""
    renderer = SlideRenderer(sheet, url_transform, intrinsic_sizes)
    ancestors = preview_ancestors(preview_width, sheet.canvas.width, sheet.canvas.height)
    return [
        SlideHandle(
            name=f"{position + 1:02d}",
            title=title,
            tree=renderer.render(blocks),
            ancestors=[dict(style) for style in ancestors],
        )
        for position, (title, blocks) in enumerate(slides)
    ]
