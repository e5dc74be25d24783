"""Pillow rasterizer for rendered slides.

Paints a visual tree top to bottom the way the browser preview flows it:
block boxes stack vertically, text wraps greedily at word boundaries, and
everything outside the content area is clipped. Layout is approximate (no
kerning, shaping or font fallback), which is enough for export.
"""

from __future__ import annotations

import io
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

from ..models.visual import RasterOptions, SlideHandle, VisualNode

RGB = Tuple[int, int, int]

TEXT_KINDS = frozenset({"heading_1", "heading_2", "heading_3", "paragraph", "text_block"})
PLACEHOLDER_COLOR = "#EBECED"

FONT_CANDIDATES: Dict[Tuple[str, bool, bool], Sequence[str]] = {
    ("sans", False, False): ("DejaVuSans.ttf", "LiberationSans-Regular.ttf", "Arial.ttf"),
    ("sans", True, False): ("DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "Arial Bold.ttf"),
    ("sans", False, True): ("DejaVuSans-Oblique.ttf", "LiberationSans-Italic.ttf"),
    ("sans", True, True): ("DejaVuSans-BoldOblique.ttf", "LiberationSans-BoldItalic.ttf"),
    ("serif", False, False): ("DejaVuSerif.ttf", "LiberationSerif-Regular.ttf", "Georgia.ttf"),
    ("serif", True, False): ("DejaVuSerif-Bold.ttf", "LiberationSerif-Bold.ttf"),
    ("serif", False, True): ("DejaVuSerif-Italic.ttf", "LiberationSerif-Italic.ttf"),
    ("serif", True, True): ("DejaVuSerif-BoldItalic.ttf", "LiberationSerif-BoldItalic.ttf"),
    ("mono", False, False): ("DejaVuSansMono.ttf", "LiberationMono-Regular.ttf"),
    ("mono", True, False): ("DejaVuSansMono-Bold.ttf", "LiberationMono-Bold.ttf"),
    ("mono", False, True): ("DejaVuSansMono-Oblique.ttf", "LiberationMono-Italic.ttf"),
    ("mono", True, True): ("DejaVuSansMono-BoldOblique.ttf", "LiberationMono-BoldItalic.ttf"),
}

_SCALE = re.compile(r"scale\(\s*([0-9]*\.?[0-9]+)")
_TOKENS = re.compile(r"\n|[^\S\n]+|\S+")


def rgb(value: Any, default: str = "#000000") -> RGB:
    try:
        color = ImageColor.getrgb(value) if isinstance(value, str) else ImageColor.getrgb(default)
    except ValueError:
        color = ImageColor.getrgb(default)
    return color[0], color[1], color[2]


def transform_scale(style: Mapping[str, Any]) -> float:
    """Scale factor applied by a ``transform: scale(x)`` or ``scale`` entry."""
    factor = 1.0
    transform = style.get("transform")
    if isinstance(transform, str):
        match = _SCALE.search(transform)
        if match:
            factor *= float(match.group(1))
    scale = style.get("scale")
    if isinstance(scale, (int, float)) and not isinstance(scale, bool) and scale > 0:
        factor *= float(scale)
    return factor


def font_class(family: str) -> str:
    lower = (family or "").lower()
    if "mono" in lower or "consolas" in lower or "courier" in lower:
        return "mono"
    if "serif" in lower.replace("sans-serif", ""):
        return "serif"
    return "sans"


@dataclass
class _Token:
    text: str
    width: float
    font: Any = None
    color: RGB = (0, 0, 0)
    background: Optional[RGB] = None
    decoration: str = ""
    kind: str = "text"
    src: Optional[str] = None
    height: float = 0.0


@dataclass
class _Line:
    height: float
    font_size: float
    tokens: List[_Token] = field(default_factory=list)


class PillowRasterizer:
    """Rasterizer backed by Pillow.

    ``images`` maps an image ``src`` (as it appears in the visual tree) to
    its encoded bytes; sources without bytes paint as a grey placeholder.
    """

    def __init__(
        self,
        images: Optional[Mapping[str, bytes]] = None,
        font_candidates: Optional[Mapping[Tuple[str, bool, bool], Sequence[str]]] = None,
    ) -> None:
        self.images = dict(images or {})
        self.font_candidates = dict(font_candidates or FONT_CANDIDATES)
        self._fonts: Dict[Tuple[str, bool, bool, int], Any] = {}
        self._decoded: Dict[str, Optional[Image.Image]] = {}

    async def rasterize(self, handle: SlideHandle, options: RasterOptions) -> bytes:
        image = self.paint(handle, options)
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=options.quality)
        return buffer.getvalue()

    def paint(self, handle: SlideHandle, options: RasterOptions) -> Image.Image:
        width = max(1, round(options.width_px * options.scale))
        height = max(1, round(options.height_px * options.scale))
        canvas = Image.new("RGB", (width, height), rgb(options.background_color, "#FFFFFF"))
        # leftover preview transforms shrink the drawing, just like a browser would
        scale = options.scale * transform_scale(handle.tree.style)
        for ancestor in handle.ancestors:
            scale *= transform_scale(ancestor)
        _Painter(self, canvas, scale).paint_slide(handle.tree)
        return canvas

    def font(self, family: str, size: float, bold: bool = False, italic: bool = False) -> Any:
        pixel_size = max(1, int(round(size)))
        key = (font_class(family), bold, italic, pixel_size)
        if key not in self._fonts:
            self._fonts[key] = self._load_font(key[0], bold, italic, pixel_size)
        return self._fonts[key]

    def _load_font(self, family: str, bold: bool, italic: bool, size: int) -> Any:
        candidates = list(self.font_candidates.get((family, bold, italic), ()))
        candidates += list(self.font_candidates.get((family, False, False), ()))
        for candidate in candidates:
            try:
                return ImageFont.truetype(candidate, size)
            except OSError:
                continue
        return ImageFont.load_default(size=size)

    def decoded(self, src: Optional[str]) -> Optional[Image.Image]:
        if not src:
            return None
        if src not in self._decoded:
            data = self.images.get(src)
            image = None
            if data:
                try:
                    with Image.open(io.BytesIO(data)) as opened:
                        image = opened.convert("RGBA")
                except OSError:
                    image = None
            self._decoded[src] = image
        return self._decoded[src]


class _Painter:
    def __init__(self, rasterizer: PillowRasterizer, canvas: Image.Image, scale: float) -> None:
        self.rasterizer = rasterizer
        self.canvas = canvas
        self.scale = scale
        self.draw = ImageDraw.Draw(canvas)

    def px(self, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0.0
        return float(value) * self.scale

    def paint_slide(self, slide: VisualNode) -> None:
        style = slide.style
        if style.get("background_color"):
            self.draw.rectangle(
                [0, 0, self.px(slide.width), self.px(slide.height)],
                fill=rgb(style["background_color"], "#FFFFFF"),
            )
        left = self.px(style.get("padding_left", 0))
        top = self.px(style.get("padding_top", 0))
        for content in slide.children:
            width = self.px(content.width)
            height = self.px(content.height)
            if width < 1 or height < 1:
                continue
            layer = Image.new("RGBA", (math.ceil(width), math.ceil(height)), (0, 0, 0, 0))
            _Painter(self.rasterizer, layer, self.scale).flow(content.children, 0.0, 0.0, width)
            self.canvas.paste(layer, (round(left), round(top)), layer)

    def flow(self, nodes: Sequence[VisualNode], x: float, y: float, width: float) -> float:
        for node in nodes:
            y += self.px(node.style.get("margin_top", 0))
            y = self.paint_block(node, x, y, width)
            y += self.px(node.style.get("margin_bottom", 0))
        return y

    def paint_block(self, node: VisualNode, x: float, y: float, width: float) -> float:
        kind = node.kind
        if kind in TEXT_KINDS:
            return self.paint_lines(self.layout(node, width), x, y)
        if kind == "spacer":
            return y + self.px(node.height)
        if kind == "quote":
            return self.paint_quote(node, x, y, width)
        if kind in ("list_row", "nested_item"):
            indent = self.px(node.style.get("margin_left", 0))
            return self.paint_row(node, x + indent, y, width - indent)
        if kind == "divider":
            height = max(1.0, self.px(node.height))
            right = x + min(width, self.px(node.width) or width)
            self.draw.rectangle(
                [x, y, right, y + height], fill=rgb(node.style.get("background_color"), "#D3D1CB")
            )
            return y + height
        if kind == "callout":
            return self.paint_callout(node, x, y, width)
        if kind == "columns":
            return self.paint_columns(node, x, y, width)
        if kind == "image":
            return self.paint_image(node, x, y, width)
        return self.flow(node.children, x, y, width)

    # text

    def _font_for(self, style: Mapping[str, Any]) -> Any:
        return self.rasterizer.font(
            str(style.get("font_family", "")),
            self.px(style.get("font_size", 16)),
            bold=int(style.get("font_weight", 400)) >= 600,
            italic=style.get("font_style") == "italic",
        )

    def _tokens(self, node: VisualNode, base: Mapping[str, Any]) -> List[_Token]:
        tokens: List[_Token] = []
        for inline in node.children:
            if inline.kind == "emoji":
                size = self.px(inline.width)
                tokens.append(_Token(text="", width=size, kind="emoji", src=inline.src, height=size))
                continue
            style = {**base, **inline.style}
            if inline.kind == "code":
                style = {**style, "font_weight": 400, "font_style": "normal"}
            font = self._font_for(style)
            color = rgb(style.get("color"), "#37352F")
            background = rgb(style["background_color"]) if style.get("background_color") else None
            padding = self.px(style.get("padding_x", 0)) if inline.kind == "code" else 0.0
            for text in _TOKENS.findall(inline.text or ""):
                width = 0.0 if text == "\n" else font.getlength(text) + 2 * padding
                tokens.append(
                    _Token(
                        text=text,
                        width=width,
                        font=font,
                        color=color,
                        background=background,
                        decoration=str(style.get("text_decoration", "")),
                        kind="newline" if text == "\n" else inline.kind,
                    )
                )
        return tokens

    def layout(self, node: VisualNode, width: float) -> List[_Line]:
        base = node.style
        font_size = self.px(base.get("font_size", 16))
        line_height = font_size * float(base.get("line_height", 1.2))
        lines: List[_Line] = []
        current = _Line(height=line_height, font_size=font_size)
        used = 0.0

        def push() -> None:
            nonlocal current, used
            while current.tokens and current.tokens[-1].text.isspace():
                current.tokens.pop()
            lines.append(current)
            current = _Line(height=line_height, font_size=font_size)
            used = 0.0

        for token in self._tokens(node, base):
            if token.kind == "newline":
                push()
                continue
            blank = token.kind != "emoji" and token.text.isspace()
            if blank and not current.tokens:
                continue
            if current.tokens and used + token.width > width and not blank:
                push()
            current.tokens.append(token)
            current.height = max(current.height, token.height)
            used += token.width
        if current.tokens:
            push()
        return lines

    def paint_lines(self, lines: Sequence[_Line], x: float, y: float) -> float:
        for line in lines:
            cursor = x
            for token in line.tokens:
                if token.kind == "emoji":
                    top = y + (line.height - token.height) / 2
                    self.paste_image(token.src, cursor, top, token.width, token.height)
                    cursor += token.width
                    continue
                if token.background is not None:
                    self.draw.rectangle(
                        [cursor, y, cursor + token.width, y + line.height], fill=token.background
                    )
                left, top, right, bottom = token.font.getbbox("Hg")
                text_y = y + (line.height - (bottom - top)) / 2 - top
                text_x = cursor + (token.width - token.font.getlength(token.text)) / 2
                self.draw.text((text_x, text_y), token.text, font=token.font, fill=token.color)
                if "underline" in token.decoration:
                    underline_y = text_y + bottom + 1
                    self.draw.line([cursor, underline_y, cursor + token.width, underline_y], fill=token.color)
                if "line-through" in token.decoration:
                    strike_y = y + line.height / 2
                    self.draw.line([cursor, strike_y, cursor + token.width, strike_y], fill=token.color)
                cursor += token.width
            y += line.height
        return y

    # blocks

    def paint_quote(self, node: VisualNode, x: float, y: float, width: float) -> float:
        border = self.px(node.style.get("border_left_width", 0))
        padding = self.px(node.style.get("padding_left", 0))
        bottom = self.flow(node.children, x + border + padding, y, width - border - padding)
        if border > 0:
            self.draw.rectangle(
                [x, y, x + border, bottom], fill=rgb(node.style.get("border_color"), "#37352F")
            )
        return bottom

    def paint_marker(self, marker: VisualNode, x: float, y: float, width: float) -> float:
        style = marker.style
        color = rgb(style.get("color"), "#37352F")
        font_size = self.px(style.get("font_size", 16))
        line_height = font_size * float(style.get("line_height", 1.2))
        shape = style.get("shape")
        if shape:
            size = self.px(style.get("size", 0))
            top = y + self.px(style.get("offset_top", 0))
            left = x + width - size
            box = [left, top, left + size, top + size]
            if shape == "disc":
                self.draw.ellipse(box, fill=color)
            else:
                outline = max(1, round(self.px(style.get("border_width", 1))))
                self.draw.ellipse(box, outline=color, width=outline)
        elif marker.text:
            font = self._font_for(style)
            left, top, right, bottom = font.getbbox("Hg")
            text_y = y + (line_height - (bottom - top)) / 2 - top
            self.draw.text((x + width - font.getlength(marker.text), text_y), marker.text, font=font, fill=color)
        return y + line_height

    def paint_row(self, node: VisualNode, x: float, y: float, width: float) -> float:
        if len(node.children) < 2:
            return self.flow(node.children, x, y, width)
        marker, body = node.children[0], node.children[1]
        marker_width = self.px(marker.width)
        gap = self.px(node.style.get("gap", 0))
        body_bottom = self.paint_lines(
            self.layout(body, width - marker_width - gap), x + marker_width + gap, y
        )
        marker_bottom = self.paint_marker(marker, x, y, marker_width)
        return max(body_bottom, marker_bottom)

    def paint_callout(self, node: VisualNode, x: float, y: float, width: float) -> float:
        style = node.style
        padding = self.px(style.get("padding", 0))
        gap = self.px(style.get("gap", 0))
        icon, body = node.children[0], node.children[-1]
        icon_size = self.px(icon.style.get("font_size", 0))
        body_x = x + padding + icon_size + gap
        lines = self.layout(body, width - 2 * padding - icon_size - gap)
        body_height = sum(line.height for line in lines)
        box_height = max(icon_size, body_height) + 2 * padding

        border_width = self.px(style.get("border_width", 0))
        self.draw.rounded_rectangle(
            [x, y, x + width, y + box_height],
            radius=self.px(style.get("border_radius", 0)),
            fill=rgb(style.get("background_color"), "#FFFFFF"),
            outline=rgb(style.get("border_color"), "#E0E0E0") if border_width > 0 else None,
            width=max(1, round(border_width)) if border_width > 0 else 0,
        )
        if icon.src:
            self.paste_image(icon.src, x + padding, y + padding, icon_size, icon_size)
        elif icon.text:
            font = self.rasterizer.font(str(body.style.get("font_family", "")), icon_size)
            self.draw.text((x + padding, y + padding), icon.text, font=font, fill=rgb(body.style.get("color")))
        self.paint_lines(lines, body_x, y + padding)
        return y + box_height

    def paint_columns(self, node: VisualNode, x: float, y: float, width: float) -> float:
        gap = self.px(node.style.get("gap", 0))
        cursor = x
        bottom = y
        for column in node.children:
            column_width = self.px(column.width)
            bottom = max(bottom, self.flow(column.children, cursor, y, column_width))
            cursor += column_width + gap
        return bottom

    def paint_image(self, node: VisualNode, x: float, y: float, width: float) -> float:
        box_width = min(width, self.px(node.width))
        box_height = self.px(node.height)
        left = x + (width - box_width) / 2 if node.style.get("align") == "center" else x
        self.paste_image(node.src, left, y, box_width, box_height)
        return y + box_height

    def paste_image(self, src: Optional[str], x: float, y: float, width: float, height: float) -> None:
        if width < 1 or height < 1:
            return
        image = self.rasterizer.decoded(src)
        if image is None:
            self.draw.rectangle([x, y, x + width, y + height], fill=rgb(PLACEHOLDER_COLOR))
            return
        fitted = image.resize((max(1, round(width)), max(1, round(height))), Image.Resampling.LANCZOS)
        self.canvas.paste(fitted, (round(x), round(y)), fitted)
