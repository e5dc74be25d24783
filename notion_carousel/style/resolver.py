"""Style configuration clamping and per-kind style sheet resolution.

``resolve_style_config`` turns any mapping (user file, CLI overrides, half
typed values) into a valid ``StyleConfig``; ``resolve_style`` derives the
per-kind style records the renderer consumes. Both are pure.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

import annotated_types
from PIL import ImageColor

from ..models.style import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    CalloutIconStyle,
    CalloutStyle,
    CanvasStyle,
    CodeStyle,
    ColumnsStyle,
    DividerStyle,
    EmojiStyle,
    ImageStyle,
    ListItemStyle,
    NestedListItemStyle,
    QuoteStyle,
    ResolvedStyleSheet,
    StyleConfig,
    TextStyle,
)

FONT_OPTIONS = {
    "inter": "Inter, sans-serif",
    "noto": "'Noto Sans SC', sans-serif",
    "georgia": "Georgia, serif",
    "system": "system-ui, sans-serif",
}

COLOR_FIELDS = frozenset(
    {
        "bg_color",
        "text_color",
        "code_background",
        "divider_color",
        "quote_border_color",
        "callout_background",
        "callout_border_color",
    }
)

# Older style files carry one line height for all heading levels.
_SHARED_HEADING_LINE_HEIGHT = ("heading_line_height", "headingLineHeight")

_RGB_TRIPLE = re.compile(r"^\s*(?:rgb\s*\()?([^,()]*),([^,()]*),([^,()]*)\)?\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class NumericParameter:
    default: float
    minimum: float
    maximum: float
    integer: bool


def _numeric_parameters() -> Dict[str, NumericParameter]:
    parameters: Dict[str, NumericParameter] = {}
    for name, field in StyleConfig.model_fields.items():
        if field.annotation not in (int, float):
            continue
        minimum = maximum = None
        for constraint in field.metadata:
            if isinstance(constraint, annotated_types.Ge):
                minimum = constraint.ge
            elif isinstance(constraint, annotated_types.Le):
                maximum = constraint.le
        parameters[name] = NumericParameter(
            default=field.default,
            minimum=minimum,
            maximum=maximum,
            integer=field.annotation is int,
        )
    return parameters


NUMERIC_PARAMETERS = _numeric_parameters()


def clamp(value: Any, minimum: float, maximum: float, default: float) -> float:
    """Return ``value`` as a number within [minimum, maximum], else ``default``.

    Strings holding a number are accepted; booleans, non-finite and
    out-of-range values fall back to the default.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if not isinstance(value, (int, float)):
        return default
    try:
        number = float(value)
    except OverflowError:
        return default
    if not math.isfinite(number) or number < minimum or number > maximum:
        return default
    return value


def parse_color(value: Any, default: str) -> str:
    """Normalize a CSS-ish color to ``#RRGGBB``.

    Accepts anything Pillow understands plus bare ``r,g,b`` triples, whose
    channels are clamped to 0..255 (unparseable channels read as 255).
    """
    if not isinstance(value, str) or not value.strip():
        return default
    match = _RGB_TRIPLE.match(value)
    if match:
        channels = []
        for part in match.groups():
            try:
                channel = float(part.strip())
            except ValueError:
                channel = 255.0
            if not math.isfinite(channel):
                channel = 255.0
            channels.append(int(round(max(0.0, min(255.0, channel)))))
        return "#{:02X}{:02X}{:02X}".format(*channels)
    try:
        rgb = ImageColor.getrgb(value.strip())
    except ValueError:
        return default
    return "#{:02X}{:02X}{:02X}".format(*rgb[:3])


def parse_font_family(value: Any, default: str) -> str:
    if not isinstance(value, str) or not value.strip():
        return default
    return FONT_OPTIONS.get(value.strip().lower(), value.strip())


def _lookup(config: Mapping[str, Any], name: str) -> Any:
    if name in config:
        return config[name]
    alias = StyleConfig.model_fields[name].alias
    return config.get(alias) if alias else None


def resolve_style_config(
    config: Optional[Union[StyleConfig, Mapping[str, Any]]] = None,
) -> StyleConfig:
    """Build a valid ``StyleConfig`` from a sparse, untrusted mapping."""
    if isinstance(config, StyleConfig):
        # field validators do not check colors or font names
        config = config.model_dump()
    raw: Mapping[str, Any] = config if isinstance(config, Mapping) else {}
    shared_line_height = next(
        (raw[key] for key in _SHARED_HEADING_LINE_HEIGHT if key in raw), None
    )

    values: Dict[str, Any] = {}
    for name, field in StyleConfig.model_fields.items():
        value = _lookup(raw, name)
        if name in NUMERIC_PARAMETERS:
            if value is None and name.startswith("heading") and name.endswith("_line_height"):
                value = shared_line_height
            parameter = NUMERIC_PARAMETERS[name]
            number = clamp(value, parameter.minimum, parameter.maximum, parameter.default)
            values[name] = int(round(number)) if parameter.integer else float(number)
        elif name in COLOR_FIELDS:
            values[name] = parse_color(value, field.default)
        else:
            values[name] = parse_font_family(value, field.default)
    return StyleConfig(**values)


def default_style_config() -> StyleConfig:
    return StyleConfig()


def _text(config: StyleConfig, size: int, weight: int, line_height: float, spacing: int) -> TextStyle:
    return TextStyle(
        font_size=size,
        font_weight=weight,
        line_height=line_height,
        color=config.text_color,
        font_family=config.font_family,
        margin_bottom=spacing,
    )


def resolve_style(
    config: Optional[Union[StyleConfig, Mapping[str, Any]]] = None,
) -> ResolvedStyleSheet:
    """Resolve a (possibly sparse or malformed) configuration into a style sheet."""
    c = resolve_style_config(config)
    body = _text(c, c.body_size, c.body_weight, c.body_line_height, c.body_spacing)
    body_flush = body.model_copy(update={"margin_bottom": 0})

    canvas = CanvasStyle(
        width=CANVAS_WIDTH,
        height=CANVAS_HEIGHT,
        padding_top=c.padding_top,
        padding_right=c.padding_right,
        padding_bottom=c.padding_bottom,
        padding_left=c.padding_left,
        content_width=max(0, CANVAS_WIDTH - c.padding_left - c.padding_right),
        content_height=max(0, CANVAS_HEIGHT - c.padding_top - c.padding_bottom),
        background_color=c.bg_color,
        color=c.text_color,
        font_family=c.font_family,
    )

    def list_item(gap: int) -> ListItemStyle:
        return ListItemStyle(
            text=body_flush,
            marker_width=c.list_marker_width,
            gap=gap,
            bullet_size=c.bullet_size,
            margin_bottom=c.body_spacing,
        )

    def nested_item(gap: int) -> NestedListItemStyle:
        return NestedListItemStyle(
            text=body_flush,
            indent=c.nested_indent,
            margin_top=c.nested_spacing,
            margin_bottom=c.nested_spacing,
            marker_width=c.list_marker_width,
            gap=gap,
            bullet_size=c.bullet_size,
            bullet_border_width=c.nested_bullet_border,
        )

    return ResolvedStyleSheet(
        canvas=canvas,
        heading_1=_text(c, c.heading1_size, c.heading1_weight, c.heading1_line_height, c.heading1_spacing),
        heading_2=_text(c, c.heading2_size, c.heading2_weight, c.heading2_line_height, c.heading2_spacing),
        heading_3=_text(c, c.heading3_size, c.heading3_weight, c.heading3_line_height, c.heading3_spacing),
        paragraph=body,
        quote=QuoteStyle(
            text=body_flush,
            border_width=c.quote_border_width,
            border_color=c.quote_border_color,
            padding_left=c.quote_padding,
            margin_bottom=c.quote_spacing,
        ),
        code=CodeStyle(
            font_size=c.code_size,
            font_family=c.code_font_family,
            background_color=c.code_background,
            color=c.text_color,
            padding_x=c.code_padding_x,
            padding_y=c.code_padding_y,
            radius=c.code_radius,
        ),
        emoji=EmojiStyle(size=c.emoji_size),
        bold_weight=c.bold_weight,
        bullet=list_item(c.bullet_gap),
        number=list_item(c.number_gap),
        nested_bullet=nested_item(c.nested_bullet_gap),
        nested_number=nested_item(c.number_gap),
        divider=DividerStyle(
            thickness=c.divider_thickness,
            color=c.divider_color,
            margin_top=c.divider_margin_top,
            margin_bottom=c.divider_margin_bottom,
        ),
        callout=CalloutStyle(
            text=body_flush,
            icon=CalloutIconStyle(size=c.callout_icon_size),
            padding=c.callout_padding,
            radius=c.callout_radius,
            gap=c.callout_gap,
            margin_bottom=c.callout_spacing,
            neutral_background=c.callout_background,
            border_color=c.callout_border_color,
            border_width=c.callout_border_width,
        ),
        columns=ColumnsStyle(gap=c.column_gap, margin_bottom=c.column_spacing),
        image=ImageStyle(
            max_width=canvas.content_width,
            max_height=c.max_image_height,
            margin_bottom=c.image_spacing,
        ),
    )
