"""Style configuration and resolved style sheet contracts."""

from __future__ import annotations

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from .base import FrozenModel

CANVAS_WIDTH = 1080
CANVAS_HEIGHT = 1350

MONOSPACE_STACK = (
    'SFMono-Regular, Menlo, Monaco, Consolas, "Liberation Mono", "Courier New", monospace'
)


class StyleConfig(FrozenModel):
    """Flat, user-editable style parameters.

    Every numeric field declares its bounds; ``style.resolver`` reads them to
    clamp untrusted input, so this class is the single table of defaults.
    Field names are snake_case and also accept the camelCase aliases used by
    exported style files.
    """

    model_config = ConfigDict(
        extra="forbid", frozen=True, populate_by_name=True, alias_generator=to_camel
    )

    # canvas padding
    padding_top: int = Field(100, ge=0, le=400)
    padding_bottom: int = Field(100, ge=0, le=400)
    padding_left: int = Field(100, ge=0, le=400)
    padding_right: int = Field(100, ge=0, le=400)

    # headings
    heading1_size: int = Field(72, ge=12, le=200)
    heading1_weight: int = Field(600, ge=100, le=900)
    heading1_line_height: float = Field(1.3, ge=0.8, le=3.0)
    heading1_spacing: int = Field(36, ge=0, le=200)
    heading2_size: int = Field(56, ge=12, le=200)
    heading2_weight: int = Field(600, ge=100, le=900)
    heading2_line_height: float = Field(1.3, ge=0.8, le=3.0)
    heading2_spacing: int = Field(28, ge=0, le=200)
    heading3_size: int = Field(44, ge=12, le=200)
    heading3_weight: int = Field(600, ge=100, le=900)
    heading3_line_height: float = Field(1.3, ge=0.8, le=3.0)
    heading3_spacing: int = Field(24, ge=0, le=200)

    # body text
    body_size: int = Field(44, ge=12, le=160)
    body_weight: int = Field(400, ge=100, le=900)
    body_line_height: float = Field(1.6, ge=0.8, le=3.0)
    body_spacing: int = Field(20, ge=0, le=200)
    bold_weight: int = Field(600, ge=100, le=900)

    # lists
    list_marker_width: int = Field(36, ge=0, le=200)
    bullet_gap: int = Field(20, ge=0, le=120)
    number_gap: int = Field(22, ge=0, le=120)
    bullet_size: int = Field(14, ge=2, le=80)
    nested_indent: int = Field(66, ge=0, le=400)
    nested_spacing: int = Field(16, ge=0, le=120)
    nested_bullet_gap: int = Field(35, ge=0, le=120)
    nested_bullet_border: float = Field(1.5, ge=0.5, le=10.0)

    # divider
    divider_thickness: float = Field(1.0, ge=0.5, le=20.0)
    divider_margin_top: int = Field(16, ge=0, le=200)
    divider_margin_bottom: int = Field(24, ge=0, le=200)

    # quote
    quote_border_width: int = Field(5, ge=0, le=40)
    quote_padding: int = Field(24, ge=0, le=200)
    quote_spacing: int = Field(28, ge=0, le=200)

    # callout
    callout_padding: int = Field(24, ge=0, le=200)
    callout_radius: int = Field(12, ge=0, le=100)
    callout_gap: int = Field(16, ge=0, le=120)
    callout_icon_size: int = Field(40, ge=8, le=200)
    callout_border_width: float = Field(1.0, ge=0.0, le=20.0)
    callout_spacing: int = Field(28, ge=0, le=200)

    # inline code and custom emoji
    code_size: int = Field(38, ge=8, le=160)
    code_padding_x: int = Field(8, ge=0, le=60)
    code_padding_y: int = Field(4, ge=0, le=60)
    code_radius: int = Field(4, ge=0, le=40)
    emoji_size: int = Field(44, ge=8, le=200)

    # columns and images
    column_gap: int = Field(16, ge=0, le=200)
    column_spacing: int = Field(28, ge=0, le=200)
    image_spacing: int = Field(28, ge=0, le=200)
    max_image_height: int = Field(600, ge=50, le=CANVAS_HEIGHT)

    # colors and fonts
    bg_color: str = "#FFFFFF"
    text_color: str = "#37352F"
    font_family: str = "Inter, sans-serif"
    code_font_family: str = MONOSPACE_STACK
    code_background: str = "#F7F6F3"
    divider_color: str = "#D3D1CB"
    quote_border_color: str = "#37352F"
    callout_background: str = "#FFFFFF"
    callout_border_color: str = "#E0E0E0"


class CanvasStyle(FrozenModel):
    width: int
    height: int
    padding_top: int
    padding_right: int
    padding_bottom: int
    padding_left: int
    content_width: int
    content_height: int
    background_color: str
    color: str
    font_family: str


class TextStyle(FrozenModel):
    font_size: int
    font_weight: int
    line_height: float
    color: str
    font_family: str
    margin_bottom: int = 0

    @property
    def line_px(self) -> float:
        return self.font_size * self.line_height


class CodeStyle(FrozenModel):
    font_size: int
    font_family: str
    background_color: str
    color: str
    padding_x: int
    padding_y: int
    radius: int


class EmojiStyle(FrozenModel):
    size: int


class QuoteStyle(FrozenModel):
    text: TextStyle
    border_width: int
    border_color: str
    padding_left: int
    margin_bottom: int


class ListItemStyle(FrozenModel):
    text: TextStyle
    marker_width: int
    gap: int
    bullet_size: int
    margin_bottom: int


class NestedListItemStyle(FrozenModel):
    text: TextStyle
    indent: int
    margin_top: int
    margin_bottom: int
    marker_width: int
    gap: int
    bullet_size: int
    bullet_border_width: float


class DividerStyle(FrozenModel):
    thickness: float
    color: str
    margin_top: int
    margin_bottom: int


class CalloutIconStyle(FrozenModel):
    size: int


class CalloutStyle(FrozenModel):
    text: TextStyle
    icon: CalloutIconStyle
    padding: int
    radius: int
    gap: int
    margin_bottom: int
    neutral_background: str
    border_color: str
    border_width: float


class ColumnsStyle(FrozenModel):
    gap: int
    margin_bottom: int


class ImageStyle(FrozenModel):
    max_width: int
    max_height: int
    margin_bottom: int


class ResolvedStyleSheet(FrozenModel):
    """Fully defaulted, clamped per-kind styles for one render pass."""

    canvas: CanvasStyle
    heading_1: TextStyle
    heading_2: TextStyle
    heading_3: TextStyle
    paragraph: TextStyle
    quote: QuoteStyle
    code: CodeStyle
    emoji: EmojiStyle
    bold_weight: int
    bullet: ListItemStyle
    number: ListItemStyle
    nested_bullet: NestedListItemStyle
    nested_number: NestedListItemStyle
    divider: DividerStyle
    callout: CalloutStyle
    columns: ColumnsStyle
    image: ImageStyle
