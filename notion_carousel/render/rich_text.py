"""Rich text run styling."""

from __future__ import annotations

from typing import Callable, List, Sequence

from ..models.blocks import RichTextRun
from ..models.style import ResolvedStyleSheet
from ..models.visual import VisualNode
from . import palette

UrlTransform = Callable[[str], str]


def identity(url: str) -> str:
    return url


def _text_style(run: RichTextRun, sheet: ResolvedStyleSheet) -> dict:
    annotations = run.annotations
    style = {}
    if annotations.bold:
        style["font_weight"] = sheet.bold_weight
    if annotations.italic:
        style["font_style"] = "italic"
    decorations = []
    if annotations.underline:
        decorations.append("underline")
    if annotations.strikethrough:
        decorations.append("line-through")
    if decorations:
        style["text_decoration"] = " ".join(decorations)

    color = annotations.color
    if color and color != "default":
        if palette.is_background_key(color):
            background = palette.background_color(color)
            if background:
                style["background_color"] = background
        else:
            foreground = palette.text_color(color)
            if foreground:
                style["color"] = foreground
    return style


def render_run(
    run: RichTextRun, sheet: ResolvedStyleSheet, url_transform: UrlTransform = identity
) -> List[VisualNode]:
    if run.emoji is not None:
        size = sheet.emoji.size
        return [
            VisualNode(
                kind="emoji",
                src=url_transform(run.emoji.url),
                alt=run.emoji.name,
                width=size,
                height=size,
                style={"vertical_align": "middle"},
            )
        ]
    if not run.text:
        return []
    if run.annotations.code:
        code = sheet.code
        return [
            VisualNode(
                kind="code",
                text=run.text,
                style={
                    "font_family": code.font_family,
                    "font_size": code.font_size,
                    "background_color": code.background_color,
                    "color": code.color,
                    "padding_x": code.padding_x,
                    "padding_y": code.padding_y,
                    "border_radius": code.radius,
                },
            )
        ]
    return [VisualNode(kind="text", text=run.text, style=_text_style(run, sheet))]


def render_rich_text(
    runs: Sequence[RichTextRun],
    sheet: ResolvedStyleSheet,
    url_transform: UrlTransform = identity,
) -> List[VisualNode]:
    """Render runs to inline nodes; an empty result means "no visible text"."""
    nodes: List[VisualNode] = []
    for run in runs:
        nodes.extend(render_run(run, sheet, url_transform))
    return nodes
