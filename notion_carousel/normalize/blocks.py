"""Raw block to normalized block projection.

Only the closed set of supported kinds survives; for each survivor only the
fields of its own kind are copied. Column lists get their column ratios
reconciled here so the renderer only ever sees relative weights.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models.blocks import (
    Annotations,
    Block,
    CalloutBlock,
    CalloutIcon,
    Column,
    ColumnListBlock,
    CustomEmoji,
    DividerBlock,
    ImageBlock,
    ListItemBlock,
    RichTextRun,
    SUPPORTED_KINDS,
    TextBlock,
)

_TEXT_KINDS = ("heading_1", "heading_2", "heading_3", "paragraph", "quote")
_LIST_KINDS = ("bulleted_list_item", "numbered_list_item")
_ANNOTATION_FLAGS = ("bold", "italic", "underline", "strikethrough", "code")


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _annotations(raw: Any) -> Annotations:
    raw = _as_dict(raw)
    color = raw.get("color")
    return Annotations(
        color=color if isinstance(color, str) and color else "default",
        **{flag: bool(raw.get(flag)) for flag in _ANNOTATION_FLAGS},
    )


def _run_text(item: Dict[str, Any]) -> str:
    # text.content keeps whitespace exactly; plain_text is display-only
    content = _as_dict(item.get("text")).get("content")
    if isinstance(content, str):
        return content
    plain = item.get("plain_text")
    return plain if isinstance(plain, str) else ""


def _custom_emoji(item: Dict[str, Any]) -> Optional[CustomEmoji]:
    mention = _as_dict(item.get("mention"))
    if item.get("type") != "mention" or mention.get("type") != "custom_emoji":
        return None
    emoji = _as_dict(mention.get("custom_emoji"))
    url = emoji.get("url")
    if not isinstance(url, str) or not url:
        return None
    return CustomEmoji(url=url, name=str(emoji.get("name") or ""))


def normalize_rich_text(raw: Any) -> List[RichTextRun]:
    if not isinstance(raw, list):
        return []
    runs: List[RichTextRun] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        href = item.get("href")
        runs.append(
            RichTextRun(
                text=_run_text(item),
                annotations=_annotations(item.get("annotations")),
                href=href if isinstance(href, str) else None,
                emoji=_custom_emoji(item),
            )
        )
    return runs


def image_url(payload: Any) -> Optional[str]:
    """Hosted file URL, else external URL, else None."""
    payload = _as_dict(payload)
    for source in ("file", "external"):
        url = _as_dict(payload.get(source)).get("url")
        if isinstance(url, str) and url:
            return url
    return None


def callout_icon(raw: Any) -> Optional[CalloutIcon]:
    icon = _as_dict(raw)
    kind = icon.get("type")
    if kind == "emoji" and isinstance(icon.get("emoji"), str) and icon["emoji"]:
        return CalloutIcon(kind="emoji", emoji=icon["emoji"])
    if kind in ("external", "file"):
        url = _as_dict(icon.get(kind)).get("url")
        if isinstance(url, str) and url:
            return CalloutIcon(kind=kind, url=url)
    if kind == "custom_emoji":
        url = _as_dict(icon.get("custom_emoji")).get("url")
        if isinstance(url, str) and url:
            return CalloutIcon(kind="external", url=url)
    if isinstance(icon.get("emoji"), str) and icon["emoji"]:
        return CalloutIcon(kind="emoji", emoji=icon["emoji"])
    return None


def declared_ratio(raw_column: Dict[str, Any]) -> Optional[float]:
    """Column width ratio reported by the source, if usable."""
    candidates = (
        _as_dict(raw_column.get("format")).get("column_ratio"),
        _as_dict(raw_column.get("column")).get("width_ratio"),
    )
    for value in candidates:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if math.isfinite(value) and 0 < value <= 1:
            return float(value)
    return None


def reconcile_column_ratios(declared: Sequence[Optional[float]]) -> List[Optional[float]]:
    """Give undeclared columns an equal share of what the declared ones leave.

    When the declared ratios already use up the whole width, undeclared
    columns keep ``None`` and count as weight 1 at layout time.
    """
    defined_total = sum(ratio for ratio in declared if ratio is not None)
    undefined_count = sum(1 for ratio in declared if ratio is None)
    fallback: Optional[float] = None
    if undefined_count > 0 and defined_total < 1:
        fallback = (1 - defined_total) / undefined_count
    return [ratio if ratio is not None else fallback for ratio in declared]


def _normalize_columns(raw_columns: Any) -> List[Column]:
    columns = [
        column
        for column in (raw_columns if isinstance(raw_columns, list) else [])
        if isinstance(column, dict) and column.get("type", "column") == "column"
    ]
    ratios = reconcile_column_ratios([declared_ratio(column) for column in columns])
    return [
        Column(
            id=str(column.get("id", "")),
            ratio=ratio,
            blocks=normalize_blocks(column.get("children") or [], in_column=True),
        )
        for column, ratio in zip(columns, ratios)
    ]


def normalize(
    raw: Any, *, in_column: bool = False, allow_nested: bool = True
) -> Optional[Block]:
    """Project one raw block onto the closed block model.

    Returns None for unsupported kinds, for column lists inside a column and,
    below the first nesting level, for column lists in list children.
    """
    if not isinstance(raw, dict):
        return None
    kind = raw.get("type")
    if kind not in SUPPORTED_KINDS:
        return None
    if kind == "column_list" and (in_column or not allow_nested):
        return None

    base = {"id": str(raw.get("id", "")), "has_children": bool(raw.get("has_children"))}
    payload = _as_dict(raw.get(kind))

    if kind in _TEXT_KINDS:
        return TextBlock(type=kind, rich_text=normalize_rich_text(payload.get("rich_text")), **base)
    if kind in _LIST_KINDS:
        nested: List[Block] = []
        if allow_nested:
            nested = [
                child
                for child in (normalize(item, in_column=in_column, allow_nested=False)
                              for item in raw.get("nested") or [])
                if child is not None
            ]
        return ListItemBlock(
            type=kind,
            rich_text=normalize_rich_text(payload.get("rich_text")),
            nested=nested,
            **base,
        )
    if kind == "image":
        return ImageBlock(
            url=image_url(payload), caption=normalize_rich_text(payload.get("caption")), **base
        )
    if kind == "divider":
        return DividerBlock(**base)
    if kind == "callout":
        color = payload.get("color")
        return CalloutBlock(
            rich_text=normalize_rich_text(payload.get("rich_text")),
            icon=callout_icon(payload.get("icon")),
            color=color if isinstance(color, str) and color else "default",
            **base,
        )
    return ColumnListBlock(columns=_normalize_columns(raw.get("columns")), **base)


def normalize_blocks(raws: Iterable[Any], *, in_column: bool = False) -> List[Block]:
    """Normalize a raw sequence, dropping everything outside the closed set."""
    blocks: List[Block] = []
    for raw in raws:
        block = normalize(raw, in_column=in_column)
        if block is not None:
            blocks.append(block)
    return blocks
