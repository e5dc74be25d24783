"""Fixed Notion color palettes."""

from __future__ import annotations

from typing import Optional

TEXT_COLORS = {
    "gray": "#9B9A97",
    "brown": "#64473A",
    "orange": "#D9730D",
    "yellow": "#DFAB01",
    "green": "#0F7B6C",
    "blue": "#0B6E99",
    "purple": "#6940A5",
    "pink": "#AD1A72",
    "red": "#E03E3E",
}

BACKGROUND_COLORS = {
    "gray_background": "#EBECED",
    "brown_background": "#E9E5E3",
    "orange_background": "#FAEBDD",
    "yellow_background": "#FBF3DB",
    "green_background": "#DDEDEA",
    "blue_background": "#DDEBF1",
    "purple_background": "#EAE4F2",
    "pink_background": "#F4DFEB",
    "red_background": "#FBE4E4",
}


def is_background_key(key: Optional[str]) -> bool:
    return bool(key) and key.endswith("_background")


def text_color(key: Optional[str]) -> Optional[str]:
    return TEXT_COLORS.get(key or "")


def background_color(key: Optional[str]) -> Optional[str]:
    return BACKGROUND_COLORS.get(key or "")
