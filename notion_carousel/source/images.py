"""Image byte loading and intrinsic size probing."""

from __future__ import annotations

import io
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

from ..errors import SourceUnavailable
from ..models.blocks import Block, CalloutBlock, ColumnListBlock, ImageBlock, ListItemBlock
from .client import ContentSourceClient

logger = logging.getLogger(__name__)

Size = Tuple[int, int]


def collect_image_urls(blocks: Sequence[Block]) -> List[str]:
    """Return image, callout icon and custom emoji URLs in document order."""
    urls: List[str] = []

    def visit(items: Iterable[Block]) -> None:
        for block in items:
            if isinstance(block, ImageBlock) and block.url:
                urls.append(block.url)
            elif isinstance(block, CalloutBlock) and block.icon and block.icon.url:
                urls.append(block.icon.url)
            elif isinstance(block, ColumnListBlock):
                for column in block.columns:
                    visit(column.blocks)
            if isinstance(block, ListItemBlock):
                visit(block.nested)
            for run in getattr(block, "rich_text", []):
                if run.emoji is not None:
                    urls.append(run.emoji.url)

    visit(blocks)
    return list(dict.fromkeys(urls))


def intrinsic_size(data: bytes) -> Optional[Size]:
    """Return (width, height) of encoded image bytes, or None if unreadable."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
    except (UnidentifiedImageError, OSError):
        return None
    if width <= 0 or height <= 0:
        return None
    return width, height


async def load_images(client: ContentSourceClient, urls: Iterable[str]) -> Dict[str, bytes]:
    """Fetch each URL sequentially; unreachable images are left out."""
    images: Dict[str, bytes] = {}
    for url in urls:
        try:
            images[url] = await client.fetch_image(url)
        except SourceUnavailable as exc:
            logger.warning("Skipping image %s: %s", url, exc)
    return images


def measure_images(images: Dict[str, bytes]) -> Dict[str, Size]:
    sizes: Dict[str, Size] = {}
    for url, data in images.items():
        size = intrinsic_size(data)
        if size is not None:
            sizes[url] = size
    return sizes
