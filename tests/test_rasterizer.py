"""Pillow rasterizer tests."""

import io
import unittest

from PIL import Image

from notion_carousel.export.coordinator import export_override
from notion_carousel.export.rasterizer import PillowRasterizer, font_class, transform_scale
from notion_carousel.models.blocks import (
    Annotations,
    CalloutBlock,
    Column,
    ColumnListBlock,
    DividerBlock,
    ImageBlock,
    ListItemBlock,
    RichTextRun,
    TextBlock,
)
from notion_carousel.models.visual import RasterOptions
from notion_carousel.render.renderer import render_deck
from notion_carousel.style.resolver import resolve_style

RED = (200, 10, 10)
BACKGROUND = (16, 32, 48)
IMAGE_URL = "https://img/red.png"


def _png(width: int, height: int) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), RED).save(buffer, format="PNG")
    return buffer.getvalue()


def _handle(blocks, sizes=None):
    return render_deck([("Slide", blocks)], resolve_style(), intrinsic_sizes=sizes)[0]


def _close(actual, expected, tolerance=3):
    return all(abs(a - b) <= tolerance for a, b in zip(actual, expected))


def _options(**kwargs):
    return RasterOptions(width_px=1080, height_px=1350, background_color="#102030", **kwargs)


class TestHelpers(unittest.TestCase):
    def test_transform_scale(self) -> None:
        self.assertAlmostEqual(transform_scale({"transform": "scale(0.5)"}), 0.5)
        self.assertAlmostEqual(transform_scale({"transform": "none"}), 1.0)
        self.assertAlmostEqual(transform_scale({"scale": 0.25}), 0.25)
        self.assertAlmostEqual(transform_scale({}), 1.0)

    def test_font_class(self) -> None:
        self.assertEqual(font_class("Inter, sans-serif"), "sans")
        self.assertEqual(font_class("Georgia, serif"), "serif")
        self.assertEqual(font_class("'SFMono-Regular', Consolas, monospace"), "mono")


class TestPillowRasterizer(unittest.IsolatedAsyncioTestCase):
    async def test_jpeg_output_size(self) -> None:
        handle = export_override(_handle([]), _options())
        data = await PillowRasterizer().rasterize(handle, _options())
        self.assertTrue(data.startswith(b"\xff\xd8"))
        with Image.open(io.BytesIO(data)) as image:
            self.assertEqual(image.format, "JPEG")
            self.assertEqual(image.size, (1080, 1350))

    async def test_scale_option(self) -> None:
        options = _options(scale=0.5)
        data = await PillowRasterizer().rasterize(export_override(_handle([]), options), options)
        with Image.open(io.BytesIO(data)) as image:
            self.assertEqual(image.size, (540, 675))

    def test_background_color(self) -> None:
        image = PillowRasterizer().paint(export_override(_handle([]), _options()), _options())
        self.assertEqual(image.getpixel((5, 5)), BACKGROUND)
        self.assertEqual(image.getpixel((1075, 1345)), BACKGROUND)

    def test_image_pasted(self) -> None:
        handle = _handle([ImageBlock(id="i", url=IMAGE_URL)], sizes={IMAGE_URL: (40, 20)})
        rasterizer = PillowRasterizer({IMAGE_URL: _png(40, 20)})
        image = rasterizer.paint(export_override(handle, _options()), _options())
        # 880 x 440 box starting at the content origin (100, 100)
        self.assertTrue(_close(image.getpixel((540, 300)), RED))
        self.assertEqual(image.getpixel((540, 600)), BACKGROUND)

    def test_missing_image_placeholder(self) -> None:
        handle = _handle([ImageBlock(id="i", url=IMAGE_URL)], sizes={IMAGE_URL: (40, 20)})
        image = PillowRasterizer().paint(export_override(handle, _options()), _options())
        self.assertEqual(image.getpixel((540, 300)), (235, 236, 237))

    def test_leftover_preview_scale_shrinks_drawing(self) -> None:
        handle = _handle([ImageBlock(id="i", url=IMAGE_URL)], sizes={IMAGE_URL: (40, 20)})
        rasterizer = PillowRasterizer({IMAGE_URL: _png(40, 20)})
        image = rasterizer.paint(handle, _options())
        self.assertFalse(_close(image.getpixel((540, 300)), RED))
        self.assertTrue(_close(image.getpixel((100, 100)), RED))

    def test_text_blocks_draw_ink(self) -> None:
        run = RichTextRun(text="Hello carousel world " * 8, annotations=Annotations(bold=True, underline=True))
        blocks = [
            TextBlock(id="h", type="heading_1", rich_text=[RichTextRun(text="Title")]),
            TextBlock(id="q", type="quote", rich_text=[run]),
            ListItemBlock(id="n", type="numbered_list_item", rich_text=[run],
                          nested=[TextBlock(id="c", type="paragraph", rich_text=[RichTextRun(text="child")])]),
            DividerBlock(id="d"),
            CalloutBlock(id="co", rich_text=[RichTextRun(text="x = 1", annotations=Annotations(code=True))]),
            ColumnListBlock(id="cl", columns=[
                Column(id="a", blocks=[TextBlock(id="l", type="paragraph", rich_text=[RichTextRun(text="left")])]),
                Column(id="b", blocks=[TextBlock(id="r", type="paragraph", rich_text=[RichTextRun(text="right")])]),
            ]),
        ]
        options = RasterOptions(width_px=1080, height_px=1350)
        image = PillowRasterizer().paint(export_override(_handle(blocks), options), options)
        content = image.crop((100, 100, 980, 1250))
        extrema = content.convert("L").getextrema()
        self.assertLess(extrema[0], 128)
        # padding stays blank
        self.assertEqual(image.crop((0, 0, 1080, 90)).convert("L").getextrema(), (255, 255))


if __name__ == "__main__":
    unittest.main()
