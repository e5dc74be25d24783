"""Slide renderer tests."""

import unittest

from notion_carousel.models.blocks import (
    Annotations,
    CalloutBlock,
    CalloutIcon,
    Column,
    ColumnListBlock,
    CustomEmoji,
    DividerBlock,
    ImageBlock,
    ListItemBlock,
    RichTextRun,
    TextBlock,
)
from notion_carousel.normalize.blocks import normalize_blocks
from notion_carousel.render.renderer import (
    DEFAULT_CALLOUT_ICON,
    build_numbering_map,
    column_weights,
    fit_image,
    nested_letter,
    preview_ancestors,
    render_deck,
    render_slide,
)
from notion_carousel.render.rich_text import render_rich_text
from notion_carousel.style.resolver import resolve_style


def _run(text, **annotations):
    return RichTextRun(text=text, annotations=Annotations(**annotations))


def _para(block_id, text):
    return TextBlock(id=block_id, type="paragraph", rich_text=[_run(text)] if text else [])


def _item(block_id, kind, text="item", nested=None):
    return ListItemBlock(id=block_id, type=kind, rich_text=[_run(text)], nested=nested or [])


def _content(tree):
    return tree.children[0].children


class TestEndToEnd(unittest.TestCase):
    def test_heading_and_empty_paragraph(self) -> None:
        blocks = normalize_blocks(
            [
                {"id": "h", "type": "heading_1", "heading_1": {"rich_text": [{"plain_text": "Title"}]}},
                {"id": "p", "type": "paragraph", "paragraph": {"rich_text": []}},
            ]
        )
        sheet = resolve_style({})
        tree = render_slide(blocks, sheet)

        self.assertEqual(tree.kind, "slide")
        self.assertEqual((tree.width, tree.height), (1080, 1350))
        nodes = _content(tree)
        self.assertEqual([node.kind for node in nodes], ["heading_1", "spacer"])
        self.assertEqual(nodes[0].plain_text(), "Title")
        self.assertAlmostEqual(nodes[1].height, 44 * 1.6)
        self.assertAlmostEqual(nodes[1].height, 70.4)

    def test_empty_quote_is_spacer(self) -> None:
        tree = render_slide([TextBlock(id="q", type="quote")], resolve_style())
        self.assertEqual(_content(tree)[0].kind, "spacer")

    def test_quote_wraps_text(self) -> None:
        tree = render_slide([TextBlock(id="q", type="quote", rich_text=[_run("hmm")])], resolve_style())
        quote = _content(tree)[0]
        self.assertEqual(quote.kind, "quote")
        self.assertEqual(quote.style["border_left_width"], 5)
        self.assertEqual(quote.plain_text(), "hmm")


class TestNumbering(unittest.TestCase):
    def test_run_resets_after_interruption(self) -> None:
        blocks = [
            _item("n1", "numbered_list_item"),
            _item("n2", "numbered_list_item"),
            _item("b1", "bulleted_list_item"),
            _item("n3", "numbered_list_item"),
        ]
        numbering = build_numbering_map(blocks)
        self.assertEqual(numbering, {"n1": 1, "n2": 2, "n3": 1})
        self.assertNotIn("b1", numbering)

    def test_markers_rendered(self) -> None:
        blocks = [_item("n1", "numbered_list_item"), _item("n2", "numbered_list_item"), _item("b1", "bulleted_list_item")]
        nodes = _content(render_slide(blocks, resolve_style()))
        markers = [node.children[0].children[0] for node in nodes]
        self.assertEqual(markers[0].text, "1.")
        self.assertEqual(markers[1].text, "2.")
        self.assertEqual(markers[2].style["shape"], "disc")

    def test_nested_letters(self) -> None:
        self.assertEqual([nested_letter(i) for i in (0, 1, 2, 25, 26, 27)], ["a", "b", "c", "z", "aa", "ab"])

    def test_nested_children_markers(self) -> None:
        numbered = _item("n1", "numbered_list_item", nested=[_para("c1", "one"), _para("c2", "two")])
        bulleted = _item("b1", "bulleted_list_item", nested=[_para("c3", "three")])
        nodes = _content(render_slide([numbered, bulleted], resolve_style()))
        lettered = nodes[0].find_all("nested_item")
        self.assertEqual([item.children[0].text for item in lettered], ["a.", "b."])
        self.assertEqual(lettered[1].plain_text(), "two")
        circle = nodes[1].find_all("nested_item")[0].children[0]
        self.assertEqual(circle.style["shape"], "circle")
        self.assertEqual(circle.style["border_width"], 1.5)
        self.assertEqual(nodes[1].find_all("nested_item")[0].style["margin_left"], 66)


class TestImages(unittest.TestCase):
    def test_fit_image_branches(self) -> None:
        self.assertEqual(fit_image((2000, 500), 880, 600), (880.0, 220.0))
        self.assertEqual(fit_image((500, 2000), 880, 600), (150.0, 600.0))
        self.assertEqual(fit_image(None, 880, 600), (880.0, 600.0))

    def test_image_nodes(self) -> None:
        blocks = [
            ImageBlock(id="wide", url="https://img/wide.png"),
            ImageBlock(id="tall", url="https://img/tall.png"),
            ImageBlock(id="none"),
        ]
        tree = render_slide(
            blocks,
            resolve_style(),
            url_transform=lambda url: f"/proxy?url={url}",
            intrinsic_sizes={"https://img/wide.png": (2000, 500), "https://img/tall.png": (500, 2000)},
        )
        images = tree.find_all("image")
        self.assertEqual(len(images), 2)
        self.assertEqual((images[0].width, images[0].height), (880.0, 220.0))
        self.assertEqual((images[1].width, images[1].height), (150.0, 600.0))
        self.assertEqual(images[0].src, "/proxy?url=https://img/wide.png")


class TestCallouts(unittest.TestCase):
    def _callout(self, color="default", icon=None, text="Heads up"):
        return CalloutBlock(id="c", rich_text=[_run(text)] if text else [], color=color, icon=icon)

    def test_empty_callout_omitted(self) -> None:
        tree = render_slide([self._callout(text="")], resolve_style())
        self.assertEqual(_content(tree), [])

    def test_default_icon_and_neutral_box(self) -> None:
        node = _content(render_slide([self._callout()], resolve_style()))[0]
        self.assertEqual(node.children[0].text, DEFAULT_CALLOUT_ICON)
        self.assertEqual(node.style["background_color"], "#FFFFFF")
        self.assertEqual(node.style["border_color"], "#E0E0E0")

    def test_background_color_key(self) -> None:
        node = _content(render_slide([self._callout(color="blue_background")], resolve_style()))[0]
        self.assertEqual(node.style["background_color"], "#DDEBF1")
        self.assertNotIn("border_width", node.style)

    def test_text_color_key(self) -> None:
        node = _content(render_slide([self._callout(color="red")], resolve_style()))[0]
        self.assertEqual(node.children[1].style["color"], "#E03E3E")
        self.assertEqual(node.style["background_color"], "#FFFFFF")

    def test_icon_priority(self) -> None:
        emoji = CalloutIcon(kind="emoji", emoji="🔥")
        external = CalloutIcon(kind="external", url="https://i/icon.png")
        self.assertEqual(_content(render_slide([self._callout(icon=emoji)], resolve_style()))[0].children[0].text, "🔥")
        icon = _content(render_slide([self._callout(icon=external)], resolve_style()))[0].children[0]
        self.assertEqual(icon.src, "https://i/icon.png")
        self.assertEqual(icon.width, 40)


class TestColumns(unittest.TestCase):
    def test_weights(self) -> None:
        self.assertEqual(column_weights([None, None]), [0.5, 0.5])
        weights = column_weights([0.3, 0.35, 0.35])
        self.assertAlmostEqual(sum(weights), 1.0)
        self.assertAlmostEqual(weights[0], 0.3)

    def test_column_widths_and_numbering_per_column(self) -> None:
        block = ColumnListBlock(
            id="cl",
            columns=[
                Column(id="a", ratio=0.5, blocks=[_item("n1", "numbered_list_item"), _item("n2", "numbered_list_item")]),
                Column(id="b", ratio=0.5, blocks=[_item("n3", "numbered_list_item")]),
            ],
        )
        node = _content(render_slide([block], resolve_style()))[0]
        self.assertEqual(node.kind, "columns")
        widths = [column.width for column in node.children]
        self.assertAlmostEqual(widths[0], (880 - 16) / 2)
        self.assertAlmostEqual(sum(widths) + 16, 880)
        markers = [marker.text for marker in node.find_all("marker")]
        self.assertEqual(markers, ["1.", "2.", "1."])

    def test_nested_columns_not_rendered(self) -> None:
        inner = ColumnListBlock(id="inner", columns=[Column(id="x", blocks=[_para("p", "deep")])])
        outer = ColumnListBlock(id="outer", columns=[Column(id="a", blocks=[inner, _para("q", "shallow")])])
        node = _content(render_slide([outer], resolve_style()))[0]
        self.assertEqual(len(node.find_all("columns")), 1)
        self.assertEqual(node.plain_text(), "shallow")


class TestRichText(unittest.TestCase):
    def test_annotations_and_colors(self) -> None:
        sheet = resolve_style()
        nodes = render_rich_text(
            [
                _run("bold", bold=True, italic=True, underline=True, strikethrough=True),
                _run("red", color="red"),
                _run("hl", color="yellow_background"),
                _run("odd", color="chartreuse"),
                _run("x = 1", code=True),
                _run(""),
            ],
            sheet,
        )
        self.assertEqual(len(nodes), 5)
        self.assertEqual(nodes[0].style["font_weight"], 600)
        self.assertEqual(nodes[0].style["font_style"], "italic")
        self.assertEqual(nodes[0].style["text_decoration"], "underline line-through")
        self.assertEqual(nodes[1].style["color"], "#E03E3E")
        self.assertEqual(nodes[2].style["background_color"], "#FBF3DB")
        self.assertEqual(nodes[3].style, {})
        self.assertEqual(nodes[4].kind, "code")
        self.assertEqual(nodes[4].style["font_size"], 38)

    def test_custom_emoji(self) -> None:
        run = RichTextRun(text=":x:", emoji=CustomEmoji(url="https://e/x.png", name="x"))
        node = render_rich_text([run], resolve_style(), url_transform=str.upper)[0]
        self.assertEqual(node.kind, "emoji")
        self.assertEqual(node.src, "HTTPS://E/X.PNG")
        self.assertEqual((node.width, node.height), (44, 44))


class TestDeck(unittest.TestCase):
    def test_divider(self) -> None:
        node = _content(render_slide([DividerBlock(id="d")], resolve_style()))[0]
        self.assertEqual(node.kind, "divider")
        self.assertEqual(node.width, 880)

    def test_render_deck_handles(self) -> None:
        handles = render_deck(
            [("First", [_para("a", "one")]), ("Second", [_para("b", "two")])],
            resolve_style(),
            preview_width=400,
        )
        self.assertEqual([handle.name for handle in handles], ["01", "02"])
        self.assertEqual(handles[1].title, "Second")
        self.assertEqual(handles[0].ancestors[0]["width"], 400)
        self.assertEqual(handles[0].ancestors[0]["height"], 500)
        self.assertIn("scale(", handles[0].ancestors[1]["transform"])

    def test_preview_ancestors(self) -> None:
        outer, inner = preview_ancestors(540, 1080, 1350)
        self.assertEqual(outer["height"], 675)
        self.assertEqual(inner["transform"], "scale(0.50000)")


if __name__ == "__main__":
    unittest.main()
