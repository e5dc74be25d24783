"""CLI entry point for the Notion carousel pipeline."""

from __future__ import annotations

import argparse
import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .config import load_config, load_style_file
from .errors import CarouselError, ExportFailure, SourceUnavailable
from .export.coordinator import export_all
from .export.deck import build_deck
from .export.rasterizer import PillowRasterizer
from .logging_utils import log_event
from .models.blocks import Block
from .models.config import Config
from .models.export import ExportedSlide
from .models.visual import RasterOptions
from .render.renderer import render_deck
from .source.client import NotionClient
from .source.fetcher import BlockTreeFetcher
from .source.identifier import require_identifier, resolve_identifier
from .source.images import collect_image_urls, load_images, measure_images
from .style.resolver import parse_color, resolve_style, resolve_style_config
from .style.session import StyleSession


def _generate_run_id() -> str:
    """Generate a timestamp-based run ID."""
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--project-root",
        type=str,
        default=None,
        help="Path to project root (default: auto-detect)",
    )


def _add_style_override_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override one style parameter (repeatable; VALUE is parsed as JSON when possible)",
    )


def _load(args: argparse.Namespace) -> Config:
    return load_config(Path(args.project_root) if getattr(args, "project_root", None) else None)


def _open_client(config: Config) -> NotionClient:
    if not config.notion_token:
        raise SourceUnavailable("Not connected to Notion: set NOTION_TOKEN", status=401)
    return NotionClient(
        config.notion_token,
        api_base=config.notion_api_base,
        notion_version=config.notion_version,
        page_size=config.page_size,
        timeout=config.request_timeout,
    )


def _parse_override(text: str) -> Tuple[str, Any]:
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise ValueError(f"Style override must be KEY=VALUE: {text}")
    try:
        return key.strip(), json.loads(value)
    except json.JSONDecodeError:
        return key.strip(), value


def _style_values(args: argparse.Namespace, config: Config) -> Dict[str, Any]:
    path = getattr(args, "style", None) or config.style_path
    values = load_style_file(Path(path)) if path else {}
    session = StyleSession()
    try:
        session.update(dict(_parse_override(item) for item in getattr(args, "set", None) or []))
    except KeyError as exc:
        raise ValueError(exc.args[0]) from exc
    values.update(session.raw)
    return values


def cmd_resolve_id(args: argparse.Namespace) -> int:
    page_id = resolve_identifier(args.reference)
    if page_id is None:
        print(f"ERROR: Invalid page ID or URL: {args.reference}")
        return 1
    print(page_id)
    return 0


async def _list_pages(config: Config, parent: str) -> List[Any]:
    page_id = require_identifier(parent)
    async with _open_client(config) as client:
        return await BlockTreeFetcher(client).list_child_pages(page_id)


async def _list_databases(config: Config) -> List[Any]:
    async with _open_client(config) as client:
        return await BlockTreeFetcher(client).search_databases()


async def _list_database_pages(config: Config, database: str) -> List[Any]:
    database_id = require_identifier(database)
    async with _open_client(config) as client:
        return await BlockTreeFetcher(client).list_database_pages(database_id)


def cmd_pages(args: argparse.Namespace) -> int:
    """List the child pages (slides) of a parent page."""
    try:
        pages = asyncio.run(_list_pages(_load(args), args.parent))
    except (CarouselError, FileNotFoundError) as exc:
        print(f"ERROR: {exc}")
        return 1
    for page in pages:
        print(f"{page.id}\t{page.title}")
    return 0


def cmd_databases(args: argparse.Namespace) -> int:
    try:
        databases = asyncio.run(_list_databases(_load(args)))
    except (CarouselError, FileNotFoundError) as exc:
        print(f"ERROR: {exc}")
        return 1
    for database in databases:
        print(f"{database.id}\t{database.title}")
    return 0


def cmd_database_pages(args: argparse.Namespace) -> int:
    try:
        pages = asyncio.run(_list_database_pages(_load(args), args.database))
    except (CarouselError, FileNotFoundError) as exc:
        print(f"ERROR: {exc}")
        return 1
    for page in pages:
        print(f"{page.id}\t{page.title}\t{page.url or ''}")
    return 0


async def _fetch_page(config: Config, reference: str):
    async with _open_client(config) as client:
        return await BlockTreeFetcher(client).load_page(reference)


def cmd_fetch(args: argparse.Namespace) -> int:
    """Fetch one page and print (or save) its normalized block tree."""
    try:
        tree = asyncio.run(_fetch_page(_load(args), args.page))
    except (CarouselError, FileNotFoundError) as exc:
        print(f"ERROR: {exc}")
        return 1
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(tree.to_json(), encoding="utf-8")
        print(f"Block tree saved to: {out_path}")
    else:
        print(tree.to_json())
    return 0


def cmd_style(args: argparse.Namespace) -> int:
    """Print the resolved (clamped) style configuration."""
    try:
        config = _load(args)
        values = _style_values(args, config)
    except (FileNotFoundError, ValueError) as exc:
        print(f"ERROR: {exc}")
        return 1
    print(resolve_style_config(values).to_json())
    return 0


async def _export(args: argparse.Namespace, config: Config, run_dir: Path, log_path: Path) -> int:
    style_values = _style_values(args, config)

    async with _open_client(config) as client:
        fetcher = BlockTreeFetcher(client)

        def loaded(position: int, total: int, page: Any) -> None:
            print(f"Loaded slide {position}/{total}: {page.title}")

        slides = await fetcher.load_slides(args.parent, on_progress=loaded)
        log_event(log_path, "SLIDES_LOADED", {"parent": args.parent, "slide_count": len(slides)})
        if not slides:
            print("ERROR: No child pages found under the parent page")
            return 1

        urls: List[str] = []
        for _, tree in slides:
            urls.extend(collect_image_urls(tree.blocks))
        images = await load_images(client, dict.fromkeys(urls))

    sheet = resolve_style(style_values)
    log_event(log_path, "STYLE_RESOLVED", {"overrides": sorted(style_values)})

    decks: List[tuple[str, List[Block]]] = [(page.title, tree.blocks) for page, tree in slides]
    handles = render_deck(
        decks,
        sheet,
        intrinsic_sizes=measure_images(images),
        preview_width=config.preview_width,
    )
    options = RasterOptions(
        width_px=sheet.canvas.width,
        height_px=sheet.canvas.height,
        background_color=parse_color(args.background, sheet.canvas.background_color)
        if args.background
        else sheet.canvas.background_color,
        quality=config.export_quality,
    )

    exported: List[ExportedSlide] = []

    def deliver(slide: ExportedSlide) -> None:
        (run_dir / slide.filename).write_bytes(slide.data)
        exported.append(slide)
        log_event(log_path, "SLIDE_EXPORTED", slide.to_dict())
        print(f"Exported {slide.filename}")

    try:
        report = await export_all(handles, PillowRasterizer(images), options, deliver=deliver)
    except ExportFailure as exc:
        log_event(log_path, "EXPORT_FAILED", {
            "slide_index": exc.slide_index,
            "exported_count": exc.exported_count,
            "error": str(exc.cause),
        })
        print(f"ERROR: {exc}")
        return 1

    payload: Dict[str, Any] = {"exported": report.exported, "total": report.total}
    if args.pptx:
        deck_path = build_deck(exported, options.width_px, options.height_px, run_dir / "slides.pptx")
        payload["pptx"] = str(deck_path)
        print(f"Deck saved to: {deck_path}")
    log_event(log_path, "EXPORT_DONE", payload)
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Fetch, render and rasterize every child page of a parent page."""
    try:
        config = _load(args)
    except FileNotFoundError as exc:
        print(f"ERROR: {exc}")
        return 1

    run_id = args.run_id if args.run_id else _generate_run_id()
    run_dir = Path(config.runs_dir) / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    log_path = run_dir / "run_log.jsonl"

    try:
        result = asyncio.run(_export(args, config, run_dir, log_path))
    except (CarouselError, FileNotFoundError, ValueError) as exc:
        log_event(log_path, "EXPORT_FAILED", {"error": str(exc)})
        print(f"ERROR: {exc}")
        return 1
    if result == 0:
        print(f"Run artifacts in: {run_dir}")
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Notion carousel CLI - render Notion pages as slides")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser("resolve-id", help="Resolve a page URL or ID")
    resolve_parser.add_argument("reference", help="Notion page URL or ID")
    resolve_parser.set_defaults(func=cmd_resolve_id)

    pages_parser = subparsers.add_parser("pages", help="List the child pages of a parent page")
    _add_common_args(pages_parser)
    pages_parser.add_argument("--parent", type=str, required=True, help="Parent page URL or ID")
    pages_parser.set_defaults(func=cmd_pages)

    databases_parser = subparsers.add_parser("databases", help="List accessible databases")
    _add_common_args(databases_parser)
    databases_parser.set_defaults(func=cmd_databases)

    database_pages_parser = subparsers.add_parser(
        "database-pages", help="List the pages of a database"
    )
    _add_common_args(database_pages_parser)
    database_pages_parser.add_argument(
        "--database", type=str, required=True, help="Database URL or ID"
    )
    database_pages_parser.set_defaults(func=cmd_database_pages)

    fetch_parser = subparsers.add_parser("fetch", help="Fetch a page as a normalized block tree")
    _add_common_args(fetch_parser)
    fetch_parser.add_argument("--page", type=str, required=True, help="Page URL or ID")
    fetch_parser.add_argument("--out", type=str, default=None, help="Write JSON here instead of stdout")
    fetch_parser.set_defaults(func=cmd_fetch)

    style_parser = subparsers.add_parser("style", help="Print the resolved style configuration")
    _add_common_args(style_parser)
    style_parser.add_argument("--style", type=str, default=None, help="JSON style config file")
    _add_style_override_arg(style_parser)
    style_parser.set_defaults(func=cmd_style)

    export_parser = subparsers.add_parser("export", help="Export every child page as a JPEG slide")
    _add_common_args(export_parser)
    export_parser.add_argument("--parent", type=str, required=True, help="Parent page URL or ID")
    export_parser.add_argument("--style", type=str, default=None, help="JSON style config file")
    _add_style_override_arg(export_parser)
    export_parser.add_argument(
        "--background", type=str, default=None, help="Export background as R,G,B (default: style bg)"
    )
    export_parser.add_argument(
        "--run-id", type=str, default=None, help="Run ID (default: auto-generated timestamp)"
    )
    export_parser.add_argument(
        "--pptx", action="store_true", help="Also bundle the exported slides into slides.pptx"
    )
    export_parser.set_defaults(func=cmd_export)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
