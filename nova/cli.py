from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Optional

from jinja2 import TemplateError
from watchdog.events import FileSystemEvent

from .build import full_build
from .config import ConfigError, find_config, load_site
from .graph import BuildGraph, write_graph
from .schema import BuildContext
from .watch import watch_and_build


def resolve_config_path(root: Path, value: str) -> Path:
    if value:
        path = Path(value)
        if not path.is_absolute():
            path = root / path
        return path.resolve()
    path = find_config(root)
    if path is None:
        raise ConfigError(f"No site.config.* file found in {root}")
    return path.resolve()


def fail(exc: Exception) -> None:
    print(f"Build failed: {exc.__class__.__name__}: {exc}", file=sys.stderr)
    sys.exit(1)


def run_build(ctx: BuildContext, graph_file: Optional[Path]) -> None:
    start = time.perf_counter()
    try:
        graph = full_build(ctx)
    except (OSError, TemplateError, ValueError) as exc:
        fail(exc)
    if graph_file is not None:
        write_graph(graph_file, graph)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {ctx.dist}")


def run_watch(ctx: BuildContext, graph_file: Optional[Path]) -> None:
    def on_build(graph: BuildGraph, event: Optional[FileSystemEvent]) -> None:
        if graph_file is not None:
            write_graph(graph_file, graph)
        if event is not None:
            print(f"Rebuilt ({event.event_type} {event.src_path})")

    try:
        rebuilder = watch_and_build(ctx, reload_config=load_site, on_build=on_build)
    except (OSError, TemplateError, ValueError) as exc:
        fail(exc)
    print(f"Site generated in: {ctx.dist}")
    print("Watching for changes... (Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nStopping file watcher...")
    finally:
        rebuilder.stop()


def main(argv: Optional[list[str]] = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--root", default=".")
    pre_parser.add_argument("--config", default="")
    pre_args, _ = pre_parser.parse_known_args(argv)
    root = Path(pre_args.root).resolve()
    try:
        config_path = resolve_config_path(root, pre_args.config)
        site = load_site(config_path)
    except ConfigError as exc:
        fail(exc)

    def cfg_str(key: str, default: str) -> str:
        value = site.extra.get(key)
        return default if value is None else str(value)

    parser = argparse.ArgumentParser(description="Build a static site from Markdown collections.")
    parser.add_argument(
        "command",
        nargs="?",
        choices=["build", "watch"],
        default="build",
        help="`build` renders the site once, `watch` rebuilds on every change.",
    )
    parser.add_argument("--root", default=pre_args.root, help="Project root directory.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site.config.{py,toml,yaml,json}.")
    parser.add_argument("--output", default=cfg_str("output", "dist"), help="Output directory for the site.")
    parser.add_argument(
        "--graph-file",
        default=cfg_str("graph_file", ""),
        help="Write the build dependency graph to this JSON file after each build.",
    )
    args = parser.parse_args(argv)

    ctx = BuildContext.for_root(root, site, config_path=config_path, dist=Path(args.output))
    graph_file = None
    if args.graph_file:
        graph_file = Path(args.graph_file)
        if not graph_file.is_absolute():
            graph_file = root / graph_file

    if args.command == "watch":
        run_watch(ctx, graph_file)
    else:
        run_build(ctx, graph_file)
