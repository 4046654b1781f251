from __future__ import annotations

import html as html_lib
import re
import shutil
from pathlib import Path
from typing import Any, Mapping

import markdown
from jinja2 import ChainableUndefined, DictLoader, Environment

from .content import normalize_list_spacing

TAG_RE = re.compile(r"<[^>]+>")
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "toc"]
TEMPLATE_ASSET_DIRS = ("css", "js")


def render_markdown(body: str) -> str:
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS)
    return md.convert(normalize_list_spacing(body))


def strip_tags(html_text: str) -> str:
    return html_lib.unescape(TAG_RE.sub("", html_text))


class Composer:
    """Renders templates against a flat name -> template mapping of partials.

    Missing variables render as empty strings. Partials are pulled in with
    ``{% include "name" %}`` and may include each other.
    """

    def __init__(self, partials: Mapping[str, str]) -> None:
        self.partials = dict(partials)
        self.env = Environment(
            loader=DictLoader(self.partials),
            undefined=ChainableUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        return self.env.from_string(template).render(context)

    def render_partial(self, name: str, context: Mapping[str, Any]) -> str:
        return self.env.get_template(name).render(context)

    def compose(self, partial: str, layout: str, context: Mapping[str, Any]) -> str:
        """Render ``partial``, then ``layout`` with the result as ``content``."""
        inner = self.render_partial(partial, context)
        return self.render(layout, {**context, "content": inner})


def load_partials(templates_dir: Path) -> dict[str, str]:
    partials = {}
    if not templates_dir.exists():
        return partials
    for path in sorted(templates_dir.glob("*.html")):
        if path.is_file():
            partials[path.stem] = read_template(path)
    return partials


def read_template(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_static(static_dir: Path, output_dir: Path) -> None:
    if not static_dir.exists():
        return
    output_dir.mkdir(parents=True, exist_ok=True)
    for item in sorted(static_dir.iterdir()):
        dest = output_dir / item.name
        if item.is_dir():
            shutil.copytree(item, dest, dirs_exist_ok=True)
        else:
            shutil.copy2(item, dest)


def copy_template_assets(templates_dir: Path, output_dir: Path) -> None:
    for name in TEMPLATE_ASSET_DIRS:
        copy_static(templates_dir / name, output_dir / name)
