from __future__ import annotations

import datetime as dt
from pathlib import Path

import pytest

from nova.schema import TODAY, BuildContext, Collection, IndexDefinition, SiteConfig

FIXED_NOW = dt.datetime(2025, 3, 14, 9, 30)

BASE_LAYOUT = (
    "<html><head><title>{{ title }} | {{ site.title }}</title></head>\n"
    "<body>{{ content }}</body></html>\n"
)
POST_PARTIAL = '<article><h1>{{ title }}</h1><p class="desc">{{ description }}</p>{{ body_html }}</article>'
INDEX_PARTIAL = (
    "<ul>{% for item in items %}"
    '<li><a href="{{ item.url }}">{{ item.title }}</a> {{ item.date }}</li>'
    "{% endfor %}</ul>"
)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def posts_collection(folder: str = "content/posts", prefix: str = "markdown") -> Collection:
    return Collection(
        folder=folder,
        schema={"title": "string", "date": "string?", "description": "string?", "body": "string?"},
        defaults={"date": TODAY, "description": ""},
        layout="templates/base.html",
        url=lambda doc: f"/{prefix}/{doc.slug}/index.html",
    )


def make_site(collections: dict | None = None, indexes: tuple | None = None) -> SiteConfig:
    if collections is None:
        collections = {"posts": posts_collection()}
    if indexes is None:
        indexes = (
            IndexDefinition(name="home", sources=("posts",), path="index.html", layout="templates/base.html"),
            IndexDefinition(
                name="markdownIndex",
                sources=("posts",),
                path="/markdown/index.html",
                layout="templates/base.html",
                partial="index",
            ),
        )
    return SiteConfig(title="Test Site", collections=collections, indexes=indexes)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project tree with templates and static assets but no content yet."""
    tmp_path = tmp_path.resolve()
    write(tmp_path / "templates" / "base.html", BASE_LAYOUT)
    write(tmp_path / "templates" / "post.html", POST_PARTIAL)
    write(tmp_path / "templates" / "index.html", INDEX_PARTIAL)
    write(tmp_path / "templates" / "css" / "site.css", "body { margin: 0; }\n")
    write(tmp_path / "templates" / "js" / "site.js", "console.log('nova');\n")
    write(tmp_path / "public" / "robots.txt", "User-agent: *\n")
    write(tmp_path / "public" / "img" / "logo.svg", "<svg></svg>\n")
    (tmp_path / "content" / "posts").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def make_ctx(project: Path):
    def factory(site: SiteConfig | None = None) -> BuildContext:
        return BuildContext.for_root(
            project,
            site or make_site(),
            config_path=project / "site.config.toml",
            clock=lambda: FIXED_NOW,
        )

    return factory


@pytest.fixture
def ctx(make_ctx) -> BuildContext:
    return make_ctx()


@pytest.fixture
def write_post(project: Path):
    def factory(name: str, title: str | None = None, date: str | None = None, body: str = "Hello.", folder: str = "content/posts") -> Path:
        lines = ["---"]
        if title is not None:
            lines.append(f'title: "{title}"')
        if date is not None:
            lines.append(f"date: {date}")
        lines.append("---")
        lines.append(body)
        return write(project / folder / name, "\n".join(lines) + "\n")

    return factory
