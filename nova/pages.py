from __future__ import annotations

import re
import sys
from dataclasses import replace
from pathlib import Path

from .content import list_sources, parse_front_matter, slugify
from .graph import BuildGraph
from .render import Composer, read_template, render_markdown, strip_tags, write_text
from .schema import BuildContext, Collection, Document, DocumentValidationError, IndexDefinition, SchemaValidator

DOCUMENT_PARTIAL = "post"
INDEX_PARTIAL = "index"
INDEX_SUFFIX_RE = re.compile(r"index\.html$")


def output_path(dist: Path, url: str) -> Path:
    return dist / url.lstrip("/")


def sort_by_date(docs: list[Document]) -> list[Document]:
    # Plain string comparison on the raw value; "2024-12-01" > "2024-1-3" > "2024-01-02".
    return sorted(docs, key=lambda doc: str(doc.get("date") or ""), reverse=True)


def load_document(path: Path, name: str, collection: Collection, validator: SchemaValidator) -> tuple[Document, str]:
    """Parse, validate and render one source file.

    Returns the document and the raw output path from the collection's URL
    mapping. The document's ``url`` has any trailing ``index.html`` removed.
    """
    meta, body = parse_front_matter(path.read_text(encoding="utf-8"))
    body = body.strip()
    metadata = validator.validate({**meta, "body": body})
    body = metadata.pop("body", body)
    body_html = render_markdown(body)
    doc = Document(
        collection=name,
        slug=slugify(path.stem),
        source_path=path,
        body=body,
        metadata=metadata,
        body_html=body_html,
        body_text=strip_tags(body_html),
    )
    url = collection.url(doc)
    return replace(doc, url=INDEX_SUFFIX_RE.sub("", url)), url


def report_schema_error(path: Path, exc: DocumentValidationError) -> None:
    print(f"Schema error in {path}", file=sys.stderr)
    for field_path, message in exc.issues:
        print(f"  - {field_path} {message}", file=sys.stderr)


def build_collection(
    ctx: BuildContext,
    name: str,
    collection: Collection,
    composer: Composer,
    graph: BuildGraph,
) -> list[Document]:
    folder = ctx.root / collection.folder
    layout_path = ctx.root / collection.layout
    validator = SchemaValidator(collection, ctx.clock)
    site = ctx.config.template_context()
    docs = []
    for path in list_sources(folder):
        try:
            doc, url = load_document(path, name, collection, validator)
        except DocumentValidationError as exc:
            report_schema_error(path, exc)
            continue
        layout = read_template(layout_path)
        html = composer.compose(DOCUMENT_PARTIAL, layout, {**doc.context(), "site": site})
        out_path = output_path(ctx.dist, url)
        write_text(out_path, html)
        graph.add_edge(path, out_path)
        graph.add_edge(layout_path, out_path)
        graph.record_document(doc)
        docs.append(doc)
    return sort_by_date(docs)


def build_index(
    ctx: BuildContext,
    index: IndexDefinition,
    docs_by_collection: dict[str, list[Document]],
    composer: Composer,
    graph: BuildGraph,
) -> Path:
    items = [doc for source in index.sources for doc in docs_by_collection.get(source, [])]
    layout_path = ctx.root / index.layout
    layout = read_template(layout_path)
    context = {"items": [doc.context() for doc in items], "site": ctx.config.template_context()}
    html = composer.compose(index.partial or INDEX_PARTIAL, layout, context)
    out_path = output_path(ctx.dist, index.path)
    write_text(out_path, html)
    graph.add_edge(layout_path, out_path)
    # Every rendered document counts as an input, not only this index's sources.
    for docs in docs_by_collection.values():
        for doc in docs:
            graph.add_edge(doc.source_path, out_path)
    return out_path
