from __future__ import annotations

import json
from pathlib import Path

from .schema import Document


class BuildGraph:
    """Which source files fed which output files during one build.

    A graph is filled while a build runs and is never merged with the graph
    of an earlier build.
    """

    def __init__(self) -> None:
        self.edges: dict[Path, set[Path]] = {}
        self.docs: dict[Path, Document] = {}

    def add_edge(self, source: Path, output: Path) -> None:
        self.edges.setdefault(Path(source), set()).add(Path(output))

    def record_document(self, doc: Document) -> None:
        self.docs[Path(doc.source_path)] = doc

    def outputs_for(self, source: Path) -> set[Path]:
        return set(self.edges.get(Path(source), ()))

    def sources_for(self, output: Path) -> set[Path]:
        output = Path(output)
        return {source for source, outputs in self.edges.items() if output in outputs}

    def outputs(self) -> set[Path]:
        return set().union(*self.edges.values()) if self.edges else set()

    def to_dict(self) -> dict:
        return {
            "edges": {
                source.as_posix(): sorted(out.as_posix() for out in outputs)
                for source, outputs in sorted(self.edges.items())
            },
            "docs": {
                source.as_posix(): {"collection": doc.collection, "slug": doc.slug, "url": doc.url}
                for source, doc in sorted(self.docs.items())
            },
        }


def write_graph(path: Path, graph: BuildGraph) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(graph.to_dict(), indent=2, ensure_ascii=True), encoding="utf-8")
