"""Site, collection and document types, and the front-matter validator.

Collections declare their metadata shape as a mapping of field name to
``FieldSpec``. The validator turns that shape into a pydantic model at
runtime, so arbitrary per-collection field sets are checked by one generic
code path.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from pydantic import ConfigDict, Field, ValidationError, create_model

FIELD_TYPES: dict[str, Any] = {
    "string": str,
    "number": int | float,
    "integer": int,
    "boolean": bool,
    "list": list[str],
    "any": Any,
}

Clock = Callable[[], dt.datetime]


class DocumentValidationError(Exception):
    """Raised when a document's metadata does not match its collection schema."""

    def __init__(self, issues: list[tuple[str, str]]) -> None:
        self.issues = issues
        super().__init__("; ".join(f"{path}: {message}" for path, message in issues))


class Today:
    """Default marker resolved to the injected clock's ISO date."""

    def __repr__(self) -> str:
        return "TODAY"


TODAY = Today()
DEFAULT_FACTORIES = {"today": TODAY}


def resolve_default(value: Any, clock: Clock) -> Any:
    if isinstance(value, Today):
        return clock().date().isoformat()
    if callable(value):
        return value()
    return value


@dataclass(frozen=True)
class FieldSpec:
    kind: str
    optional: bool = False

    def __post_init__(self) -> None:
        if self.kind not in FIELD_TYPES:
            raise ValueError(f"Unknown field kind: {self.kind!r}")

    @classmethod
    def parse(cls, value: str) -> FieldSpec:
        """Read the ``"string"`` / ``"string?"`` shorthand."""
        text = value.strip()
        optional = text.endswith("?")
        return cls(text.rstrip("?").strip(), optional)

    def annotation(self) -> Any:
        base = FIELD_TYPES[self.kind]
        return Optional[base] if self.optional else base


@dataclass(frozen=True)
class Document:
    collection: str
    slug: str
    source_path: Path
    body: str
    metadata: Mapping[str, Any] = field(default_factory=dict)
    body_html: str = ""
    body_text: str = ""
    url: str = ""

    def context(self) -> dict:
        data = dict(self.metadata)
        data.update(
            collection=self.collection,
            slug=self.slug,
            source_path=str(self.source_path),
            body=self.body,
            body_html=self.body_html,
            body_text=self.body_text,
            url=self.url,
        )
        return data

    def __getitem__(self, key: str) -> Any:
        return self.context()[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.context().get(key, default)


class BlankMissing(dict):
    def __missing__(self, key: str) -> str:
        return ""


@dataclass(frozen=True)
class UrlPattern:
    """Path mapping written as a format string, e.g. ``/posts/{slug}/index.html``."""

    pattern: str

    def __call__(self, doc: Document) -> str:
        return self.pattern.format_map(BlankMissing(doc.context()))


@dataclass(frozen=True)
class Collection:
    folder: str
    schema: Mapping[str, FieldSpec]
    layout: str
    url: Callable[[Document], str]
    defaults: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        schema = {
            name: spec if isinstance(spec, FieldSpec) else FieldSpec.parse(str(spec))
            for name, spec in self.schema.items()
        }
        object.__setattr__(self, "schema", schema)
        if isinstance(self.url, str):
            object.__setattr__(self, "url", UrlPattern(self.url))


@dataclass(frozen=True)
class IndexDefinition:
    name: str
    sources: tuple[str, ...]
    path: str
    layout: str
    partial: str = "index"

    def __post_init__(self) -> None:
        object.__setattr__(self, "sources", tuple(self.sources))


@dataclass(frozen=True)
class SiteConfig:
    title: str
    collections: Mapping[str, Collection]
    indexes: tuple[IndexDefinition, ...] = ()
    languages: tuple[str, ...] = ()
    editor: bool = False
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "indexes", tuple(self.indexes))
        object.__setattr__(self, "languages", tuple(self.languages))

    def template_context(self) -> dict:
        data = dict(self.extra)
        data.update(title=self.title, languages=list(self.languages), editor=self.editor)
        return data


@dataclass(frozen=True)
class BuildContext:
    root: Path
    dist: Path
    public_dir: Path
    templates_dir: Path
    config: SiteConfig
    config_path: Optional[Path] = None
    content_dir: Optional[Path] = None
    clock: Clock = dt.datetime.now

    @classmethod
    def for_root(
        cls,
        root: Path,
        config: SiteConfig,
        config_path: Optional[Path] = None,
        dist: Optional[Path] = None,
        clock: Optional[Clock] = None,
    ) -> BuildContext:
        root = Path(root).resolve()
        dist = Path(dist) if dist is not None else root / "dist"
        if not dist.is_absolute():
            dist = root / dist
        return cls(
            root=root,
            dist=dist,
            public_dir=root / "public",
            templates_dir=root / "templates",
            config=config,
            config_path=config_path,
            content_dir=root / "content",
            clock=clock or dt.datetime.now,
        )


class SchemaValidator:
    """Validates front-matter records for one collection.

    Optional fields the source omits are filled from the collection's
    defaults. Callable defaults (and ``TODAY``) are evaluated once per
    document, at validation time.
    """

    def __init__(self, collection: Collection, clock: Clock = dt.datetime.now) -> None:
        self.collection = collection
        self.clock = clock
        self.model = self._build_model()

    def _default_factory(self, value: Any) -> Callable[[], Any]:
        return lambda: resolve_default(value, self.clock)

    def _build_model(self):
        fields = {}
        # Field names are aliased so front-matter keys never clash with model attributes.
        for position, (name, spec) in enumerate(self.collection.schema.items()):
            if not spec.optional:
                info = Field(..., alias=name)
            elif name in self.collection.defaults:
                info = Field(default_factory=self._default_factory(self.collection.defaults[name]), alias=name)
            else:
                info = Field(None, alias=name)
            fields[f"field_{position}"] = (spec.annotation(), info)
        return create_model(
            "DocumentMetadata",
            __config__=ConfigDict(extra="ignore"),
            **fields,
        )

    def validate(self, record: Mapping[str, Any]) -> dict:
        data = {key: value for key, value in record.items() if value is not None}
        try:
            model = self.model.model_validate(data)
        except ValidationError as exc:
            issues = [
                (".".join(str(part) for part in error["loc"]), error["msg"])
                for error in exc.errors()
            ]
            raise DocumentValidationError(issues) from exc
        return model.model_dump(by_alias=True, exclude_none=True)
