from .build import full_build
from .graph import BuildGraph
from .schema import TODAY, BuildContext, Collection, Document, FieldSpec, IndexDefinition, SiteConfig, UrlPattern
from .watch import watch_and_build

__all__ = [
    "TODAY",
    "BuildContext",
    "BuildGraph",
    "Collection",
    "Document",
    "FieldSpec",
    "IndexDefinition",
    "SiteConfig",
    "UrlPattern",
    "full_build",
    "watch_and_build",
]
