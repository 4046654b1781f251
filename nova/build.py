from __future__ import annotations

from .graph import BuildGraph
from .pages import build_collection, build_index
from .render import Composer, copy_static, copy_template_assets, load_partials
from .schema import BuildContext
from .utils import clean_output_dir


def full_build(ctx: BuildContext) -> BuildGraph:
    """Rebuild the whole site from scratch and return its dependency graph.

    The output directory is removed before anything is rendered, so a build
    that fails part way leaves a partial tree behind.
    """
    graph = BuildGraph()
    clean_output_dir(ctx.dist, ctx.root)
    ctx.dist.mkdir(parents=True, exist_ok=True)

    copy_static(ctx.public_dir, ctx.dist)
    copy_template_assets(ctx.templates_dir, ctx.dist)

    composer = Composer(load_partials(ctx.templates_dir))
    docs_by_collection = {}
    for name, collection in ctx.config.collections.items():
        docs_by_collection[name] = build_collection(ctx, name, collection, composer, graph)

    for index in ctx.config.indexes:
        build_index(ctx, index, docs_by_collection, composer, graph)

    return graph
