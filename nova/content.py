from __future__ import annotations

import re
from pathlib import Path

import yaml

CONTENT_EXT = ".md"
FRONT_MATTER_DELIMITER = "---"
LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")


class FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader that keeps dates as the raw strings written in the file."""


FrontMatterLoader.yaml_implicit_resolvers = {
    key: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for key, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"[^\w]+", "-", text, flags=re.UNICODE)
    text = text.strip("-_").replace("_", "-")
    return text or "untitled"


def parse_front_matter(text: str) -> tuple[dict, str]:
    """Split a source file into its metadata mapping and body text.

    Anything that does not look like a well-formed YAML mapping between two
    ``---`` lines leaves the metadata empty and the whole file as body.
    """
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == FRONT_MATTER_DELIMITER:
            end = i
            break
    if end is None:
        return {}, clean_text

    try:
        meta = yaml.load("\n".join(lines[1:end]), Loader=FrontMatterLoader)
    except yaml.YAMLError:
        return {}, clean_text
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        return {}, clean_text
    body = "\n".join(lines[end + 1 :])
    return {str(key): value for key, value in meta.items()}, body


def normalize_list_spacing(text: str) -> str:
    # Python-Markdown needs a blank line before a list that follows a paragraph.
    lines = text.splitlines()
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in lines:
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
            continue
        list_match = LIST_MARKER_RE.match(line)
        if list_match and not list_match.group("indent"):
            if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                out.append("")
        out.append(line)
    return "\n".join(out)


def list_sources(root: Path, ext: str = CONTENT_EXT) -> list[Path]:
    if not root.exists():
        return []
    files = [path for path in root.rglob(f"*{ext}") if path.is_file()]
    return sorted(files, key=lambda p: p.as_posix())
