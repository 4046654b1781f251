from __future__ import annotations

import shutil
from pathlib import Path


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def clean_output_dir(output_dir: Path, project_root: Path) -> None:
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    if output_resolved == root_resolved:
        raise ValueError("Refusing to clean project root.")
    if not output_resolved.is_relative_to(root_resolved):
        raise ValueError(f"Refusing to clean output directory outside project root: {output_dir}")
    shutil.rmtree(output_dir)
