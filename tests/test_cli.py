import json

import pytest

from conftest import write
from nova.cli import main

CONFIG = """
title = "CLI Site"

[collections.posts]
folder = "content/posts"
layout = "templates/base.html"
url = "/posts/{slug}.html"

[collections.posts.schema]
title = "string"
date = "string?"

[[indexes]]
name = "home"
sources = ["posts"]
path = "index.html"
layout = "templates/base.html"
"""


def test_build_command(project, write_post, capsys):
    write(project / "site.config.toml", CONFIG)
    source = write_post("first.md", title="First", date="2024-01-01")

    main(["build", "--root", str(project), "--graph-file", "graph.json"])

    assert (project / "dist" / "posts" / "first.html").exists()
    assert "First" in (project / "dist" / "index.html").read_text(encoding="utf-8")
    out = capsys.readouterr().out
    assert "Build completed in" in out
    assert f"Site generated in: {project / 'dist'}" in out

    graph = json.loads((project / "graph.json").read_text(encoding="utf-8"))
    assert (project / "dist" / "posts" / "first.html").as_posix() in graph["edges"][source.as_posix()]


def test_output_default_comes_from_config(project, write_post):
    write(project / "site.config.toml", 'output = "site"\n' + CONFIG)
    write_post("first.md", title="First")
    main(["--root", str(project)])
    assert (project / "site" / "posts" / "first.html").exists()


def test_missing_config_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["build", "--root", str(tmp_path)])
    assert excinfo.value.code == 1
    assert "No site.config.* file found" in capsys.readouterr().err


def test_fatal_build_error_exits(project, write_post, capsys):
    write(project / "site.config.toml", CONFIG)
    write_post("first.md", title="First")
    (project / "templates" / "base.html").unlink()
    with pytest.raises(SystemExit) as excinfo:
        main(["build", "--root", str(project)])
    assert excinfo.value.code == 1
    assert "Build failed: FileNotFoundError" in capsys.readouterr().err
