from nova.content import list_sources, normalize_list_spacing, parse_front_matter, slugify


def test_front_matter_split():
    meta, body = parse_front_matter("---\ntitle: Hello\ntags: [a, b]\n---\n# Heading\n\nText\n")
    assert meta == {"title": "Hello", "tags": ["a", "b"]}
    assert body == "# Heading\n\nText"


def test_without_front_matter_whole_text_is_body():
    text = "Just a body\nwith two lines\n"
    assert parse_front_matter(text) == ({}, text)


def test_unclosed_front_matter_is_body():
    text = "---\ntitle: Hello\nno closing line\n"
    assert parse_front_matter(text) == ({}, text)


def test_malformed_yaml_degrades_to_body():
    text = "---\ntitle: [unclosed\n---\nBody\n"
    assert parse_front_matter(text) == ({}, text)


def test_non_mapping_front_matter_degrades_to_body():
    text = "---\n- one\n- two\n---\nBody\n"
    assert parse_front_matter(text) == ({}, text)


def test_empty_front_matter_block():
    assert parse_front_matter("---\n---\nBody") == ({}, "Body")


def test_dates_stay_raw_strings():
    meta, _ = parse_front_matter("---\ndate: 2024-1-3\nupdated: 2024-01-02\n---\n")
    assert meta == {"date": "2024-1-3", "updated": "2024-01-02"}


def test_byte_order_mark_is_ignored():
    meta, body = parse_front_matter("\ufeff---\ntitle: Hi\n---\nBody")
    assert meta == {"title": "Hi"}
    assert body == "Body"


def test_slugify():
    assert slugify("Hello World!") == "hello-world"
    assert slugify("My_First Post") == "my-first-post"
    assert slugify("--Trim--") == "trim"
    assert slugify("!!!") == "untitled"


def test_list_spacing_inserts_blank_line():
    assert normalize_list_spacing("Intro\n- a\n- b") == "Intro\n\n- a\n- b"


def test_list_spacing_leaves_fences_alone():
    text = "```\nIntro\n- a\n```"
    assert normalize_list_spacing(text) == text


def test_list_sources_recursive_and_sorted(tmp_path):
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "two.md").write_text("x")
    (tmp_path / "one.md").write_text("x")
    (tmp_path / "notes.txt").write_text("x")
    assert list_sources(tmp_path) == [tmp_path / "b" / "two.md", tmp_path / "one.md"]


def test_list_sources_missing_folder(tmp_path):
    assert list_sources(tmp_path / "missing") == []


def test_slugify_keeps_unicode_letters():
    assert slugify("Été à Paris") == "été-à-paris"
