from services.config_manager_service.src import properties_format


def test_separators_and_comments():
    """Test the three separator styles and both comment markers."""
    text = (
        "# comment\n"
        "! another comment\n"
        "\n"
        "a=1\n"
        "b : 2\n"
        "c 3\n"
        "   d=indented\n"
    )
    assert properties_format.loads(text) == {"a": "1", "b": "2", "c": "3", "d": "indented"}


def test_empty_value_and_key_only():
    """Test keys without values."""
    assert properties_format.loads("empty=\nbare\n") == {"empty": "", "bare": ""}


def test_line_continuation():
    """Test backslash continuation joins lines and drops leading whitespace."""
    text = "list=one,\\\n     two,\\\n     three\n"
    assert properties_format.loads(text) == {"list": "one,two,three"}


def test_escaped_backslash_is_not_continuation():
    """Test that an even number of trailing backslashes ends the line."""
    text = "path=C:\\\\\nnext=1\n"
    assert properties_format.loads(text) == {"path": "C:\\", "next": "1"}


def test_escapes():
    """Test character and unicode escapes in keys and values."""
    text = "key\\=with\\:seps=tab\\there\nunicode=caf\\u00e9\n"
    assert properties_format.loads(text) == {"key=with:seps": "tab\there", "unicode": "café"}


def test_value_keeps_separator_characters():
    """Test that only the first separator splits key and value."""
    assert properties_format.loads("url=jdbc:h2:mem=test\n") == {"url": "jdbc:h2:mem=test"}


def test_later_duplicates_win():
    """Test that a repeated key keeps the last value."""
    assert properties_format.loads("a=1\na=2\n") == {"a": "2"}


def test_dump_and_load_file(tmp_path):
    """Test writing special characters and reading them back from disk."""
    path = tmp_path / "out.properties"
    properties = {"b.key": "line\nbreak", "a key": " leading space", "c": "x=y"}
    properties_format.dump(properties, path)

    text = path.read_text(encoding="utf-8")
    assert text.splitlines()[0].startswith("a\\ key=")
    assert properties_format.load(path) == properties


def test_dumps_empty():
    """Test that an empty mapping produces empty text."""
    assert properties_format.dumps({}) == ""


def test_unicode_line_separators_stay_in_values():
    """Test that only CR, LF and CRLF end a line."""
    text = "msg=first\u2028second\nnel=x\x85y\r\nsep=p\x1cq\rnext=1\n"
    assert properties_format.loads(text) == {
        "msg": "first\u2028second",
        "nel": "x\x85y",
        "sep": "p\x1cq",
        "next": "1",
    }


def test_dumps_keeps_unicode_line_separators():
    """Test that values with unusual separator characters survive a dump and load."""
    properties = {"a": "x\x85y", "b": "p\x1cq", "c": "l\u2029m\x0bn"}
    assert properties_format.loads(properties_format.dumps(properties)) == properties
