from datetime import date

from inkpress.template.options import DocumentOptions, TagRef, parse_options


def test_recognized_keys_are_kept_and_unknown_dropped() -> None:
    options, body = parse_options(";layout:hello\n;title:world\ndummy:xxx")

    assert options.layout == "hello"
    assert options.title == "world"
    assert not hasattr(options, "dummy")
    assert "dummy" not in options.as_fields()
    assert body == "dummy:xxx"


def test_unknown_header_keys_are_dropped() -> None:
    options, _ = parse_options("; layout: post\n; colour: blue\n[:p]")

    assert options.as_fields() == {"layout": "post"}


def test_value_keeps_colons_after_the_first() -> None:
    options, _ = parse_options("; title: Part 1: The Beginning\n")

    assert options.title == "Part 1: The Beginning"


def test_missing_header_returns_whole_text_as_body() -> None:
    options, body = parse_options('[:p "hi"]\n')

    assert options == DocumentOptions()
    assert body == '[:p "hi"]\n'


def test_blank_lines_and_malformed_lines_are_skipped() -> None:
    text = "; layout: post\n\n;\n; just a comment\n; title: Hello\n[:p]\n"

    options, body = parse_options(text)

    assert options.layout == "post"
    assert options.title == "Hello"
    assert body == "[:p]\n"


def test_tags_split_into_records_without_duplicates() -> None:
    options, _ = parse_options("; tag: python, web  python static\n")

    assert options.tags == (TagRef("python"), TagRef("web"), TagRef("static"))
    assert options.as_fields()["tag"] == [TagRef("python"), TagRef("web"), TagRef("static")]


def test_legacy_at_syntax_and_typed_values() -> None:
    options, _ = parse_options("; @layout default\n; @format HTML5\n; date: 2024-05-01\n; date2: x\n")

    assert options.layout == "default"
    assert options.format == "html5"
    assert options.date == date(2024, 5, 1)


def test_unparseable_date_is_ignored() -> None:
    options, _ = parse_options("; date: someday\n")

    assert options.date is None


def test_merged_with_fills_only_unset_fields() -> None:
    child = DocumentOptions(layout="post", title="Child")
    parent = DocumentOptions(layout="root", title="Parent", format="html5")

    merged = child.merged_with(parent)

    assert merged.layout == "post"
    assert merged.title == "Child"
    assert merged.format == "html5"
