from pathlib import Path

import pytest

from conftest import write_files
from inkpress.config import SiteConfig, load_config
from inkpress.pipeline import SiteBuilder, install_transformers
from inkpress.transform import BUILTIN_TRANSFORMERS, TransformerRegistry, TransformPipeline
from inkpress.util import short_digest, write_text_file


@pytest.fixture
def builder(site_config: SiteConfig, pipeline: TransformPipeline) -> SiteBuilder:
    return SiteBuilder(site_config, pipeline=pipeline)


def test_build_writes_pages_posts_and_tags(builder: SiteBuilder, site_root: Path) -> None:
    report = builder.build()

    assert report.succeeded
    public = site_root / "public"
    written = [path for path in public.rglob("*") if path.is_file() and path.suffix != ".lock"]
    assert sorted(path.relative_to(public).as_posix() for path in written) == [
        "2024/01/first.html",
        "2024/02/second.html",
        "2024/03/third.html",
        "index.html",
        "tag/a.html",
        "tag/b.html",
        "tag/c.html",
    ]
    assert len(report.written) == 7
    assert ("Pages written", "7") in list(report.summary_rows())


def test_index_lists_posts_newest_first(builder: SiteBuilder, site_root: Path) -> None:
    assert builder.compile_template("index.html.sx")

    text = (site_root / "public" / "index.html").read_text(encoding="utf-8")
    assert text == (
        '<!DOCTYPE html>\n<html lang="en"><body><ul>'
        '<li><a href="/2024/03/third.html">Third</a></li>'
        '<li><a href="/2024/02/second.html">Second</a></li>'
        '<li><a href="/2024/01/first.html">First</a></li>'
        "</ul></body></html>"
    )


def test_post_page_is_wrapped_by_post_and_default_layouts(builder: SiteBuilder, site_root: Path) -> None:
    assert builder.compile_template("_posts/2024-01-01-first.html.sx")

    text = (site_root / "public" / "2024" / "01" / "first.html").read_text(encoding="utf-8")
    assert text.endswith("<body><article><h2>First</h2><p>one & <b></p></article></body></html>")


def test_tag_page_lists_only_tagged_posts(builder: SiteBuilder, site_root: Path) -> None:
    assert builder.compile_tag("a")

    text = (site_root / "public" / "tag" / "a.html").read_text(encoding="utf-8")
    assert "<h2>a</h2><ul><li>Second</li><li>First</li></ul>" in text
    assert "Third" not in text


def test_tags_carry_counts_and_urls(builder: SiteBuilder) -> None:
    tags = builder.get_tags()

    assert [(tag.name, tag.count, tag.url) for tag in tags] == [
        ("a", 2, "/tag/a.html"),
        ("b", 2, "/tag/b.html"),
        ("c", 1, "/tag/c.html"),
    ]


def test_clashing_tag_slugs_get_distinct_pages(site_root: Path, pipeline: TransformPipeline) -> None:
    write_files(
        site_root,
        {"template/_posts/2024-04-01-cpp.html.sx": "; layout: post\n; title: Cpp\n; tag: C++\n[:p \"plus\"]\n"},
    )
    builder = SiteBuilder(load_config(site_root / "site.toml"), pipeline=pipeline)

    urls = {tag.name: tag.url for tag in builder.get_tags()}

    assert urls["C++"] == f"/tag/c-{short_digest('C++')}.html"
    assert urls["c"] == f"/tag/c-{short_digest('c')}.html"
    assert urls["a"] == "/tag/a.html"
    assert builder.tag_output_path("C++") != builder.tag_output_path("c")

    assert builder.compile_all_tags()

    public = site_root / "public"
    cpp_page = (public / urls["C++"].lstrip("/")).read_text(encoding="utf-8")
    c_page = (public / urls["c"].lstrip("/")).read_text(encoding="utf-8")
    assert "<li>Cpp</li>" in cpp_page
    assert "Third" not in cpp_page
    assert "<li>Third</li>" in c_page
    assert "Cpp" not in c_page


def test_failing_tag_does_not_stop_sibling_tags(
    site_config: SiteConfig, pipeline: TransformPipeline, site_root: Path
) -> None:
    def writer(path, text):
        if Path(path).name == "a.html":
            raise OSError("read-only")
        return write_text_file(path, text)

    builder = SiteBuilder(site_config, pipeline=pipeline, writer=writer)

    assert builder.compile_all_tags() is False

    tag_dir = site_root / "public" / "tag"
    assert (tag_dir / "b.html").exists()
    assert (tag_dir / "c.html").exists()
    assert not (tag_dir / "a.html").exists()
    assert builder.report.failures == {"tag:a": "read-only"}
    assert set(builder.report.written) == {"tag:b", "tag:c"}


def test_post_content_is_escaped_body_markup(site_root: Path, pipeline: TransformPipeline) -> None:
    write_files(site_root, {"template/feed.xml.sx": "[:feed (for [p (:posts site)] [:entry (:content p)])]\n"})
    builder = SiteBuilder(load_config(site_root / "site.toml"), pipeline=pipeline)

    assert builder.compile_template("feed.xml")

    text = (site_root / "public" / "feed.xml").read_text(encoding="utf-8")
    assert text.startswith("<feed><entry>&lt;p&gt;three&lt;/p&gt;</entry>")
    assert "<entry>&lt;p&gt;one &amp; &lt;b&gt;&lt;/p&gt;</entry></feed>" in text


def test_broken_template_does_not_stop_the_build(site_root: Path, pipeline: TransformPipeline) -> None:
    write_files(site_root, {"template/broken.html.sx": "[:p (no-such-function 1)]\n"})
    builder = SiteBuilder(load_config(site_root / "site.toml"), pipeline=pipeline)

    assert builder.compile_all_templates() is False

    assert "template:broken.html.sx" in builder.report.failures
    assert "no-such-function" in builder.report.failures["template:broken.html.sx"]
    assert (site_root / "public" / "index.html").exists()
    assert (site_root / "public" / "2024" / "03" / "third.html").exists()
    assert not (site_root / "public" / "broken.html").exists()


def test_missing_layout_is_reported_per_template(site_root: Path, pipeline: TransformPipeline) -> None:
    write_files(site_root, {"template/orphan.html.sx": "; layout: nowhere\n[:p]\n"})
    builder = SiteBuilder(load_config(site_root / "site.toml"), pipeline=pipeline)

    report = builder.build()

    assert not report.succeeded
    assert list(report.failures) == ["template:orphan.html.sx"]
    assert "nowhere" in report.failures["template:orphan.html.sx"]


def test_writer_failure_is_fail_soft(site_config: SiteConfig, pipeline: TransformPipeline) -> None:
    def failing_writer(path, text):
        raise OSError("disk full")

    builder = SiteBuilder(site_config, pipeline=pipeline, writer=failing_writer)

    assert builder.compile_tag("a") is False
    assert builder.report.failures == {"tag:a": "disk full"}


def test_template_fields_reach_the_site_context(site_root: Path, pipeline: TransformPipeline) -> None:
    write_files(
        site_root,
        {"template/about.html.sx": '; title: About\n; lang: fr\n[:p (:name site) "|" (:title site) "|" (:lang site)]\n'},
    )
    builder = SiteBuilder(load_config(site_root / "site.toml"), pipeline=pipeline)

    document = builder.generate_html("about.html")

    assert document.nodes[0].children == ["Test Site", "|", "About", "|", "fr"]
    assert document.meta["lang"] == "fr"


def test_install_transformers_is_idempotent(site_root: Path) -> None:
    write_files(site_root, {"site.toml": 'transformers = ["markdown", "external-links"]\n'})
    config = load_config(site_root / "site.toml")
    pipeline = TransformPipeline(TransformerRegistry())

    install_transformers(config, pipeline)
    install_transformers(config, pipeline)

    assert list(pipeline.registry) == [BUILTIN_TRANSFORMERS["markdown"], BUILTIN_TRANSFORMERS["external-links"]]


def test_markdown_transformer_runs_on_page_bodies(site_root: Path) -> None:
    write_files(
        site_root,
        {
            "site.toml": 'transformers = ["markdown"]\n',
            "template/notes.html.sx": '[:markdown "# Notes"]\n',
        },
    )
    config = load_config(site_root / "site.toml")
    builder = SiteBuilder(config, pipeline=install_transformers(config, TransformPipeline(TransformerRegistry())))

    assert builder.compile_template("notes.html")
    assert (site_root / "public" / "notes.html").read_text(encoding="utf-8") == "<h1>Notes</h1>"
