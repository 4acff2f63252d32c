from pathlib import Path

import pytest

from conftest import write_files
from inkpress.template import (
    LayoutCycleError,
    MissingLayoutError,
    MissingTemplateError,
    Node,
    TemplateCompiler,
    TemplateLoader,
    TemplateSyntaxError,
)
from inkpress.transform import TransformerRegistry, TransformPipeline


def test_single_layout(layout_compiler: TemplateCompiler) -> None:
    render = layout_compiler.layouts.get_layout("test1")

    assert render({"title": "a"}, "b", "c") == [Node("p", ["a"]), Node("p", [["b", "c"]])]


def test_multiple_layouts_wrap_outwards(layout_compiler: TemplateCompiler) -> None:
    render = layout_compiler.layouts.get_layout("test2")

    assert render({"title": "a"}, "b") == [
        Node("h1", ["default"]),
        Node("p", ["a"]),
        Node("p", [["b"]]),
    ]


def test_resolve_chain_order(layout_compiler: TemplateCompiler) -> None:
    chain = layout_compiler.layouts.resolve_chain("test2")

    assert [layout.name for layout in chain] == ["test2", "default"]


def test_template_body_is_innermost_content(tmp_path: Path, layout_compiler: TemplateCompiler) -> None:
    write_files(tmp_path, {"template/page.html.sx": '; layout: test2\n; title: ignored\n[:em "body"]\n'})

    render = layout_compiler.compile_template("page.html")

    assert render({"title": "T"}) == [
        Node("h1", ["default"]),
        Node("p", ["T"]),
        Node("p", [[Node("em", ["body"])]]),
    ]
    assert render.options.title == "ignored"


def test_allow_layout_false_returns_bare_body(tmp_path: Path, layout_compiler: TemplateCompiler) -> None:
    write_files(tmp_path, {"template/page.html.sx": '; layout: test2\n[:em "body"]\n'})

    render = layout_compiler.compile_template("page.html.sx", allow_layout=False)

    assert render({}) == [Node("em", ["body"])]


def test_layout_without_content_placeholder_drops_content(tmp_path: Path, layout_compiler: TemplateCompiler) -> None:
    write_files(
        tmp_path,
        {
            "template/_layouts/error.sx": '[:h1 "Not found"]\n',
            "template/404.html.sx": '; layout: error\n[:p "ignored"]\n',
        },
    )

    assert layout_compiler.compile_template("404.html")({}) == [Node("h1", ["Not found"])]


def test_options_merge_across_chain(tmp_path: Path, pipeline: TransformPipeline) -> None:
    write_files(
        tmp_path,
        {
            "template/_layouts/base.sx": "; format: xhtml\n; title: Base\ncontent\n",
            "template/_layouts/inner.sx": "; layout: base\ncontent\n",
            "template/page.sx": "; layout: inner\n; title: Page\n[:p]\n",
        },
    )
    compiler = TemplateCompiler(TemplateLoader(tmp_path / "template", tmp_path / "template" / "_layouts"), pipeline)

    render = compiler.compile_template("page")

    assert render.options.format == "xhtml"
    assert render.options.title == "Page"


def test_missing_layout_names_the_layout(tmp_path: Path, layout_compiler: TemplateCompiler) -> None:
    write_files(tmp_path, {"template/page.sx": "; layout: nowhere\n[:p]\n"})

    with pytest.raises(MissingLayoutError) as exc:
        layout_compiler.compile_template("page")

    assert exc.value.name == "nowhere"
    assert "nowhere" in str(exc.value)


def test_missing_template(layout_compiler: TemplateCompiler) -> None:
    with pytest.raises(MissingTemplateError):
        layout_compiler.compile_template("absent.html")


def test_layout_cycle_is_detected(tmp_path: Path, layout_compiler: TemplateCompiler) -> None:
    write_files(
        tmp_path,
        {
            "template/_layouts/loop1.sx": "; layout: loop2\ncontent\n",
            "template/_layouts/loop2.sx": "; layout: loop1\ncontent\n",
            "template/page.sx": "; layout: loop1\n[:p]\n",
        },
    )

    with pytest.raises(LayoutCycleError) as exc:
        layout_compiler.compile_template("page")

    assert exc.value.chain == ["loop1", "loop2", "loop1"]


def test_self_referencing_layout_is_a_cycle(tmp_path: Path, layout_compiler: TemplateCompiler) -> None:
    write_files(tmp_path, {"template/_layouts/me.sx": "; layout: me\ncontent\n"})

    with pytest.raises(LayoutCycleError):
        layout_compiler.layouts.get_layout("me")


def test_syntax_error_reports_template_and_line(tmp_path: Path, layout_compiler: TemplateCompiler) -> None:
    write_files(tmp_path, {"template/bad.sx": "; title: Bad\n\n[:p (:title site)\n"})

    with pytest.raises(TemplateSyntaxError) as exc:
        layout_compiler.compile_template("bad")

    assert exc.value.source == "bad"
    assert exc.value.line == 3


def test_registry_applies_to_page_body_not_layouts(tmp_path: Path) -> None:
    write_files(
        tmp_path,
        {
            "template/_layouts/wrap.sx": '[:header "static"]\ncontent\n',
            "template/page.sx": '; layout: wrap\n[:p "body"]\n',
        },
    )
    seen = []

    def record(tree):
        seen.append(tree)
        return tree + ["appended"]

    pipeline = TransformPipeline(TransformerRegistry([record]))
    compiler = TemplateCompiler(TemplateLoader(tmp_path / "template", tmp_path / "template" / "_layouts"), pipeline)

    result = compiler.compile_template("page")({})

    assert seen == [[Node("p", ["body"])]]
    assert result == [Node("header", ["static"]), Node("p", ["body"]), "appended"]


def test_transform_builtin_compiles_inline_expressions(tmp_path: Path, layout_compiler: TemplateCompiler) -> None:
    write_files(tmp_path, {"template/inline.sx": '[:p ((transform "(apply + site)") [1 2 3])]\n'})

    assert layout_compiler.compile_template("inline")({}) == [Node("p", [[6]])]
