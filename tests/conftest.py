from pathlib import Path
import textwrap
from typing import Dict

import pytest
from typer.testing import CliRunner

from inkpress.config import SiteConfig, load_config
from inkpress.template import TemplateCompiler, TemplateLoader
from inkpress.transform import TransformerRegistry, TransformPipeline


def write_files(root: Path, files: Dict[str, str]) -> Path:
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
    return root


LAYOUT_FILES = {
    "template/_layouts/test1.sx": """
        [:p (:title site)]
        [:p content]
        """,
    "template/_layouts/test2.sx": """
        ; layout: default
        [:p (:title site)]
        [:p content]
        """,
    "template/_layouts/default.sx": """
        [:h1 "default"]
        content
        """,
}

SITE_FILES = {
    "site.toml": """
        [site]
        name = "Test Site"
        url = "https://example.org"
        """,
    "template/_layouts/default.sx": """
        ; format: html5
        [:body content]
        """,
    "template/_layouts/post.sx": """
        ; layout: default
        [:article [:h2 (:title site)] content]
        """,
    "template/_layouts/tag.sx": """
        ; layout: default
        [:h2 (:tag-name site)]
        [:ul (for [p (:posts site)] [:li (:title p)])]
        """,
    "template/index.html.sx": """
        ; layout: default
        ; title: Home
        [:ul (for [p (:posts site)] [:li [:a {:href (:url p)} (:title p)]])]
        """,
    "template/_posts/2024-01-01-first.html.sx": """
        ; layout: post
        ; title: First
        ; tag: a, b
        [:p "one & <b>"]
        """,
    "template/_posts/2024-02-01-second.html.sx": """
        ; layout: post
        ; title: Second
        ; tag: a
        [:p "two"]
        """,
    "template/_posts/2024-03-01-third.html.sx": """
        ; layout: post
        ; title: Third
        ; tag: b c
        [:p "three"]
        """,
}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def pipeline() -> TransformPipeline:
    return TransformPipeline(TransformerRegistry())


@pytest.fixture
def layout_compiler(tmp_path: Path, pipeline: TransformPipeline) -> TemplateCompiler:
    write_files(tmp_path, LAYOUT_FILES)
    loader = TemplateLoader(tmp_path / "template", tmp_path / "template" / "_layouts")
    return TemplateCompiler(loader, pipeline)


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """
    Write a small site (three tagged posts, an index page and layouts) and return its root.
    """
    return write_files(tmp_path / "site", SITE_FILES)


@pytest.fixture
def site_config(site_root: Path) -> SiteConfig:
    return load_config(site_root / "site.toml")
