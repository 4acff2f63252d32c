from pathlib import Path
import textwrap

import pytest

from inkpress.config import ConfigError, SiteConfig, load_config


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "site.toml"
    path.write_text(textwrap.dedent(body).strip() + "\n", encoding="utf-8")
    return path


def test_defaults_resolve_against_config_directory(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "")

    config = load_config(path)

    assert config.root == tmp_path.resolve()
    assert config.template_path == (tmp_path / "template").resolve()
    assert config.layout_path == (tmp_path / "template" / "_layouts").resolve()
    assert config.post_path == (tmp_path / "template" / "_posts").resolve()
    assert config.public_path == (tmp_path / "public").resolve()
    assert config.template_extension == ".sx"
    assert config.transformers == []


def test_site_table_is_kept_verbatim(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
        public_dir = "out"

        [site]
        name = "Example"
        authors = ["ann", "bo"]
        """,
    )

    config = load_config(path)

    assert config.site == {"name": "Example", "authors": ["ann", "bo"]}
    assert config.public_path == (tmp_path / "out").resolve()


def test_rejects_unknown_keys(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
        public_dir = "out"
        unexpected = "nope"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "extra" in str(exc.value).lower()


def test_rejects_unknown_transformer(tmp_path: Path) -> None:
    path = _write_config(tmp_path, 'transformers = ["markdown", "smartypants"]')

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "smartypants" in str(exc.value)


def test_rejects_extension_without_dot(tmp_path: Path) -> None:
    path = _write_config(tmp_path, 'template_extension = "sx"')

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "template_extension" in str(exc.value)


def test_rejects_unknown_post_url_field(tmp_path: Path) -> None:
    path = _write_config(tmp_path, 'post_url_format = "{year}/{title}"')

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "post_url_format" in str(exc.value)


def test_rejects_root_in_file(tmp_path: Path) -> None:
    path = _write_config(tmp_path, 'root = "/elsewhere"')

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "root" in str(exc.value)


def test_reports_invalid_toml(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "public_dir = ")

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "Invalid TOML" in str(exc.value)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.toml")


def test_hash_ignores_root(tmp_path: Path) -> None:
    first = SiteConfig(root=tmp_path / "a", site={"name": "x"})
    second = SiteConfig(root=tmp_path / "b", site={"name": "x"})
    third = SiteConfig(root=tmp_path / "a", site={"name": "y"})

    assert first.hash == second.hash
    assert first.hash != third.hash
