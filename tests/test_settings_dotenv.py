import os
from pathlib import Path

from inkpress.config import settings


def test_project_dotenv_overrides_environment(tmp_path, monkeypatch) -> None:
    project_dir = tmp_path / "project"
    project_env = project_dir / ".env"

    project_dir.mkdir()
    project_env.write_text("INKPRESS_LOG_LEVEL=debug\n", encoding="utf-8")

    monkeypatch.chdir(project_dir)
    monkeypatch.setenv("INKPRESS_LOG_LEVEL", "warning")

    settings._load_dotenv()

    assert os.getenv("INKPRESS_LOG_LEVEL") == "debug"


def test_get_settings_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("INKPRESS_CONFIG", "sites/blog/site.toml")
    monkeypatch.delenv("INKPRESS_LOG_LEVEL", raising=False)
    settings.get_settings.cache_clear()

    try:
        loaded = settings.get_settings()
    finally:
        settings.get_settings.cache_clear()

    assert loaded.config_path == Path("sites/blog/site.toml")
    assert loaded.log_level is None
