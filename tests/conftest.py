import os

import pytest

from promptforge.core.config import Settings, get_settings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep host variables and any stray .env out of the settings under test."""
    names = {name.upper() for name in Settings.model_fields}
    for key in list(os.environ):
        if key.upper() in names:
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def write_dotenv(tmp_path):
    def _write(name, **values):
        path = tmp_path / name
        path.write_text("".join(f"{k}={v}\n" for k, v in values.items()))
        return path

    return _write
