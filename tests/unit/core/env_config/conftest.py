import os

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """No ONEBUN_REQUESTS_* variables and no stray .env from the working directory."""
    for key in list(os.environ):
        if key.upper().startswith("ONEBUN_REQUESTS_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
