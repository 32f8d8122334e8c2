# tests/conftest.py
import json
from typing import Dict

import pytest

from rss_mail_notifier.config import Config


@pytest.fixture()
def config(tmp_path) -> Config:
    return Config(
        local_rss=str(tmp_path / "old-rss.xml"),
        remote_rss="http://bbs.example.com/rss",
        subject="New posts",
        from_addr="bot@example.com",
        to_addr="me@example.com",
        password="secret",
        server="smtp.example.com",
    )


@pytest.fixture()
def config_data(tmp_path) -> Dict[str, str]:
    return {
        "local_rss": str(tmp_path / "old-rss.xml"),
        "remote_rss": "http://bbs.example.com/rss",
        "subject": "New posts",
        "from": "bot@example.com",
        "to": "me@example.com",
        "password": "secret",
        "server": "smtp.example.com",
    }


@pytest.fixture()
def write_config(tmp_path):
    # Writes the given dict (or raw text) as the config file and returns its path
    def _write(data) -> str:
        path = tmp_path / "rss_mail_notifier.json"
        text = data if isinstance(data, str) else json.dumps(data)
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write
