from unittest.mock import MagicMock

import pytest

import config
import top_apps


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Point every module at an empty data directory."""
    path = tmp_path / "data"
    monkeypatch.setattr(config, "DATA_DIR", str(path))
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
    top_apps.reload()
    yield path
    top_apps.reload()


def make_entry(bundle_id, name=None):
    entry = {
        "im:name": {"label": name or bundle_id},
        "im:artist": {"label": "Some Developer"},
        "id": {
            "label": f"https://apps.apple.com/app/id-{bundle_id}",
            "attributes": {"im:id": "123456", "im:bundleId": bundle_id},
        },
    }
    if bundle_id is None:
        del entry["id"]["attributes"]["im:bundleId"]
    return entry


def make_body(*bundle_ids):
    return {"feed": {"entry": [make_entry(bundle_id) for bundle_id in bundle_ids]}}


def fake_response(status_code=200, body=None, content=None):
    response = MagicMock()
    response.status_code = status_code
    if content is None:
        content = b"{}" if body is not None else b""
    response.content = content
    response.json.return_value = body
    return response


@pytest.fixture
def entry():
    return make_entry


@pytest.fixture
def feed_body():
    return make_body


@pytest.fixture
def response():
    return fake_response
