from unittest.mock import MagicMock, call, patch

import pytest

import data_manager
import updater
from charts.app_store import FeedError

FRANCE = (143442, "fr")
SPAIN = (143454, "es")
SOCIAL = (6005, "social_networking")
TRAVEL = (6003, "travel")


@pytest.fixture
def no_sleep():
    with patch("updater.time.sleep") as mock_sleep:
        yield mock_sleep


def test_execute_sequentially(no_sleep):
    order = []
    tasks = [lambda i=i: order.append(i) or i * 10 for i in range(3)]

    results = updater.execute_sequentially(tasks, delay=0.5)

    assert results == [0, 10, 20]
    assert order == [0, 1, 2]
    assert no_sleep.call_args_list == [call(0.5)] * 3


def test_execute_sequentially_stops_on_error(no_sleep):
    later = MagicMock(return_value=True)

    def failing():
        raise FeedError("Got error: 500", 500)

    with pytest.raises(FeedError):
        updater.execute_sequentially([failing, later], delay=0)

    later.assert_not_called()


@patch("updater.fetch_feed")
def test_update_apps_first_run(mock_fetch, feed_body, data_dir):
    mock_fetch.return_value = feed_body("com.alertus.zenly", "fr.lemonde.matin")
    apps_index = {}

    changed = updater.update_apps(FRANCE, "free", SOCIAL, apps_index)

    assert changed is True
    mock_fetch.assert_called_once_with(143442, "free", 6005)

    snapshot = data_manager.read_json_file(data_manager.snapshot_path("fr", "free", "social_networking"))
    assert [app["$position"]["index"] for app in snapshot] == [1, 2]
    assert apps_index == {
        "com.alertus.zenly": [
            {"country_code": "fr", "pricing": "free", "genre": "social_networking", "index": 1, "total": 2}
        ],
        "fr.lemonde.matin": [
            {"country_code": "fr", "pricing": "free", "genre": "social_networking", "index": 2, "total": 2}
        ],
    }


@patch("updater.fetch_feed")
def test_update_apps_unchanged(mock_fetch, feed_body):
    mock_fetch.return_value = feed_body("com.alertus.zenly")
    updater.update_apps(FRANCE, "free", SOCIAL, {})

    apps_index = {}
    with patch("updater.data_manager.write_json_file") as mock_write:
        changed = updater.update_apps(FRANCE, "free", SOCIAL, apps_index)

    assert changed is False
    mock_write.assert_not_called()
    # Positions are indexed even when the chart did not move
    assert list(apps_index) == ["com.alertus.zenly"]


@patch("updater.fetch_feed")
def test_update_apps_empty_feed_keeps_snapshot(mock_fetch, feed_body):
    mock_fetch.return_value = feed_body("com.alertus.zenly")
    updater.update_apps(FRANCE, "free", SOCIAL, {})

    mock_fetch.return_value = {"feed": {}}
    changed = updater.update_apps(FRANCE, "free", SOCIAL, {})

    assert changed is True
    snapshot = data_manager.read_json_file(data_manager.snapshot_path("fr", "free", "social_networking"))
    assert len(snapshot) == 1


@patch("updater.fetch_feed")
def test_update_apps_empty_feed_on_empty_snapshot(mock_fetch):
    mock_fetch.return_value = {}

    assert updater.update_apps(FRANCE, "paid", TRAVEL, {}) is False
    assert data_manager.read_json_file(data_manager.snapshot_path("fr", "paid", "travel")) == []


@patch("updater.fetch_feed")
def test_update_apps_skips_missing_bundle_id(mock_fetch, entry):
    mock_fetch.return_value = {"feed": {"entry": [entry(None), entry("com.alertus.zenly")]}}
    apps_index = {}

    assert updater.update_apps(FRANCE, "free", SOCIAL, apps_index) is True

    assert list(apps_index) == ["com.alertus.zenly"]
    assert apps_index["com.alertus.zenly"][0]["index"] == 2
    snapshot = data_manager.read_json_file(data_manager.snapshot_path("fr", "free", "social_networking"))
    assert len(snapshot) == 2


def test_build_tasks_order():
    with patch("updater.update_apps", return_value=False) as mock_update:
        apps_index = {}
        tasks = updater.build_tasks([FRANCE, SPAIN], ["paid", "free"], [SOCIAL], apps_index, limit=10)
        for task in tasks:
            task()

    assert len(tasks) == 4
    assert [c.args[:3] for c in mock_update.call_args_list] == [
        (FRANCE, "paid", SOCIAL),
        (FRANCE, "free", SOCIAL),
        (SPAIN, "paid", SOCIAL),
        (SPAIN, "free", SOCIAL),
    ]
    assert all(c.args[3] is apps_index for c in mock_update.call_args_list)
    assert all(c.kwargs["limit"] == 10 for c in mock_update.call_args_list)


@patch("updater.fetch_feed")
def test_run_update(mock_fetch, no_sleep, feed_body, data_dir):
    mock_fetch.return_value = feed_body("fr.lemonde.matin")

    status, results = updater.run_update([FRANCE], ["free"], [SOCIAL, TRAVEL], delay=0.1)

    assert status == "updated"
    assert results == [True, True]
    assert no_sleep.call_count == 2

    apps = data_manager.load_apps_index()
    assert [p["genre"] for p in apps["fr.lemonde.matin"]] == ["social_networking", "travel"]

    run_status = data_manager.load_run_status()
    assert run_status["status"] == "updated"
    assert run_status["tasks"] == 2
    assert run_status["changed"] == 2

    # Same charts again: nothing changes but the index is rebuilt
    status, results = updater.run_update([FRANCE], ["free"], [SOCIAL, TRAVEL], delay=0)
    assert status == "none_updated"
    assert results == [False, False]
    assert len(data_manager.load_apps_index()["fr.lemonde.matin"]) == 2


@patch("updater.fetch_feed")
def test_run_update_failure(mock_fetch, no_sleep):
    mock_fetch.side_effect = FeedError("Got error: 500 after 5 attempts", 500)

    with pytest.raises(FeedError):
        updater.run_update([FRANCE], ["free"], [SOCIAL])

    run_status = data_manager.load_run_status()
    assert run_status["status"] == "failed"
    assert "500" in run_status["error"]


@patch("updater.run_update", return_value=("updated", [True]))
def test_main_writes_github_output(mock_run, tmp_path, monkeypatch):
    output = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(output))

    assert updater.main(["--countries", "fr", "--pricings", "free", "--genres", "book", "--delay", "0"]) == 0

    assert output.read_text() == "status=updated\n"
    kwargs = mock_run.call_args.kwargs
    assert kwargs["store_fronts"] == [FRANCE]
    assert kwargs["pricings"] == ["free"]
    assert kwargs["genres"] == [(6018, "book")]
    assert kwargs["delay"] == 0


@patch("updater.run_update", return_value=("none_updated", [False]))
def test_main_prints_legacy_output(mock_run, capsys):
    assert updater.main([]) == 0

    assert "::set-output name=status::none_updated" in capsys.readouterr().out


@patch("updater.run_update", side_effect=FeedError("Got error: 503", 503))
def test_main_failure_exit_code(mock_run, capsys):
    assert updater.main([]) == 1
    assert "set-output" not in capsys.readouterr().out


@patch("updater.run_update")
def test_main_unknown_country(mock_run):
    assert updater.main(["--countries", "zz"]) == 1
    mock_run.assert_not_called()


@patch("updater.run_update")
def test_main_unknown_pricing(mock_run):
    assert updater.main(["--pricings", "cheap"]) == 1
    mock_run.assert_not_called()


@patch("updater.run_update")
def test_main_invalid_log_level(mock_run):
    assert updater.main(["--log-level", "bogus"]) == 1
    mock_run.assert_not_called()


@patch("updater.data_manager.write_run_status", side_effect=OSError("disk full"))
@patch("updater.fetch_feed")
def test_run_update_failure_keeps_original_error(mock_fetch, mock_status, no_sleep):
    mock_fetch.side_effect = FeedError("Got error: 500 after 5 attempts", 500)

    with pytest.raises(FeedError):
        updater.run_update([FRANCE], ["free"], [SOCIAL])

    assert mock_status.call_args.args[0] == "failed"
