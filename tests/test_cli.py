import json
import sys

import pytest

import main


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(main, "configure_logging", lambda level: None)


def run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["main.py", *argv])
    main.main()


def test_format_time():
    assert main.format_time(0) == "00:00:00"
    assert main.format_time(3723) == "01:02:03"


def test_quiet_run_prints_simulated_time(monkeypatch, capsys):
    run(monkeypatch, "--quiet", "--tick", "30", "--research", "basic_tools", "improved_mining")

    out = capsys.readouterr().out.strip().splitlines()
    assert out[-1] == "00:02:00"


def test_export_and_save(monkeypatch, tmp_path):
    export = tmp_path / "state.json"
    save = tmp_path / "progress.json"

    run(
        monkeypatch,
        "--quiet",
        "--tick", "30",
        "--research", "basic_tools", "improved_mining", "advanced_weapons",
        "--export", str(export),
        "--save", str(save),
    )

    state = json.loads(export.read_text())
    assert state["snapshot"]["researched"] == ["basic_tools", "improved_mining"]
    assert state["resources"]["Iron"] == 140
    assert state["resources"]["Copper"] == 90
    assert state["modifiers"]["ResourceProduction_Iron"] == pytest.approx(0.35)
    assert state["unlocked_buildings"] == ["Advanced Iron Extractor"]
    assert state["simulated_seconds"] == 120
    assert json.loads(save.read_text())["researched"] == [
        "basic_tools",
        "improved_mining",
    ]


def test_granted_research_and_reload(monkeypatch, tmp_path):
    save = tmp_path / "progress.json"
    run(monkeypatch, "-q", "--grant", "ancient_alloys", "--save", str(save))
    assert json.loads(save.read_text())["granted"] == ["ancient_alloys"]

    export = tmp_path / "state.json"
    run(monkeypatch, "-q", "--load", str(save), "--export", str(export))

    assert "ancient_alloys" in json.loads(export.read_text())["available"]


def test_restored_research_is_finished_first(monkeypatch, tmp_path):
    progress = tmp_path / "progress.json"
    progress.write_text(
        json.dumps(
            {"researched": ["basic_tools"], "current": "improved_mining", "elapsed": 60}
        )
    )
    export = tmp_path / "state.json"

    run(
        monkeypatch,
        "-q",
        "--tick", "30",
        "--load", str(progress),
        "--research", "warehousing",
        "--export", str(export),
    )

    state = json.loads(export.read_text())
    assert state["snapshot"]["researched"] == [
        "basic_tools",
        "improved_mining",
        "warehousing",
    ]
    assert state["snapshot"]["current"] is None
    assert state["resources"]["Iron"] == 170
    assert state["simulated_seconds"] == 90
