import json

import numpy as np
import pytest

from deme_tsp.cities import Cities
from deme_tsp.cli import load_checkpoint, main

from conftest import SQUARE


@pytest.fixture
def cities_file(tmp_path):
    path = tmp_path / "square.tsv"
    np.savetxt(path, SQUARE)
    return path


def _run(cities_file, tmp_path, *extra):
    out = tmp_path / "shortest.tsv"
    ckpt = tmp_path / "state.json"
    main(
        [
            "run", str(cities_file),
            "--generations", "20", "--pop-size", "8", "--mutation-rate", "0.1",
            "--output", str(out), "--checkpoint", str(ckpt), *extra,
        ]
    )
    return out, ckpt


def test_run_writes_tour_and_checkpoint(cities_file, tmp_path):
    out, ckpt = _run(cities_file, tmp_path)
    state = json.loads(ckpt.read_text())
    assert state["generation"] == 20
    assert len(state["population"]) == 8
    assert state["best"]["length"] == pytest.approx(4.0)
    tour = np.loadtxt(out)
    assert sorted(map(tuple, tour.tolist())) == sorted(map(tuple, SQUARE))


def test_resume_continues_generations(cities_file, tmp_path):
    _run(cities_file, tmp_path)
    _, ckpt = _run(cities_file, tmp_path, "--resume")
    assert json.loads(ckpt.read_text())["generation"] == 40


def test_show(cities_file, tmp_path, capsys):
    _, ckpt = _run(cities_file, tmp_path)
    capsys.readouterr()
    main(["show", str(ckpt)])
    assert "best length=4.0000" in capsys.readouterr().out


def test_show_missing_checkpoint(tmp_path, capsys):
    main(["show", str(tmp_path / "nope.json")])
    assert "No checkpoint found" in capsys.readouterr().out


def test_bench_requires_instances(tmp_path):
    with pytest.raises(RuntimeError):
        main(["bench", "--data-root", str(tmp_path)])


def test_resume_rejects_other_city_file(cities_file, tmp_path):
    _run(cities_file, tmp_path)
    other = tmp_path / "big_square.tsv"
    np.savetxt(other, np.asarray(SQUARE) * 100)
    with pytest.raises(ValueError, match="was written for"):
        _run(other, tmp_path, "--resume")


def test_resume_rejects_other_city_count(cities_file, tmp_path):
    _, ckpt = _run(cities_file, tmp_path)
    five = Cities(SQUARE + [[0.5, 2.0]])
    with pytest.raises(ValueError, match="over 4 cities"):
        load_checkpoint(five, ckpt)


def test_resume_rescores_stored_best(cities_file, tmp_path):
    _run(cities_file, tmp_path)
    np.savetxt(cities_file, np.asarray(SQUARE) * 100)
    _, ckpt = _run(cities_file, tmp_path, "--resume")
    assert json.loads(ckpt.read_text())["best"]["length"] == pytest.approx(400.0)


def test_resume_logs_config_overrides(cities_file, tmp_path, capsys):
    _run(cities_file, tmp_path)
    capsys.readouterr()
    _, ckpt = _run(cities_file, tmp_path, "--resume", "--pop-size", "10")
    out = capsys.readouterr().out
    assert "checkpoint config overrides flags" in out
    assert "'population_size': 8" in out
    assert len(json.loads(ckpt.read_text())["population"]) == 8
