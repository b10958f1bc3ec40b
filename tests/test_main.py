"""Tests for the command line entry point."""

import json

import pytest

from worldcup.main import build_parser, main


@pytest.fixture
def board(tmp_path):
    """Database URL and seed file arguments for a file-backed board."""
    seed_file = tmp_path / "teams.json"
    seed_file.write_text(json.dumps([
        {"teamName": "Brazil", "qualifyingZone": "South America", "imageName": "brazil-flag", "wins": 5},
        {"teamName": "Japan", "qualifyingZone": "Asia", "imageName": "japan-flag", "wins": 1},
    ]), encoding="utf-8")
    database_url = f"sqlite:///{tmp_path / 'board.db'}"
    return ["--database-url", database_url, "--seed-file", str(seed_file)]


def test_parser_requires_ints_for_win():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["win", "one", "1"])


def test_list_seeds_empty_store(board, capsys):
    assert main(board + ["list"]) == 0

    out = capsys.readouterr().out
    assert out.index("Asia (1)") < out.index("South America (1)")
    assert "[brazil-flag]" in out


def test_seed_runs_only_once(board, capsys):
    main(board + ["list"])
    main(board + ["list"])

    out = capsys.readouterr().out.split("World Cup")[-1]
    assert out.count("Brazil") == 1


def test_add_team_uses_default_image(board, capsys):
    assert main(board + ["add", "Wenderland", "Asia"]) == 0

    out = capsys.readouterr().out
    assert "Added team" in out
    assert "~ insert team" in out
    assert "[wenderland-flag]" in out
    assert "Asia (2)" in out


def test_wins_reorder_rows(board, capsys):
    main(board + ["add", "Wenderland", "Asia"])

    # Tied with Japan on one win, still listed after it
    assert main(board + ["win", "1", "2"]) == 0
    out = capsys.readouterr().out
    assert "Wenderland now has 1 wins" in out
    assert "~ update team" in out

    assert main(board + ["win", "1", "2"]) == 0
    out = capsys.readouterr().out
    assert "Wenderland now has 2 wins" in out
    assert "~ move team" in out
    assert out.index("Wenderland", out.index("Asia (2)")) < out.index("Japan", out.index("Asia (2)"))


def test_win_outside_board_fails(board, capsys):
    assert main(board + ["win", "5", "1"]) == 1

    captured = capsys.readouterr()
    assert "That row is not on the board." in captured.err


def test_bad_seed_file_fails(tmp_path, capsys):
    database_url = f"sqlite:///{tmp_path / 'board.db'}"

    code = main(["--database-url", database_url, "--seed-file", str(tmp_path / "missing.json"), "list"])

    assert code == 1
    assert "Could not load the initial teams." in capsys.readouterr().err
