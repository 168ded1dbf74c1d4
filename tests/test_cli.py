"""Tests for CLI entrypoints."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from openpyxl import load_workbook

from glicosmart import cli
from glicosmart.storage import SQLiteStore


@pytest.fixture
def db(tmp_path: Path) -> str:
    return str(tmp_path / "app.sqlite3")


def _run(db: str, *args: str) -> int:
    return cli.main(["--db", db, *args])


def _with_profile(db: str) -> None:
    args = ["profile", "create", "--name", "Ana", "--age", "30", "--weight", "60"]
    assert _run(db, *args) == 0


def test_parse_args_custom_values() -> None:
    ns = cli.parse_args(
        ["--db", "/tmp/x.sqlite3", "list", "--period", "jejum", "--start", "2025-01-02"]
    )
    assert ns.db == "/tmp/x.sqlite3"
    assert ns.command == "list"
    assert ns.period == "jejum"
    assert ns.start == date(2025, 1, 2)
    assert ns.end is None


def test_parse_args_rejects_unknown_period() -> None:
    with pytest.raises(SystemExit):
        cli.parse_args(["add", "100", "--period", "brunch"])


def test_commands_without_profile(db: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(db, "add", "100") == 1
    assert "Nenhum perfil" in capsys.readouterr().out
    assert _run(db, "chat", "dica") == 0
    assert "complete seu perfil" in capsys.readouterr().out


def test_profile_add_list_stats(db: str, capsys: pytest.CaptureFixture[str]) -> None:
    _with_profile(db)
    assert _run(db, "add", "65", "--period", "jejum") == 0
    out = capsys.readouterr().out
    assert "Hipoglicemia" in out
    assert "HIPOGLICEMIA DETECTADA" in out

    assert _run(db, "add", "160", "--date", "2025-06-10", "--time", "13:00") == 0
    capsys.readouterr()

    assert _run(db, "list") == 0
    out = capsys.readouterr().out
    assert "Registros (2)" in out
    assert "Alerta" in out

    assert _run(db, "stats") == 0
    out = capsys.readouterr().out
    assert "Medições: 2" in out
    assert "Mínimo / máximo: 65 / 160 mg/dL" in out


def test_profile_update_and_show(db: str, capsys: pytest.CaptureFixture[str]) -> None:
    _with_profile(db)
    assert _run(db, "profile", "update", "--weight", "65") == 0
    out = capsys.readouterr().out
    assert "Peso: 65 kg" in out
    assert "Idade: 30" in out

    store = SQLiteStore(Path(db))
    profile = store.load()["default_user"].profile
    assert profile.weight == "65"


def test_invalid_value_returns_2(db: str, capsys: pytest.CaptureFixture[str]) -> None:
    _with_profile(db)
    assert _run(db, "add", "doce") == 2
    assert "Erro:" in capsys.readouterr().out
    assert _run(db, "add", "100", "--date", "2025-06-10") == 2


def test_edit_and_delete(db: str, capsys: pytest.CaptureFixture[str]) -> None:
    _with_profile(db)
    _run(db, "add", "120")
    reading_id = next(iter(SQLiteStore(Path(db)).load()["default_user"].readings)).id
    capsys.readouterr()

    assert _run(db, "edit", reading_id, "--value", "210") == 0
    assert "Hiperglicemia" in capsys.readouterr().out
    assert _run(db, "delete", reading_id) == 0
    assert _run(db, "delete", reading_id) == 1
    assert _run(db, "edit", "nope", "--value", "100") == 1


def test_export_writes_workbook(
    db: str, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _with_profile(db)
    when = ["--date", "2025-06-10", "--time", "07:30"]
    _run(db, "add", "98", "--period", "jejum", *when)
    out_path = tmp_path / "out" / "historico.xlsx"

    assert _run(db, "export", "--out", str(out_path)) == 0
    assert "OK: Excel gerado" in capsys.readouterr().out

    ws = load_workbook(out_path)["Historico Glicemia"]
    assert ws.cell(row=2, column=1).value == 98
    assert ws.cell(row=2, column=3).value == "10/06/2025"
    assert ws.cell(row=2, column=4).value == "07:30"


def test_export_uses_configured_dir(
    db: str, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    export_dir = tmp_path / "exports"
    assert _run(db, "config", "--export-dir", str(export_dir)) == 0
    _with_profile(db)
    _run(db, "add", "110")
    capsys.readouterr()

    assert _run(db, "export") == 0
    files = list(export_dir.glob("historico_glicemia_*.xlsx"))
    assert len(files) == 1


def test_export_without_data(db: str, capsys: pytest.CaptureFixture[str]) -> None:
    _with_profile(db)
    assert _run(db, "export", "--period", "noite") == 1
    assert "Não há dados para exportar." in capsys.readouterr().out


def test_chat_and_advice(db: str, capsys: pytest.CaptureFixture[str]) -> None:
    _with_profile(db)
    assert _run(db, "advice") == 0
    assert "Olá Ana" in capsys.readouterr().out
    _run(db, "add", "300")
    capsys.readouterr()
    assert _run(db, "advice") == 0
    assert "CRÍTICO" in capsys.readouterr().out
    assert _run(db, "chat", "quanta", "água?") == 0
    assert "2100ml/dia" in capsys.readouterr().out


def test_reset_and_wipe(db: str, capsys: pytest.CaptureFixture[str]) -> None:
    _with_profile(db)
    _run(db, "add", "100")
    assert _run(db, "reset") == 0
    assert SQLiteStore(Path(db)).load()["default_user"].readings.readings == ()

    assert _run(db, "wipe") == 1
    assert SQLiteStore(Path(db)).load() != {}
    assert _run(db, "wipe", "--yes") == 0
    assert SQLiteStore(Path(db)).load() == {}
    capsys.readouterr()
    assert _run(db, "list") == 0
    assert "Registros (0)" in capsys.readouterr().out


def test_config_shows_defaults(db: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(db, "config") == 0
    out = capsys.readouterr().out
    assert "timezone: America/Sao_Paulo" in out


def test_garbage_database_does_not_crash(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    db = tmp_path / "broken.sqlite3"
    db.write_bytes(b"not a database at all" * 50)
    assert _run(str(db), "list") == 0
    assert "Registros (0)" in capsys.readouterr().out


def test_tips_by_category(db: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(db, "tips") == 0
    assert "10 dicas encontradas" in capsys.readouterr().out

    assert _run(db, "tips", "--category", "exercicios") == 0
    out = capsys.readouterr().out
    assert "2 dicas encontradas" in out
    assert "Caminhada Pós-Refeição" in out

    assert _run(db, "tips", "--category", "receitas") == 1
    assert "Nenhuma dica encontrada" in capsys.readouterr().out
