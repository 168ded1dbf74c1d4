"""CLI para registrar glucemias, consultar historial y exportar a Excel."""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
from datetime import date, datetime, tzinfo
from pathlib import Path

from glicosmart.accounts import AccountStore
from glicosmart.advisor import Advisor
from glicosmart.errors import InvalidProfile, InvalidReading
from glicosmart.excel_writer import ExcelLayout, write_history_xlsx
from glicosmart.forms import combine_date_time, local_tz, parse_period
from glicosmart.glucose import classify
from glicosmart.history import export_rows, filter_readings, summarize
from glicosmart.log import configure_logging
from glicosmart.model import Period, Reading
from glicosmart.storage import AppConfig, SQLiteStore
from glicosmart.tips import CATEGORIES, tips_by_category

PERIOD_CHOICES = [p.value for p in Period]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        prog="glicosmart",
        description="Registro local de glicemia com conselhos e exportação.",
    )
    parser.add_argument(
        "--db",
        default=str(Path.cwd() / "glicosmart.sqlite3"),
        help="Archivo SQLite (default: ./glicosmart.sqlite3).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Nivel de logging (DEBUG, INFO, WARNING...).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    profile = sub.add_parser("profile", help="Crear, editar o ver el perfil.")
    profile_sub = profile.add_subparsers(dest="profile_command", required=True)
    create = profile_sub.add_parser("create")
    create.add_argument("--name", required=True)
    create.add_argument("--age", default="")
    create.add_argument("--weight", default="")
    update = profile_sub.add_parser("update")
    update.add_argument("--name")
    update.add_argument("--age")
    update.add_argument("--weight")
    profile_sub.add_parser("show")

    add = sub.add_parser("add", help="Registrar una medicion.")
    add.add_argument("value")
    add.add_argument("--period", default=Period.RANDOM.value, choices=PERIOD_CHOICES)
    _add_when_arguments(add)
    add.add_argument("--notes", default="")

    edit = sub.add_parser("edit", help="Editar una medicion.")
    edit.add_argument("reading_id")
    edit.add_argument("--value")
    edit.add_argument("--period", choices=PERIOD_CHOICES)
    _add_when_arguments(edit)
    edit.add_argument("--notes")

    delete = sub.add_parser("delete", help="Borrar una medicion.")
    delete.add_argument("reading_id")

    for name, help_text in (
        ("list", "Listar mediciones."),
        ("stats", "Resumen estadistico."),
        ("export", "Exportar historial a Excel."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--period", choices=PERIOD_CHOICES)
        cmd.add_argument("--start", type=date.fromisoformat, help="YYYY-MM-DD")
        cmd.add_argument("--end", type=date.fromisoformat, help="YYYY-MM-DD")
        if name == "export":
            cmd.add_argument("--out", help="Ruta del .xlsx de salida.")

    chat = sub.add_parser("chat", help="Preguntar a la asistente.")
    chat.add_argument("text", nargs="+")
    sub.add_parser("advice", help="Consejo para la ultima medicion.")
    tips = sub.add_parser("tips", help="Dicas de saude por categoria.")
    tips.add_argument(
        "--category",
        help=f"Categoria ({', '.join(CATEGORIES)}); sin valor muestra todas.",
    )
    sub.add_parser("reset", help="Borrar mediciones y foto del perfil.")
    wipe = sub.add_parser("wipe", help="Borrar todos los datos locales.")
    wipe.add_argument("--yes", action="store_true", help="Confirmar borrado.")

    config = sub.add_parser("config", help="Ver o cambiar configuracion.")
    config.add_argument("--export-dir")
    config.add_argument("--timezone")
    return parser.parse_args(argv)


def _add_when_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--date", help="Fecha YYYY-MM-DD (junto con --time).")
    parser.add_argument("--time", help="Hora HH:MM (junto con --date).")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the GlicoSmart CLI.

    Returns:
        Exit code (0 on success, 1 without profile, 2 on invalid input).
    """
    ns = parse_args(argv)
    configure_logging(ns.log_level)
    storage = SQLiteStore(Path(ns.db).expanduser())
    if ns.command == "config":
        return _cmd_config(storage, ns)

    config = storage.load_config()
    store = AccountStore(storage)
    handler = _HANDLERS[ns.command]
    try:
        return handler(store, ns, config)
    except (InvalidReading, InvalidProfile) as exc:
        print(f"Erro: {exc}")
        return 2


def _cmd_config(storage: SQLiteStore, ns: argparse.Namespace) -> int:
    config = storage.load_config()
    if ns.export_dir is not None or ns.timezone is not None:
        export_dir = config.export_dir if ns.export_dir is None else ns.export_dir
        timezone = config.timezone if ns.timezone is None else ns.timezone
        config = AppConfig(export_dir=export_dir.strip(), timezone=timezone.strip())
        if not storage.save_config(config):
            print("Aviso: não foi possível salvar a configuração.")
    print(f"export_dir: {config.export_dir or '(./salidas)'}")
    print(f"timezone: {config.timezone}")
    return 0


def _cmd_profile(store: AccountStore, ns: argparse.Namespace, _: AppConfig) -> int:
    if ns.profile_command == "create":
        profile = store.create_account(ns.name, ns.age, ns.weight)
        print(f"Perfil criado: {profile.name}")
        _warn_unsaved(store)
        return 0
    if not store.is_logged_in:
        return _no_profile()
    if ns.profile_command == "update":
        fields = {
            key: getattr(ns, key)
            for key in ("name", "age", "weight")
            if getattr(ns, key) is not None
        }
        store.update_profile(**fields)
    profile = store.profile
    if profile is not None:
        print(f"Nome: {profile.name}")
        print(f"Idade: {profile.age or '-'}")
        print(f"Peso: {profile.weight or '-'} kg")
    return 0


def _cmd_add(store: AccountStore, ns: argparse.Namespace, config: AppConfig) -> int:
    if not store.is_logged_in:
        return _no_profile()
    reading = store.add_reading(
        ns.value,
        period=ns.period,
        notes=ns.notes,
        timestamp=_when(ns, local_tz(config.timezone)),
    )
    if reading is None:
        return 1
    print(_format_reading(reading, local_tz(config.timezone)))
    print(Advisor().advise_reading(reading, store.profile))
    _warn_unsaved(store)
    return 0


def _cmd_edit(store: AccountStore, ns: argparse.Namespace, config: AppConfig) -> int:
    if not store.is_logged_in:
        return _no_profile()
    changes: dict[str, object] = {}
    if ns.value is not None:
        changes["value"] = ns.value
    if ns.period is not None:
        changes["period"] = ns.period
    if ns.notes is not None:
        changes["notes"] = ns.notes
    when = _when(ns, local_tz(config.timezone))
    if when is not None:
        changes["timestamp"] = when
    updated = store.update_reading(ns.reading_id, **changes)
    if updated is None:
        print(f"Medição não encontrada: {ns.reading_id}")
        return 1
    print(_format_reading(updated, local_tz(config.timezone)))
    _warn_unsaved(store)
    return 0


def _cmd_delete(store: AccountStore, ns: argparse.Namespace, _: AppConfig) -> int:
    if not store.is_logged_in:
        return _no_profile()
    if not store.delete_reading(ns.reading_id):
        print(f"Medição não encontrada: {ns.reading_id}")
        return 1
    print(f"Medição removida: {ns.reading_id}")
    _warn_unsaved(store)
    return 0


def _cmd_list(store: AccountStore, ns: argparse.Namespace, config: AppConfig) -> int:
    zone = local_tz(config.timezone)
    readings = _filtered(store, ns, zone)
    print(f"Registros ({len(readings)})")
    for reading in readings:
        print(_format_reading(reading, zone))
    return 0


def _cmd_stats(store: AccountStore, ns: argparse.Namespace, config: AppConfig) -> int:
    summary = summarize(_filtered(store, ns, local_tz(config.timezone)))
    print(f"Medições: {summary.count}")
    if summary.count == 0:
        return 0
    status = summary.average_status.value if summary.average_status else "-"
    print(f"Média: {summary.average} mg/dL ({status})")
    print(f"Mínimo / máximo: {summary.minimum} / {summary.maximum} mg/dL")
    print(f"Baixa: {summary.low}  Normal: {summary.normal}  Alta: {summary.high}")
    return 0


def _cmd_export(store: AccountStore, ns: argparse.Namespace, config: AppConfig) -> int:
    zone = local_tz(config.timezone)
    readings = _filtered(store, ns, zone)
    if not readings:
        print("Não há dados para exportar.")
        return 1
    if ns.out:
        out_path = Path(ns.out).expanduser()
    else:
        out_dir = (
            Path(config.export_dir).expanduser()
            if config.export_dir
            else Path.cwd() / "salidas"
        )
        stamp = datetime.now(tz=zone).strftime("%Y-%m-%d_%H-%M-%S")
        out_path = out_dir / f"historico_glicemia_{stamp}.xlsx"
    write_history_xlsx(export_rows(readings, zone), out_path, ExcelLayout())
    print(f"OK: Excel gerado: {out_path}")
    return 0


def _cmd_chat(store: AccountStore, ns: argparse.Namespace, _: AppConfig) -> int:
    text = " ".join(ns.text)
    print(Advisor().reply(text, store.profile, store.latest_reading))
    return 0


def _cmd_advice(store: AccountStore, ns: argparse.Namespace, _: AppConfig) -> int:
    advisor = Advisor()
    latest = store.latest_reading
    if latest is None:
        print(advisor.greeting(store.profile))
        return 0
    print(advisor.advise_reading(latest, store.profile))
    return 0


def _cmd_tips(store: AccountStore, ns: argparse.Namespace, _: AppConfig) -> int:
    tips = tips_by_category(ns.category)
    print(f"{len(tips)} dicas encontradas")
    if not tips:
        print("Nenhuma dica encontrada para esta categoria.")
        return 1
    for tip in tips:
        print(f"\n[{tip.category}] {tip.title}")
        print(f"  {tip.description}")
    return 0


def _cmd_reset(store: AccountStore, ns: argparse.Namespace, _: AppConfig) -> int:
    if not store.is_logged_in:
        return _no_profile()
    store.reset_readings()
    print("Medições e foto removidas.")
    return 0


def _cmd_wipe(store: AccountStore, ns: argparse.Namespace, _: AppConfig) -> int:
    if not ns.yes:
        print("Use --yes para confirmar: todos os dados locais serão apagados.")
        return 1
    store.wipe_all()
    print("Todos os dados foram apagados.")
    _warn_unsaved(store)
    return 0


Handler = Callable[[AccountStore, argparse.Namespace, AppConfig], int]

_HANDLERS: dict[str, Handler] = {
    "profile": _cmd_profile,
    "add": _cmd_add,
    "edit": _cmd_edit,
    "delete": _cmd_delete,
    "list": _cmd_list,
    "stats": _cmd_stats,
    "export": _cmd_export,
    "chat": _cmd_chat,
    "advice": _cmd_advice,
    "tips": _cmd_tips,
    "reset": _cmd_reset,
    "wipe": _cmd_wipe,
}


def _when(ns: argparse.Namespace, zone: tzinfo) -> datetime | None:
    if ns.date is None and ns.time is None:
        return None
    if not ns.date or not ns.time:
        raise InvalidReading("Informe --date e --time juntos.")
    return combine_date_time(ns.date, ns.time, zone)


def _filtered(
    store: AccountStore, ns: argparse.Namespace, zone: tzinfo
) -> list[Reading]:
    period = parse_period(ns.period) if ns.period else None
    return filter_readings(store.readings, period, ns.start, ns.end, zone)


def _format_reading(reading: Reading, zone: tzinfo) -> str:
    local = reading.timestamp.astimezone(zone)
    analysis = classify(reading.value)
    line = (
        f"{reading.id}  {local:%d/%m %H:%M}  {reading.value:>4} mg/dL  "
        f"{reading.period.label:<11} {analysis.status.value}"
    )
    if reading.notes:
        line += f"  ({reading.notes})"
    return line


def _no_profile() -> int:
    print("Nenhum perfil encontrado. Use: glicosmart profile create --name NOME")
    return 1


def _warn_unsaved(store: AccountStore) -> None:
    if store.last_save_error is not None:
        print("Aviso: não foi possível salvar; os dados seguem apenas em memória.")
