"""
Script para manejar la selección de comparación y ver el diff.

La selección se persiste en el archivo configurado (COMPARE_STORAGE_PATH),
así sobrevive entre ejecuciones igual que en el navegador.

Uso:
    python -m vitrina.scripts.run_compare add <id> [--replace <id> | --replace-oldest]
    python -m vitrina.scripts.run_compare remove <id>
    python -m vitrina.scripts.run_compare list
    python -m vitrina.scripts.run_compare clear
    python -m vitrina.scripts.run_compare diff [--ids a,b] [--mode up_to_two]
"""

import argparse
import asyncio
import logging
import sys

import structlog

from vitrina.compare import CompareBar, CompareToggle, build_compare_store
from vitrina.comparison import ComparisonStatus, ComparisonView, CompareMode, parse_ids
from vitrina.config import get_settings
from vitrina.database import PropertyRepository, preview_fetcher, record_fetcher

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def cmd_add(store, args) -> int:
    if store.is_selected(args.property_id):
        print(f"{args.property_id} ya está seleccionada")
        return 0

    toggle = CompareToggle(store)
    result = toggle.toggle(args.property_id)
    if result == "ignored":
        logger.error("Id de propiedad vacío")
        return 1
    if result == "added":
        print(f"Agregada: {args.property_id} ({len(store)}/{store.max_items})")
        return 0

    if args.replace:
        replaced = toggle.confirm_replace(args.replace)
    elif args.replace_oldest:
        replaced = toggle.confirm_replace()
    else:
        print(toggle.prompt.message)
        print("Seleccionadas: " + ", ".join(toggle.prompt.candidates))
        print("Usá --replace <id> o --replace-oldest")
        toggle.cancel_replace()
        return 2

    if not replaced:
        logger.error("No se pudo reemplazar", replace=args.replace)
        return 1
    print("Selección: " + ", ".join(store.ids))
    return 0


async def cmd_list(store, repo) -> int:
    bar = CompareBar(store, preview_fetcher(repo))
    await bar.refresh()
    bar.close()

    if bar.error:
        logger.error("No se pudo cargar la selección", error=bar.error)
        return 1
    if not bar.visible:
        print("No hay propiedades seleccionadas")
        return 0

    print(bar.counter_label)
    for preview in bar.previews:
        print(f"  - {preview.title} ({preview.id})")
    url = bar.compare_url()
    if url:
        print(f"Comparar: {url}")
    return 0


async def cmd_diff(store, repo, args) -> int:
    ids = parse_ids(args.ids) if args.ids else list(store.ids)
    view = ComparisonView(record_fetcher(repo), mode=args.mode)
    result = await view.load(ids)

    if not result.ok:
        print(f"No se puede comparar: {result.message}")
        return 0 if result.status is ComparisonStatus.INVALID_SELECTION else 1

    if result.status is ComparisonStatus.PARTIAL:
        for record in result.records:
            print(f"  - {record.title} ({record.id})")
        print(f"Faltan {result.empty_slots} propiedad(es) para comparar")
        return 0

    left, right = result.records
    width = max(len(row.label) for row in result.rows) + 2
    print(f"{'':<{width}}{left.title[:24]:<26}{right.title[:24]:<26}")
    for row in result.rows:
        mark = "*" if row.is_different else " "
        print(f"{mark}{row.label:<{width - 1}}{row.values[0]:<26}{row.values[1]:<26}")
    return 0


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Comparador de propiedades")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Agrega una propiedad a la comparación")
    add.add_argument("property_id")
    add.add_argument("--replace", default=None, help="Id seleccionado a reemplazar")
    add.add_argument(
        "--replace-oldest",
        action="store_true",
        help="Reemplaza la selección más vieja si se llegó al tope",
    )

    remove = sub.add_parser("remove", help="Quita una propiedad de la comparación")
    remove.add_argument("property_id")

    sub.add_parser("clear", help="Vacía la selección")
    sub.add_parser("list", help="Muestra la selección actual")

    diff = sub.add_parser("diff", help="Muestra la tabla comparativa")
    diff.add_argument("--ids", default=None, help="Ids separados por coma (default: selección)")
    diff.add_argument(
        "--mode",
        default=settings.compare_mode,
        choices=[m.value for m in CompareMode],
        help="exactly_two exige 2 ids; up_to_two acepta selección parcial",
    )

    args = parser.parse_args()
    store = build_compare_store(settings)

    try:
        if args.command == "add":
            sys.exit(cmd_add(store, args))
        if args.command == "remove":
            store.remove(args.property_id)
            print("Selección: " + (", ".join(store.ids) or "(vacía)"))
            sys.exit(0)
        if args.command == "clear":
            store.clear()
            print("Selección vaciada")
            sys.exit(0)

        repo = PropertyRepository()
        if args.command == "list":
            sys.exit(asyncio.run(cmd_list(store, repo)))
        sys.exit(asyncio.run(cmd_diff(store, repo, args)))

    except KeyboardInterrupt:
        logger.info("Comparador interrumpido por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en comparador", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
