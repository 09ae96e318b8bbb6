#!/usr/bin/env python3
"""
contentwire.py — CLI narzędzie Contentwire.

Działa całkowicie lokalnie na zapisanych odpowiedziach API (JSON),
nie wykonuje żadnych żądań HTTP.

Konfiguracja: zmienne środowiskowe z prefiksem CONTENTWIRE_
lub plik .env (np. CONTENTWIRE_DEFAULT_LOCALE=de-DE).

Podkomendy:
    decode   — zdekoduj odpowiedź (zasób albo kolekcję) i rozwiąż linki
    locales  — pokaż łańcuchy fallback dla listy locale
    dynamic  — pokaż dynamiczne dekodowanie dowolnego JSON

Użycie:
    python contentwire.py decode --file entries.json --locales locales.json --locale de-DE
    python contentwire.py decode --file entry.json --json
    python contentwire.py locales --file locales.json
    python contentwire.py dynamic --file fields.json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table


# -- helpers ---------------------------------------------------------------

_CONSOLE: Console | None = None


def _console() -> Console:
    global _CONSOLE
    if _CONSOLE is None:
        _CONSOLE = Console(highlight=False)
    return _CONSOLE


def _safe_terminal_text(value: Any) -> str:
    s = str(value).replace("→", "->").replace("—", "-").replace("…", "...")
    encoding = sys.stdout.encoding or "utf-8"
    try:
        s.encode(encoding)
        return s
    except UnicodeEncodeError:
        return s.encode(encoding, errors="replace").decode(encoding, errors="replace")


def _short(value: Any, limit: int = 64) -> str:
    s = _safe_terminal_text(value).replace("\n", " ").strip()
    if len(s) <= limit:
        return s
    return s[: limit - 3] + "..."


def _read_json(path: str | None) -> Any:
    try:
        if path:
            with open(path, encoding="utf-8") as fh:
                return json.load(fh)
        return json.load(sys.stdin)
    except OSError as e:
        print(f"Błąd odczytu pliku: {e}", file=sys.stderr)
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Niepoprawny JSON: {e}", file=sys.stderr)
        sys.exit(1)


def _load_locales(path: str | None) -> list[Any]:
    from contracts import Locale

    if not path:
        return []
    raw = _read_json(path)
    # akceptuje listę albo odpowiedź /locales ({"items": [...]})
    items = raw.get("items", []) if isinstance(raw, dict) else raw
    return [Locale.model_validate(item) for item in items]


def _print_resources_table(title: str, resources: list[Any]) -> None:
    from adapters.resource_decoder.summary import describe_value
    from contracts import Asset, Entry

    table = Table(title=f"{title} [{len(resources)}]", box=box.ASCII, show_lines=True)
    table.add_column("ID", no_wrap=True, style="cyan")
    table.add_column("Type", no_wrap=True)
    table.add_column("Content type", no_wrap=True)
    table.add_column("Fields")
    for resource in resources:
        if isinstance(resource, Entry):
            fields = resource.fields
        elif isinstance(resource, Asset):
            fields = {"title": resource.title, "url": resource.url}
        else:
            fields = {
                name: getattr(resource, name)
                for name in type(resource).model_fields
                if name != "sys"
            }
        lines = [f"{key}: {_short(describe_value(value), 72)}" for key, value in fields.items()]
        table.add_row(
            _safe_terminal_text(resource.id),
            _safe_terminal_text(resource.sys.type),
            _safe_terminal_text(resource.sys.content_type_id or "-"),
            "\n".join(lines) or "-",
        )
    _console().print(table)


# -- commands --------------------------------------------------------------


def _decode(args: argparse.Namespace) -> None:
    from adapters.resource_decoder.decoder import DecodeContext, ResponseDecoder
    from adapters.resource_decoder.summary import summarize_resource
    from config import Settings
    from contracts import ContentwireError

    settings = Settings()
    payload = _read_json(args.file)
    context = DecodeContext.create(
        locales=_load_locales(args.locales),
        locale=args.locale,
        default_locale=settings.default_locale,
        strict_content_types=settings.strict_content_types,
    )
    decoder = ResponseDecoder(context)

    try:
        sys_block = payload.get("sys") if isinstance(payload, dict) else None
        if isinstance(sys_block, dict) and sys_block.get("type") == "Array":
            result = decoder.decode_collection(payload, skip_invalid=args.skip_invalid)
            items = result.items
            includes = result.included_entries + result.included_assets
            errors = result.errors
        else:
            items = [decoder.decode_single(payload)]
            includes, errors = [], []
    except (ContentwireError, KeyError) as e:
        print(f"Błąd dekodowania: {e}", file=sys.stderr)
        sys.exit(2)

    if args.json:
        out = {
            "locale": context.localization.current_locale.code,
            "items": [summarize_resource(r) for r in items],
            "includes": [summarize_resource(r) for r in includes],
            "errors": errors,
        }
        print(json.dumps(out, ensure_ascii=False, indent=2))
        return

    _print_resources_table(f"Items ({context.localization.current_locale.code})", items)
    if includes:
        _print_resources_table("Includes", includes)
    for err in errors:
        print(f"  ! {_short(err.get('details', err), 120)}")


def _locales(args: argparse.Namespace) -> None:
    from adapters.locale.fallback import fallback_chain
    from contracts import LocalizationContext

    locales = _load_locales(args.file)
    if not locales:
        print("Brak locale.")
        return
    context = LocalizationContext.from_locales(locales)

    table = Table(title=f"Locales [{len(locales)}]", box=box.ASCII)
    table.add_column("Code", no_wrap=True, style="cyan")
    table.add_column("Default", justify="center", no_wrap=True)
    table.add_column("Fallback chain")
    for locale in locales:
        table.add_row(
            _safe_terminal_text(locale.code),
            "yes" if locale.default else "",
            _safe_terminal_text(" -> ".join(fallback_chain(locale, context))),
        )
    _console().print(table)


def _dynamic(args: argparse.Namespace) -> None:
    from adapters.json_decoder.dynamic import decode_mapping, decode_sequence, value_kind

    payload = _read_json(args.file)
    if isinstance(payload, dict):
        decoded: Any = decode_mapping(payload)
        rows = list(decoded.items())
    elif isinstance(payload, list):
        decoded = decode_sequence(payload)
        rows = [(f"[{i}]", v) for i, v in enumerate(decoded)]
    else:
        print("Błąd: oczekiwano obiektu albo tablicy JSON", file=sys.stderr)
        sys.exit(1)

    table = Table(title=f"Dynamic decode [{len(rows)}]", box=box.ASCII)
    table.add_column("Key", no_wrap=True, style="bold cyan")
    table.add_column("Kind", no_wrap=True)
    table.add_column("Value")
    for key, value in rows:
        table.add_row(_safe_terminal_text(key), value_kind(value), _short(repr(value), 80))
    _console().print(table)


def main() -> None:
    from config import Settings

    parser = argparse.ArgumentParser(
        prog="contentwire",
        description="Contentwire — CLI (lokalny, bez HTTP)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # decode
    p = sub.add_parser("decode", help="Zdekoduj odpowiedź i rozwiąż linki")
    p.add_argument("--file", "-f", help="Plik z odpowiedzią JSON (lub stdin)")
    p.add_argument("--locales", "-L", help="Plik JSON z listą locale (fallbackCode)")
    p.add_argument("--locale", "-l", help="Bieżące locale (domyślnie: default z listy)")
    p.add_argument("--skip-invalid", action="store_true",
                   help="Pomiń wadliwe zasoby kolekcji zamiast przerywać")
    p.add_argument("--json", action="store_true", help="Wypisz podgląd jako JSON")

    # locales
    p = sub.add_parser("locales", help="Pokaż łańcuchy fallback locale")
    p.add_argument("--file", "-f", help="Plik JSON z listą locale (lub stdin)")

    # dynamic
    p = sub.add_parser("dynamic", help="Dynamiczne dekodowanie dowolnego JSON")
    p.add_argument("--file", "-f", help="Plik JSON (lub stdin)")

    args = parser.parse_args()
    logging.basicConfig(level=Settings().log_level.upper())

    commands = {
        "decode":  _decode,
        "locales": _locales,
        "dynamic": _dynamic,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
