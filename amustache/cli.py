from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

from .config import MissingPolicy, RenderOptions, load_data, load_options
from .errors import AmustacheError
from .template import TemplateProcessor, list_escapers, parse_template, to_dict
from .template.partials import PARTIAL_SUFFIX
from .version import tool_version


def _setup_logging() -> None:
    level = logging.DEBUG if os.environ.get("AMUSTACHE_DEBUG") else logging.WARNING
    root = logging.getLogger("amustache")
    root.setLevel(level)
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        root.addHandler(h)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="amustache",
        description="Attributed Mustache templates",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp_render = sub.add_parser("render", help="Рендер шаблона в текст")
    sp_render.add_argument("template", help="путь к файлу шаблона")
    sp_render.add_argument(
        "--data",
        metavar="FILE|-",
        help="данные контекста: YAML или JSON (*.json); '-' читает stdin",
    )
    sp_render.add_argument(
        "--partials",
        metavar="DIR",
        help="каталог включений {{>name}} (по умолчанию каталог шаблона)",
    )
    sp_render.add_argument(
        "--suffix",
        default=PARTIAL_SUFFIX,
        help=f"суффикс файлов включений (по умолчанию {PARTIAL_SUFFIX})",
    )
    sp_render.add_argument("--config", metavar="FILE", help="YAML с настройками рендеринга")
    sp_render.add_argument(
        "--strict",
        action="store_true",
        help="ошибка на неизвестных именах и включениях",
    )
    sp_render.add_argument("--escape", choices=list_escapers(), help="функция экранирования")
    sp_render.add_argument(
        "--json",
        action="store_true",
        help="вывести список прогонов (text + attributes) в JSON",
    )

    sp_parse = sub.add_parser("parse", help="AST шаблона (JSON)")
    sp_parse.add_argument("template", help="путь к файлу шаблона")

    return p


def _options(ns: argparse.Namespace) -> RenderOptions:
    options = load_options(Path(ns.config)) if ns.config else RenderOptions()
    if ns.strict:
        options = options.merged(missing_partial=MissingPolicy.ERROR, missing_name=MissingPolicy.ERROR)
    return options.merged(escape=ns.escape)


def _read_template(path_arg: str) -> str:
    path = Path(path_arg)
    if not path.is_file():
        raise ValueError(f"Template file not found: {path}")
    return path.read_text(encoding="utf-8")


def _jdumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2, default=str) + "\n"


def main(argv: Optional[list[str]] = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging()

    try:
        if ns.cmd == "render":
            template_path = Path(ns.template)
            source = _read_template(ns.template)
            data = load_data(Path(ns.data)) if ns.data else None
            partials_dir = Path(ns.partials) if ns.partials else template_path.parent
            processor = TemplateProcessor.from_directory(partials_dir, ns.suffix, options=_options(ns))
            result = processor.render(source, data, name=template_path.stem)
            if ns.json:
                sys.stdout.write(_jdumps(result.to_json()))
            else:
                sys.stdout.write(result.plain)
            return 0

        if ns.cmd == "parse":
            source = _read_template(ns.template)
            tree = parse_template(source, template_name=Path(ns.template).stem)
            sys.stdout.write(_jdumps(to_dict(tree)))
            return 0

    except AmustacheError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
