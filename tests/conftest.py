import os
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest


def write(p: Path, text: str) -> Path:
    """
    Записывает текст в файл, создавая родительские директории при необходимости.
    """
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


def _run_cli(root: Path, *args: str) -> subprocess.CompletedProcess:
    env = os.environ.copy()
    return subprocess.run(
        [sys.executable, "-m", "amustache.cli", *args],
        cwd=root, env=env, capture_output=True, text=True, encoding="utf-8"
    )


@pytest.fixture
def run_cli():
    """Запуск CLI отдельным процессом: run_cli(root, *args)."""
    return _run_cli


@pytest.fixture
def write_file():
    """Функция записи файлов: write_file(path, text)."""
    return write


@pytest.fixture
def tmpproj(tmp_path: Path):
    """Минимальный проект: шаблон, включение и данные."""
    root = tmp_path
    write(root / "page.mustache", "Hello {{name}}!\n{{#items}}{{> item}}{{/items}}")
    write(root / "item.mustache", "- {{title}}\n")
    write(
        root / "data.yaml",
        textwrap.dedent("""
        name: "<World>"
        items:
          - title: one
          - title: two
        """).strip() + "\n",
    )
    return root
