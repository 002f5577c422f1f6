"""Filesystem utility helpers."""

from __future__ import annotations
import os


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def ensure_parent_dir(path: str) -> None:
    dir_part = os.path.dirname(path)
    if dir_part:
        ensure_dir(dir_part)


def write_text(path: str, content: str, encoding: str = "utf-8") -> None:
    ensure_parent_dir(path)
    with open(path, "w", encoding=encoding) as fh:
        fh.write(content)


def read_text(path: str, encoding: str = "utf-8") -> str:
    # TXT tables ship with a UTF-8 BOM now and then; errors="replace" keeps
    # stray Latin-1 bytes from aborting a sync.
    with open(path, "r", encoding=encoding, errors="replace") as fh:
        text = fh.read()
    return text.lstrip("\ufeff")
