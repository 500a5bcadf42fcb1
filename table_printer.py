#!/usr/bin/env python3
"""Tabular output for terminals, tab-separated output for scripts."""

from __future__ import annotations

import sys
from typing import Callable, List, Optional, TextIO, Tuple

import colorama

from catalog import RepoCatalog

Field = Tuple[str, Optional[Callable[[str], str]]]


def green(text: str) -> str:
    return f"{colorama.Fore.GREEN}{text}{colorama.Style.RESET_ALL}"


class TablePrinter:
    """Collects rows of fields and renders them in one go.

    On a terminal, columns are padded to a common width and colors are
    applied. Otherwise each row is written as tab-separated plain text.
    """

    COLUMN_GAP = "  "

    def __init__(self, out: TextIO, is_terminal: bool) -> None:
        self.out = out
        self.is_terminal = is_terminal
        self.rows: List[List[Field]] = []
        self._current: List[Field] = []

    def add_field(self, text: str, color: Optional[Callable[[str], str]] = None) -> None:
        self._current.append((text, color))

    def end_row(self) -> None:
        self.rows.append(self._current)
        self._current = []

    def render(self) -> None:
        if self._current:
            self.end_row()
        if self.is_terminal:
            self._render_terminal()
        else:
            for row in self.rows:
                self.out.write("\t".join(text for text, _ in row) + "\n")
        self.out.flush()

    def _render_terminal(self) -> None:
        widths: List[int] = []
        for row in self.rows:
            for idx, (text, _) in enumerate(row):
                if idx >= len(widths):
                    widths.append(0)
                widths[idx] = max(widths[idx], len(text))

        for row in self.rows:
            cells = []
            last = len(row) - 1
            for idx, (text, color) in enumerate(row):
                # Pad before coloring so escape codes do not skew the widths
                cell = text if idx == last else text.ljust(widths[idx])
                cells.append(color(cell) if color else cell)
            self.out.write(self.COLUMN_GAP.join(cells).rstrip() + "\n")


def print_catalog(
    catalog: RepoCatalog,
    out: Optional[TextIO] = None,
    is_terminal: Optional[bool] = None,
    show_language: bool = True,
) -> int:
    """Render one row per descriptor and return the number of rows."""
    out = out or sys.stdout
    if is_terminal is None:
        is_terminal = hasattr(out, "isatty") and out.isatty()

    table = TablePrinter(out, is_terminal)
    count = 0
    for descriptor in catalog:
        table.add_field("-", color=green)
        table.add_field(descriptor.full_name)
        if show_language:
            table.add_field(descriptor.primary_language or "")
        else:
            table.add_field(descriptor.owner_login)
            table.add_field(descriptor.name)
        table.end_row()
        count += 1

    table.render()
    return count
