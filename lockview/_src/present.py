import json
import sys
from typing import List

from pydantic import BaseModel
from rich import box
from rich.console import Console
from rich.filesize import decimal
from rich.table import Table
from rich.text import Text

from lockview._src.constants import PackageKind, SortBy
from lockview._src.models.package import Package


_KIND_ORDER = {PackageKind.CONDA: 0, PackageKind.PYPI: 1}


class TableStyle(BaseModel):
    """Styles used when printing packages as a table"""
    header: str = "bold cyan"
    conda: str = "green"
    pypi: str = "blue"
    editable: str = "yellow"

    def kind(self, kind: PackageKind) -> str:
        return self.conda if kind == PackageKind.CONDA else self.pypi


def sort_packages(packages: List[Package], sort_by: SortBy) -> List[Package]:
    """Sort packages by size, name or kind.

    Packages with an unknown size sort as if they were empty. Equal keys
    are ordered by name and then by kind so the output is deterministic.
    """
    if sort_by == SortBy.SIZE:
        key = lambda pkg: (pkg.size_bytes or 0, pkg.name, _KIND_ORDER[pkg.kind])
    elif sort_by == SortBy.KIND:
        key = lambda pkg: (_KIND_ORDER[pkg.kind], pkg.name)
    else:
        key = lambda pkg: (pkg.name, _KIND_ORDER[pkg.kind])
    return sorted(packages, key=key)


def packages_table(packages: List[Package], style: TableStyle = TableStyle()) -> Table:
    table = Table(box=box.SIMPLE_HEAD, header_style=style.header, pad_edge=False)
    for column in ["Package", "Version", "Build", "Size", "Kind", "Source"]:
        table.add_column(column, justify="left", no_wrap=True)

    for pkg in packages:
        # explicit dependencies stand out
        if pkg.is_explicit:
            name = Text(pkg.name, style=f"bold {style.kind(pkg.kind)}")
        else:
            name = Text(pkg.name)

        source = Text(pkg.source or "")
        if pkg.is_editable:
            source.append(" (editable)", style=style.editable)

        table.add_row(
            name,
            pkg.version,
            pkg.build or "",
            decimal(pkg.size_bytes) if pkg.size_bytes is not None else "",
            Text(pkg.kind.value, style=style.kind(pkg.kind)),
            source,
        )
    return table


def print_packages_as_table(packages: List[Package], console: Console, style: TableStyle = TableStyle()):
    """Print the packages table at its natural width.

    Cells are never cut short: when the table is wider than the
    console, the console is widened to fit it.
    """
    table = packages_table(packages, style)
    width = console.measure(table, options=console.options.update_width(sys.maxsize)).maximum
    if width > console.width:
        console.size = (width, console.height)
    console.print(table)


def json_packages(packages: List[Package], json_pretty: bool = False) -> str:
    data = [pkg.to_json_dict() for pkg in packages]
    if json_pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
