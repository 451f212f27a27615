"""Info command implementation - tier file metadata for codes."""

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import BcsConfig
from ..corpus.loader import build_index
from ..corpus.query import FileInfo, decode_to_path, file_info
from ..corpus.resolver import BEST
from ..corpus.tiers import preferred_order
from .decode import EXIT_OK, error_exit_code


def run_info(
    data_dir: Path,
    config: BcsConfig,
    codes: tuple[str, ...],
    all_tiers: bool = False,
    output_json: bool = False,
) -> int:
    """Show file metadata (basename, size, lines, modified, title) for codes.

    Returns:
        Exit code (0 = all found, 1 = some not found, 2 = malformed code)
    """
    console = Console(stderr=True)
    out = Console()

    index = build_index(data_dir, config)
    results = decode_to_path(index, codes, BEST, all_tiers=all_tiers, order=preferred_order(data_dir, config))

    exit_code = EXIT_OK
    report: list[dict] = []

    for result in results:
        if not result.ok:
            exit_code = max(exit_code, error_exit_code(result.error))
            console.print(f"Error: {escape(str(result.error))}", style="bold red")
            continue

        infos = [file_info(f) for f in result.files]
        if output_json:
            report.append({"code": result.address.code, "files": [i.to_dict() for i in infos]})
        else:
            out.print(_info_table(result.address.code, infos))

    if output_json:
        print(json.dumps(report, indent=2))

    return exit_code


def _info_table(code: str, infos: list[FileInfo]) -> Table:
    table = Table(title=code)
    table.add_column("Tier", style="cyan")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Lines", justify="right")
    table.add_column("Modified")
    table.add_column("Title")

    for info in infos:
        table.add_row(
            info.tier.label,
            escape(info.basename),
            f"{info.size_bytes} B",
            str(info.lines),
            info.modified.strftime("%Y-%m-%d %H:%M"),
            escape(info.title or ""),
        )
    return table
