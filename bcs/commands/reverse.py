"""Reverse command implementation - file paths back to BCS codes."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import BcsConfig
from ..corpus.loader import build_index
from ..corpus.query import decode_path
from .decode import EXIT_NOT_FOUND, EXIT_OK


def run_reverse(data_dir: Path, config: BcsConfig, paths: tuple[Path, ...]) -> int:
    """Print `path: CODE` for each path.

    Paths may be absolute, relative to the current directory, or relative
    to the corpus root.

    Returns:
        Exit code (0 = all mapped, 1 = some path is not an indexed tier file)
    """
    console = Console(stderr=True)

    index = build_index(data_dir, config)
    exit_code = EXIT_OK

    for path in paths:
        address = decode_path(index, path)
        if address is None:
            console.print(f"Error: {escape(str(path))} is not an indexed BCS tier file", style="bold red")
            exit_code = EXIT_NOT_FOUND
            continue
        print(f"{path}: {address.code}")

    return exit_code
