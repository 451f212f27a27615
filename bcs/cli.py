"""CLI entrypoint for bcs."""

import logging
import sys
import tomllib
from pathlib import Path

import click

from . import __version__
from .config import DATA_DIR_ENV, load_config
from .models import BcsError, CorpusRootNotFound


def _auto_detect_data_dir(start: Path) -> Path | None:
    """Find a ./data corpus folder by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if p.is_dir() and p.name == "data" and any(p.glob("*/00-*.md")):
            return p
        candidate = p / "data"
        if candidate.is_dir():
            return candidate
    return None


def _run(func, *args, **kwargs) -> None:
    """Call a run_* function and exit with its code."""
    try:
        exit_code = func(*args, **kwargs)
    except CorpusRootNotFound as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


def tier_options(func):
    """Attach the -c/-s/-a/-r tier selection flags (all write to `tier`)."""
    for flag, name in reversed(
        (
            ("-c", "complete"),
            ("-s", "summary"),
            ("-a", "abstract"),
            ("-r", "rulet"),
        )
    ):
        func = click.option(flag, f"--{name}", "tier", flag_value=name, help=f"Use the {name} tier")(func)
    return func


@click.group()
@click.version_option(__version__, prog_name="bcs")
@click.option(
    "--data-dir",
    "-d",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    envvar=DATA_DIR_ENV,
    default=None,
    help="Path to the rule corpus (defaults to auto-detected ./data)",
)
@click.option("--verbose", "-V", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, verbose: bool) -> None:
    """bcs - Bash Coding Standard lookup and validation.

    Resolve BCS codes to rule files, list and search the standard, and
    check the rule corpus for structural problems.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    ctx.ensure_object(dict)
    if data_dir is None:
        detected = _auto_detect_data_dir(Path.cwd())
        if detected is None:
            raise click.ClickException(
                f"Corpus not found. Pass --data-dir /path/to/data or set {DATA_DIR_ENV}."
            )
        data_dir = detected

    if not data_dir.exists() or not data_dir.is_dir():
        raise click.BadParameter(f"Directory '{data_dir}' does not exist.", param_hint="--data-dir / -d")

    data_dir = data_dir.resolve()
    try:
        config = load_config(data_dir)
    except (BcsError, ValueError, tomllib.TOMLDecodeError) as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    ctx.obj["data_dir"] = data_dir
    ctx.obj["config"] = config


@cli.command()
@click.argument("codes", nargs=-1, required=True)
@tier_options
@click.option("--all", "all_tiers", is_flag=True, help="Show every available tier (with --print, each under a tier heading)")
@click.option("--print", "-p", "print_content", is_flag=True, help="Print file content instead of paths")
@click.option("--exists", is_flag=True, help="Print nothing; exit 0 only if every code resolves")
@click.option("--relative", is_flag=True, help="Print paths relative to the corpus root")
@click.option("--basename", is_flag=True, help="Print file names only")
@click.pass_context
def decode(
    ctx: click.Context,
    codes: tuple[str, ...],
    tier: str | None,
    all_tiers: bool,
    print_content: bool,
    exists: bool,
    relative: bool,
    basename: bool,
) -> None:
    """Resolve BCS codes to rule files.

    Without a tier flag the default tier is preferred, falling back to the
    most detailed tier available.

    Examples:

        bcs decode BCS0102

        bcs decode BCS0102 -s --print

        bcs decode BCS01 --all --relative
    """
    from .commands.decode import run_decode

    _run(
        run_decode,
        ctx.obj["data_dir"],
        ctx.obj["config"],
        codes,
        tier=tier,
        all_tiers=all_tiers,
        print_content=print_content,
        exists=exists,
        relative=relative,
        basename=basename,
    )


@cli.command()
@click.argument("codes", nargs=-1, required=True)
@tier_options
@click.pass_context
def explain(ctx: click.Context, codes: tuple[str, ...], tier: str | None) -> None:
    """Print the content of rules (complete tier unless a flag says otherwise)."""
    from .commands.decode import run_explain

    _run(run_explain, ctx.obj["data_dir"], ctx.obj["config"], codes, tier=tier)


@cli.command()
@click.pass_context
def codes(ctx: click.Context) -> None:
    """List every BCS code as BCS{code}:{shortname}:{title}."""
    from .commands.codes import run_codes

    _run(run_codes, ctx.obj["data_dir"], ctx.obj["config"])


cli.add_command(codes, "list-codes")


@cli.command()
@click.argument("pattern")
@click.option("--ignore-case", "-i", is_flag=True, help="Case-insensitive match")
@click.option("--context", "-C", type=click.IntRange(min=0), default=0, show_default=True, help="Lines of context")
@click.option("--fixed-strings", "-F", "fixed", is_flag=True, help="Treat PATTERN as a literal string")
@click.option("--relative", is_flag=True, help="Print paths relative to the corpus root")
@tier_options
@click.pass_context
def search(
    ctx: click.Context,
    pattern: str,
    ignore_case: bool,
    context: int,
    fixed: bool,
    relative: bool,
    tier: str | None,
) -> None:
    """Search rule files for PATTERN (regular expression).

    Examples:

        bcs search 'set -euo'

        bcs search -i -C 2 shebang -a
    """
    from .commands.search import run_search

    _run(
        run_search,
        ctx.obj["data_dir"],
        ctx.obj["config"],
        pattern,
        ignore_case=ignore_case,
        context=context,
        tier=tier,
        fixed=fixed,
        relative=relative,
    )


cli.add_command(search, "grep")


@cli.command()
@click.pass_context
def sections(ctx: click.Context) -> None:
    """List the numbered sections of the standard."""
    from .commands.codes import run_sections

    _run(run_sections, ctx.obj["data_dir"], ctx.obj["config"])


@cli.command()
@click.argument("tier", required=False)
@click.option("--list", "-l", "list_tiers", is_flag=True, help="List tiers; * marks the default")
@click.option("--file", "-f", "show_file", is_flag=True, help="Print the default consolidated document path")
@click.pass_context
def default(ctx: click.Context, tier: str | None, list_tiers: bool, show_file: bool) -> None:
    """Show the default tier, or set it to TIER.

    Setting repoints the BASH-CODING-STANDARD.md symlink at
    BASH-CODING-STANDARD.<tier>.md.
    """
    from .commands.default import run_default

    _run(
        run_default,
        ctx.obj["data_dir"],
        ctx.obj["config"],
        tier=tier,
        list_tiers=list_tiers,
        show_file=show_file,
    )


@cli.command()
@click.argument("codes", nargs=-1, required=True)
@click.option("--all", "all_tiers", is_flag=True, help="Show every available tier")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def info(ctx: click.Context, codes: tuple[str, ...], all_tiers: bool, output_json: bool) -> None:
    """Show file metadata for codes (size, lines, modified, title)."""
    from .commands.info import run_info

    _run(run_info, ctx.obj["data_dir"], ctx.obj["config"], codes, all_tiers=all_tiers, output_json=output_json)


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.option("--quiet", "-q", is_flag=True, help="No output; exit status only")
@click.option(
    "--explain",
    "explain_kind",
    type=str,
    default=None,
    metavar="KIND",
    help="Explain a violation kind and exit (e.g., --explain missing-tier)",
)
@click.pass_context
def validate(ctx: click.Context, output_json: bool, quiet: bool, explain_kind: str | None) -> None:
    """Check the corpus for structural violations.

    Checks tier completeness, code uniqueness, file and directory naming,
    section count, embedded code markers and header files. Oversized
    summary/abstract files are reported as warnings.

    Use --explain KIND to see documentation for a violation kind.
    """
    from .commands.validate import run_explain_kind, run_validate

    if explain_kind:
        sys.exit(run_explain_kind(explain_kind))

    _run(run_validate, ctx.obj["data_dir"], ctx.obj["config"], output_json=output_json, quiet=quiet)


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.pass_context
def reverse(ctx: click.Context, paths: tuple[Path, ...]) -> None:
    """Map rule file paths back to their BCS codes."""
    from .commands.reverse import run_reverse

    _run(run_reverse, ctx.obj["data_dir"], ctx.obj["config"], paths)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
