import logging
import sys
from pathlib import Path

import click

from .config import Config, load_config
from .exceptions import CompileError, SongSheetError
from .latex import LatexFormatter
from .songbook import build_songbook, load_songs

DEFAULT_CONFIG = Path("config.toml")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


def _load(config_path: str | None) -> Config:
    if config_path is not None:
        return load_config(Path(config_path))
    if DEFAULT_CONFIG.exists():
        return load_config(DEFAULT_CONFIG)
    logging.getLogger(__name__).info("No %s found, using defaults.", DEFAULT_CONFIG)
    return Config()


@click.command()
@click.option("-c", "--config", "config_path", default=None, metavar="PATH",
              help=f"Config file (default: {DEFAULT_CONFIG} if present).")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Generated .tex file (overrides output.tex_file).")
@click.option("--stdout", is_flag=True, default=False,
              help="Print the LaTeX to stdout instead of writing and compiling it.")
@click.option("--no-compile", "no_compile", is_flag=True, default=False,
              help="Write the .tex file but do not run LaTeX.")
@click.option("-v", "--verbose", is_flag=True, default=False,
              help="Show debug logging.")
def main(config_path: str | None, output_path: str | None, stdout: bool,
         no_compile: bool, verbose: bool) -> None:
    """Build a printable song sheet from song sources.

    \b
    Supported source formats:
      - videopsalm  (VideoPsalm .json song book)
      - plaintext   (directory of plain-text song files)
    """
    _configure_logging(verbose)

    try:
        config = _load(config_path)
        if output_path:
            config.tex_file = Path(output_path)

        # --- Preview ---
        if stdout:
            songs = load_songs(config)
            click.echo(LatexFormatter(config.template).render(songs), nl=False)
            return

        # --- Build ---
        tex_file = build_songbook(config, compile_pdf=not no_compile)
    except CompileError as exc:
        click.echo(f"Error: {exc}", err=True)
        click.echo(f"The generated LaTeX was left in {config.tex_file}", err=True)
        sys.exit(1)
    except SongSheetError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if no_compile:
        click.echo(f"Written to {tex_file}")
    else:
        click.echo(f"Compiled {tex_file}")
