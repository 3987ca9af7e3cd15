"""
Builds an HTML site from a directory of gem-text files.
The input directory is copied to the output directory and every gem-text file
in the copy is replaced by its HTML conversion.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import click
from .config import ConfigError, build_config
from .exceptions import SiteCopyError
from .filesystem import build_site, get_max_file_size

__all__ = ["cli"]


@click.command()
@click.version_option()
@click.option("--source-extension", help="Extension of the files to convert (default: .gmi)")
@click.option("--target-extension", help="Extension of the converted files (default: .html)")
@click.option(
    "--escape-html/--no-escape-html",
    default=None,
    help="Escape &, <, > and \" in the generated HTML",
)
@click.option(
    "--close-preformatted/--no-close-preformatted",
    default=None,
    help="Close preformatted blocks left open at the end of a file",
)
@click.option("--jobs", type=int, help="Number of files converted concurrently")
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("output_dir", type=click.Path())
def cli(
    input_dir: str,
    output_dir: str,
    source_extension: str | None = None,
    target_extension: str | None = None,
    escape_html: bool | None = None,
    close_preformatted: bool | None = None,
    jobs: int | None = None,
):
    """
    Copy INPUT_DIR to OUTPUT_DIR, converting gem-text files to HTML.

    Args:
        input_dir: Directory holding the gem-text site.
        output_dir: Directory to create; it must not exist.
        source_extension: Override for the extension of converted files.
        target_extension: Override for the extension given to converted files.
        escape_html: Override for HTML escaping of the generated content.
        close_preformatted: Override for closing unterminated preformatted blocks.
        jobs: Override for the number of concurrent conversions.

    Returns:
        None.

    Raises:
        click.BadParameter: If the configuration is invalid.
        click.ClickException: If the directory cannot be copied or any file
            fails to convert.

    Examples:
        gemtext-site capsule public --escape-html
    """
    source = Path(input_dir)
    destination = Path(output_dir)
    try:
        config = build_config(
            source,
            source_extension=source_extension,
            target_extension=target_extension,
            escape_html=escape_html,
            close_unterminated_preformatted=close_preformatted,
            jobs=jobs,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        config = replace(config, max_file_size=get_max_file_size(default=config.max_file_size))
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        report = build_site(
            source,
            destination,
            config,
            warn=lambda message: click.echo(message, err=True),
        )
    except SiteCopyError as error:
        raise click.ClickException(f"{error}\nFailed to copy directory") from error

    for failure in report.failures:
        click.echo(f"couldn't convert {failure.path}: {failure.reason}", err=True)

    if not report.ok:
        raise click.ClickException(
            f"{len(report.failures)} of "
            f"{len(report.failures) + len(report.converted)} files could not be converted"
        )


if __name__ == "__main__":
    cli()
