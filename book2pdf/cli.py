# === FILE: book2pdf/cli.py ===
#!/usr/bin/env python3
"""
Точка входа book2pdf: превращает опубликованную документацию (GitBook,
Docusaurus) в набор PDF для чтения офлайн.

Команды:
  download  Обойти сайт, отрендерить страницы и (по умолчанию) склеить их
  merge     Склеить готовые PDF из каталога в один документ

Общие опции:
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --version, -v       Показать версию book2pdf

Пример:
  book2pdf download https://docs.example.com/ -o book --preserve-pages
  book2pdf merge -d book/pages -o book.pdf
"""
import asyncio
import sys
from pathlib import Path

import click

from book2pdf import __version__
from book2pdf.config import build_config
from book2pdf.engine import start_download
from book2pdf.logger import configure
from book2pdf.pdf.merger import merge_directory

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(f"Error: {message}", fg='red', err=True)
    sys.exit(1)


class NonNegativeFloat(click.ParamType):
    """Число секунд >= 0."""
    name = "seconds"

    def convert(self, value, param, ctx):
        if isinstance(value, float):
            number = value
        else:
            try:
                number = float(value)
            except (TypeError, ValueError):
                self.fail("Not a number.", param, ctx)
        if number < 0:
            self.fail("Must be zero or positive number.", param, ctx)
        return number


NON_NEGATIVE_FLOAT = NonNegativeFloat()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='book2pdf, version %(version)s')
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.pass_context
def cli(ctx, log_level, log_file):
    """Turn a published documentation website into PDFs for offline reading."""
    ctx.ensure_object(dict)
    ctx.obj['logger'] = configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
    )


@cli.command('download', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option(
    '--outDir', '-o', 'out_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Output directory used to save files  [default: output_book2pdf]'
)
@click.option(
    '--no-combine', 'no_combine', is_flag=True,
    help="Don't combine PDFs into a single file (combined by default)"
)
@click.option(
    '--preserve-pages', '-p', 'preserve_pages', is_flag=True,
    help='Keep individual page PDFs after combining (deleted by default)'
)
@click.option(
    '--timeout', '-t', 'timeout',
    type=NON_NEGATIVE_FLOAT,
    default=None,
    help='Navigation timeout in seconds, 0 disables it  [default: 30.0]'
)
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML/JSON file with download settings'
)
@click.pass_context
def download(ctx, url, out_dir, no_combine, preserve_pages, timeout, config_path):
    """Download a documentation website and convert it to PDF."""
    logger = ctx.obj['logger']
    try:
        cfg = build_config(
            url,
            config_path,
            out_dir=out_dir,
            combine=False if no_combine else None,
            preserve_pages=True if preserve_pages else None,
            timeout=timeout,
        )
    except (ValueError, TypeError, OSError) as e:
        print_error(f'Invalid configuration: {e}')

    try:
        result = asyncio.run(start_download(cfg, logger))
    except Exception as e:
        logger.debug("Download failed", exc_info=True)
        print_error(str(e))

    if result.combined_path is not None:
        click.echo(f'Combined PDF: {result.combined_path}')
    else:
        click.echo(f'Pages: {cfg.pages_dir} ({len(result.artifacts)} files)')


@cli.command('merge', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--dir', '-d', 'input_dir',
    default='output/pages', show_default=True,
    type=click.Path(path_type=Path),
    help='Directory containing PDF files to merge'
)
@click.option(
    '--output', '-o', 'output_file',
    default='merged.pdf', show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Output file path for the merged PDF'
)
@click.pass_context
def merge(ctx, input_dir, output_file):
    """Merge existing PDF files (sorted by name) into a single document."""
    logger = ctx.obj['logger']
    try:
        result = merge_directory(input_dir, output_file, logger)
    except Exception as e:
        print_error(str(e))
    click.echo(f'Merged {len(result.sources)} PDFs ({result.page_count} pages): {output_file}')


if __name__ == "__main__":
    cli()
