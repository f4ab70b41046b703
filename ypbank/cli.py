# ypbank/cli.py
import logging
import sys

import click
import yaml
from dotenv import load_dotenv

from ypbank import compare_collections, get_format
from ypbank.config import load_config, resolve_log_level
from ypbank.errors import YPBankError
from ypbank.formats import FormatTag

logger = logging.getLogger(__name__)

FORMAT_CHOICES = [tag.value for tag in FormatTag]
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _read(stream, tag, cfg):
    try:
        collection = get_format(tag, cfg).read(stream)
    except YPBankError as e:
        raise click.ClickException(f"{stream.name}: {e}") from e
    logger.info("Read %d transaction(s) from %s", len(collection), stream.name)
    return collection


@click.group()
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional config.yaml overriding format modules and log level'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file (e.g. YPBANK_LOG_LEVEL)'
)
@click.option(
    '--log-level', 'log_level',
    default=None,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help='Logging level for diagnostics on stderr'
)
@click.pass_context
def main(ctx, config_path, env_file, log_level):
    """
    Convert bank transaction files between CSV, text and binary formats,
    or compare two files record by record.
    """
    if env_file:
        load_dotenv(env_file)

    try:
        cfg = load_config(config_path)
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Could not load config: {e}") from e

    level = resolve_log_level(cfg, log_level)
    if level not in LOG_LEVELS:
        raise click.ClickException(f"Unknown log level '{level}'")
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format='%(levelname)s %(name)s: %(message)s',
    )
    ctx.obj = cfg


@main.command()
@click.option(
    '--input', 'input_file',
    required=True,
    type=click.File('rb'),
    help='File to convert'
)
@click.option(
    '--input-format', 'input_format',
    required=True,
    type=click.Choice(FORMAT_CHOICES),
    help='Format of the input file'
)
@click.option(
    '--output-format', 'output_format',
    required=True,
    type=click.Choice(FORMAT_CHOICES),
    help='Format written to standard output'
)
@click.pass_obj
def convert(cfg, input_file, input_format, output_format):
    """Convert a transaction file and write the result to stdout."""
    collection = _read(input_file, input_format, cfg)
    try:
        data = get_format(output_format, cfg).serialize(collection)
    except YPBankError as e:
        raise click.ClickException(str(e)) from e

    stdout = click.get_binary_stream('stdout')
    stdout.write(data)
    stdout.flush()
    logger.info(
        "Converted %d transaction(s) from %s to %s",
        len(collection), input_format, output_format,
    )


@main.command()
@click.option('--file1', required=True, type=click.File('rb'), help='First file')
@click.option(
    '--format1', required=True, type=click.Choice(FORMAT_CHOICES),
    help='Format of the first file'
)
@click.option('--file2', required=True, type=click.File('rb'), help='Second file')
@click.option(
    '--format2', required=True, type=click.Choice(FORMAT_CHOICES),
    help='Format of the second file'
)
@click.pass_obj
def compare(cfg, file1, format1, file2, format2):
    """
    Compare two transaction files by transaction_id. Differences are
    reported, not treated as failures.
    """
    left = _read(file1, format1, cfg)
    right = _read(file2, format2, cfg)
    report = compare_collections(left, right, file1.name, file2.name)
    for line in report.describe():
        click.echo(line)
