import logging
import pathlib
from typing import Annotated, BinaryIO, Optional

import typer
from rich.logging import RichHandler

from prefix_writer import console, utils
from prefix_writer.config import PrefixConfig, dump_config, load_config
from prefix_writer.writer import FlushMode, PrefixWriter

logger = logging.getLogger(__name__)

DEMO_PREFIX = 'basic-example: '

app = typer.Typer(no_args_is_help=True)
config_app = typer.Typer(no_args_is_help=True)
app.add_typer(
    config_app,
    name='config',
    help='Inspect the filter configuration (sub-command).',
)

ConfigOption = Annotated[
    Optional[pathlib.Path],
    typer.Option(
        '--config',
        '-c',
        help='YAML file with the filter configuration.',
        dir_okay=False,
    ),
]


def version_callback(value: bool) -> None:
    if value:
        console.console.print(f'{utils.APP_NAME} version {utils.get_version()}')
        raise typer.Exit()


def setup_logging(verbose: bool):
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(message)s',
        handlers=[RichHandler(console=console.stderr_console, show_path=False)],
        force=True,
    )


def resolve_config(
    config_path: Optional[pathlib.Path],
    prefix: Optional[str] = None,
    flush_mode: Optional[FlushMode] = None,
    chunk_size: Optional[int] = None,
) -> PrefixConfig:
    config = load_config(config_path) if config_path is not None else PrefixConfig()
    overrides = {}
    if prefix is not None:
        overrides['prefix'] = prefix
    if flush_mode is not None:
        overrides['flush_mode'] = flush_mode
    if chunk_size is not None:
        overrides['chunk_size'] = chunk_size
    return config.model_copy(update=overrides)


def pump(
    source: BinaryIO,
    writer: PrefixWriter,
    chunk_size: int,
    line_buffered: bool = False,
) -> int:
    """Copy `source` through `writer` until EOF. Returns the bytes consumed."""
    # read1() returns what is available instead of waiting for a full chunk.
    read = getattr(source, 'read1', source.read)
    total = 0
    while True:
        chunk = read(chunk_size)
        if not chunk:
            break
        total += writer.write(chunk)
        if line_buffered:
            writer.flush()
    return total


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        '--verbose',
        '-V',
        help='Log the writer state transitions to stderr.',
    ),
    version: Annotated[
        bool, typer.Option('--version', '-v', callback=version_callback, is_eager=True)
    ] = False,
):
    setup_logging(verbose)


@app.command('run', help='Prefix every non-empty line read from the input.')
def run(
    prefix: Annotated[
        Optional[str],
        typer.Argument(help='Prefix to insert. Defaults to the configured one.'),
    ] = None,
    input_path: Optional[pathlib.Path] = typer.Option(
        None,
        '--input',
        '-i',
        help='File to read from instead of stdin.',
        exists=True,
        dir_okay=False,
    ),
    config_path: ConfigOption = None,
    flush_mode: Optional[FlushMode] = typer.Option(
        None,
        '--flush-mode',
        help='What flushing does to a partial line.',
        case_sensitive=False,
    ),
    chunk_size: Optional[int] = typer.Option(
        None,
        '--chunk-size',
        min=1,
        help='Number of bytes to read at a time.',
    ),
    line_buffered: bool = typer.Option(
        False,
        '--line-buffered',
        '-l',
        help='Flush the output after every chunk read.',
    ),
):
    config = resolve_config(config_path, prefix, flush_mode, chunk_size)
    stdout = typer.get_binary_stream('stdout')

    with config.build_writer(stdout) as writer:
        if input_path is not None:
            with input_path.open('rb') as f:
                total = pump(f, writer, config.chunk_size, line_buffered)
        else:
            stdin = typer.get_binary_stream('stdin')
            total = pump(stdin, writer, config.chunk_size, line_buffered)
    logger.debug('Forwarded %d input bytes.', total)


@app.command('demo', help='Write a single prefixed line to stdout.')
def demo(
    prefix: Annotated[str, typer.Argument(help='Prefix to insert.')] = DEMO_PREFIX,
):
    with PrefixWriter(prefix, typer.get_binary_stream('stdout')) as writer:
        writer.write(b'I am prefixed\n')


@config_app.command('show', help='Print the effective configuration as YAML.')
def show(config_path: ConfigOption = None):
    config = resolve_config(config_path)
    console.console.print(dump_config(config), end='', markup=False)
