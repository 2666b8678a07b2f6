import sys

import typer


def run_app_cli():
    from prefix_writer.cli import app as app_cli

    app_cli()


def app():
    from prefix_writer import console
    from prefix_writer.exception import PrefixWriterError

    try:
        run_app_cli()
    except (KeyboardInterrupt, typer.Abort):
        sys.exit(130)
    except PrefixWriterError as e:
        console.stderr_console.print(str(e), end='', markup=False, highlight=False)
        sys.exit(1)


if __name__ == '__main__':
    app()
