import pathlib
from typing import List, Optional

from prefix_writer import console, utils


class PrefixWriterError(RuntimeError):
    """User facing error whose message is rendered with rich markup.

    Each `print` call renders its arguments and appends them to the message,
    which is what `str(error)` returns.
    """

    def __init__(self):
        super().__init__()
        self.msg: List[str] = []
        self.console = console.new_console()

    def print(self, *args, **kwargs):
        with self.console.capture() as capture:
            self.console.print(*args, **kwargs)
        self.msg.append(capture.get())

    def __str__(self) -> str:
        return ''.join(self.msg)


class ConfigError(PrefixWriterError):
    """A config file that is missing or cannot be turned into a config."""

    def __init__(self, path: pathlib.Path, reason: Optional[str] = None):
        super().__init__()
        self.path = path
        self.reason = reason

        shown = utils.escape_markup(str(path))
        if reason is None:
            self.print(f'[error]Config file [item]{shown}[/item] does not exist.[/error]')
        else:
            self.print(f'[error]Config file [item]{shown}[/item] is invalid:[/error]')
            self.print(utils.escape_markup(reason))
