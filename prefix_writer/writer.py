import codecs
import enum
import logging
from typing import Iterable, Optional, Protocol, Union

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


class Sink(Protocol):
    """Anything that accepts sequential byte writes and can be flushed.

    `write` may return the number of bytes it accepted. A `None` return is
    taken to mean the whole buffer was accepted.
    """

    def write(self, data: bytes) -> Optional[int]: ...

    def flush(self) -> None: ...


class FlushMode(str, enum.Enum):
    # The pending partial line is forwarded once and then treated as already
    # prefixed, so a later write continues it.
    DRAIN = 'drain'
    # The pending partial line is forwarded but kept pending, and will be
    # forwarded again by the next write or flush.
    RETAIN = 'retain'


# Error handlers that decode any byte sequence without raising.
LOSSY_ERROR_HANDLERS = ('replace', 'backslashreplace', 'surrogateescape', 'ignore')


def check_encoding(encoding: str) -> str:
    """Raise ValueError unless `encoding` names a text codec."""
    try:
        codecs.lookup(encoding)
        # Binary transforms such as base64 or rot13 are found by lookup() but
        # cannot encode str.
        ''.encode(encoding)
    except LookupError as e:
        raise ValueError(str(e)) from None
    return encoding


def check_errors(errors: str) -> str:
    """Raise ValueError unless `errors` is a handler that never fails to decode."""
    if errors not in LOSSY_ERROR_HANDLERS:
        raise ValueError(
            f'unsupported error handler: {errors!r} '
            f'(expected one of {", ".join(LOSSY_ERROR_HANDLERS)})'
        )
    return errors


class PrefixWriter:
    """Prefixes every non-empty line written to it before forwarding to a sink.

    Writes may contain several lines, partial lines, or be split at arbitrary
    points (even inside a multi-byte character). A partial line is held back
    until a later write completes it or until `flush` forwards it. Empty lines
    are forwarded without a prefix.

    The writer implements the same `write`/`flush` contract it requires from
    its sink, so writers can be stacked. It is not thread-safe.
    """

    def __init__(
        self,
        prefix: str,
        writer: Sink,
        *,
        encoding: str = 'utf-8',
        errors: str = 'replace',
        flush_mode: FlushMode = FlushMode.DRAIN,
    ):
        self._prefix = prefix
        self._writer = writer
        self._encoding = check_encoding(encoding)
        self._errors = check_errors(errors)
        self._flush_mode = FlushMode(flush_mode)
        self._decoder = codecs.getincrementaldecoder(encoding)(errors)
        # One encoder for all outgoing text, so codecs with a byte order mark
        # emit it once per sink.
        self._encoder = codecs.getincrementalencoder(encoding)(errors)

        self._remainder: Optional[str] = None
        # Whether the prefix of the open line was already forwarded by flush().
        self._continuing = False
        self._closed = False

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def writer(self) -> Sink:
        return self._writer

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def errors(self) -> str:
        return self._errors

    @property
    def flush_mode(self) -> FlushMode:
        return self._flush_mode

    @property
    def remainder(self) -> Optional[str]:
        """Text written since the last line terminator and not yet forwarded."""
        return self._remainder

    @property
    def closed(self) -> bool:
        return self._closed

    def writable(self) -> bool:
        return not self._closed

    def with_prefix(self, prefix: str) -> 'PrefixWriter':
        """Return a copy of this writer using a different prefix."""
        return self._derive(prefix=prefix)

    def with_writer(self, writer: Sink) -> 'PrefixWriter':
        """Return a copy of this writer forwarding to a different sink."""
        return self._derive(writer=writer)

    def write(self, data: BytesLike) -> int:
        """Consume `data`, forwarding every line it completes.

        Always reports the whole input as consumed. Whatever cannot be emitted
        yet is kept as the pending remainder.
        """
        self._check_closed()
        data = bytes(data)
        self._process(self._decoder.decode(data))
        return len(data)

    def writelines(self, lines: Iterable[BytesLike]) -> None:
        for line in lines:
            self.write(line)

    def flush(self) -> None:
        self._check_closed()
        self._forward_remainder()
        self._writer.flush()

    def close(self) -> None:
        """Forward everything still pending and flush the sink.

        The sink itself is left open.
        """
        if self._closed:
            return
        try:
            self._process(self._decoder.decode(b'', final=True))
            self._forward_remainder()
            self._writer.flush()
        finally:
            self._closed = True

    def __enter__(self) -> 'PrefixWriter':
        self._check_closed()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}(prefix={self._prefix!r}, '
            f'flush_mode={self._flush_mode.value!r}, '
            f'remainder={self._remainder!r})'
        )

    def _process(self, text: str):
        if self._remainder is not None:
            text = self._remainder + text
        if not text:
            return

        ends_with_newline = text.endswith('\n')
        lines = text.split('\n')
        if ends_with_newline:
            # A trailing terminator does not start a new line.
            lines.pop()

        last = len(lines) - 1
        for index, line in enumerate(lines):
            if index == last and not ends_with_newline:
                logger.debug('Holding back incomplete line of %d chars.', len(line))
                self._remainder = line
                return
            self._emit_line(line)

        self._remainder = None

    def _emit_line(self, line: str):
        if line and not self._continuing:
            self._write_text(self._prefix)
        self._write_text(line + '\n')
        self._continuing = False

    def _forward_remainder(self):
        if not self._remainder:
            return
        if not self._continuing:
            self._write_text(self._prefix)
        self._write_text(self._remainder)

        if self._flush_mode is FlushMode.DRAIN:
            logger.debug('Drained %d pending chars.', len(self._remainder))
            self._remainder = None
            self._continuing = True

    def _write_text(self, text: str):
        if text:
            self._write_all(self._encoder.encode(text))

    def _write_all(self, data: bytes):
        while data:
            written = self._writer.write(data)
            if written is None:
                return
            if written <= 0:
                raise OSError('sink accepted no bytes')
            data = data[written:]

    def _derive(
        self, prefix: Optional[str] = None, writer: Optional[Sink] = None
    ) -> 'PrefixWriter':
        self._check_closed()
        derived = PrefixWriter(
            self._prefix if prefix is None else prefix,
            self._writer if writer is None else writer,
            encoding=self._encoding,
            errors=self._errors,
            flush_mode=self._flush_mode,
        )
        derived._remainder = self._remainder
        derived._decoder.setstate(self._decoder.getstate())
        if writer is None:
            derived._continuing = self._continuing
            derived._encoder.setstate(self._encoder.getstate())
        # Otherwise the new sink has seen nothing yet: no prefix of the open
        # line and no byte order mark.
        return derived

    def _check_closed(self):
        if self._closed:
            raise ValueError('I/O operation on closed PrefixWriter.')
