import io
import logging
import pathlib
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from prefix_writer import utils
from prefix_writer.exception import ConfigError
from prefix_writer.writer import (
    FlushMode,
    PrefixWriter,
    Sink,
    check_encoding,
    check_errors,
)

logger = logging.getLogger(__name__)


class PrefixConfig(BaseModel):
    prefix: str = Field(
        default='',
        description='Text inserted before every non-empty line.',
    )

    encoding: str = Field(
        default='utf-8',
        description='Codec used to decode incoming bytes and encode outgoing text.',
    )

    errors: str = Field(
        default='replace',
        description='Codec error handler for malformed input. One of replace, '
        'backslashreplace, surrogateescape or ignore.',
    )

    flush_mode: FlushMode = Field(
        default=FlushMode.DRAIN,
        description='Whether a flushed partial line is consumed ("drain") or kept '
        'pending and forwarded again ("retain").',
    )

    chunk_size: int = Field(
        default=io.DEFAULT_BUFFER_SIZE,
        gt=0,
        description='Number of bytes read at a time by the command line filter.',
    )

    @field_validator('encoding')
    @classmethod
    def _check_encoding(cls, value: str) -> str:
        return check_encoding(value)

    @field_validator('errors')
    @classmethod
    def _check_errors(cls, value: str) -> str:
        return check_errors(value)

    def build_writer(self, writer: Sink, prefix: Optional[str] = None) -> PrefixWriter:
        return PrefixWriter(
            self.prefix if prefix is None else prefix,
            writer,
            encoding=self.encoding,
            errors=self.errors,
            flush_mode=self.flush_mode,
        )


def load_config(path: pathlib.Path) -> PrefixConfig:
    if not path.is_file():
        raise ConfigError(path)

    logger.debug('Loading config from %s', path)
    try:
        return utils.model_from_yaml(PrefixConfig, path.read_text())
    except (yaml.YAMLError, ValidationError, TypeError) as e:
        raise ConfigError(path, str(e)) from e


def dump_config(config: PrefixConfig) -> str:
    return utils.model_to_yaml(config, exclude_unset=False)
