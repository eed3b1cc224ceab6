"""Locate the descriptor entry inside a module archive."""

from __future__ import annotations

import logging
import shutil
import tempfile
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Optional

from omodparse.codes import MessageCode
from omodparse.errors import ArchiveIOError, InputError, MissingResourceError
from omodparse.messages import MessageSource, format_message
from omodparse.settings import DEFAULT_SETTINGS, ParserSettings

logger = logging.getLogger(__name__)


def copy_stream(source: BinaryIO, destination: BinaryIO, chunk_size: int = 64 * 1024) -> None:
    """Copy all bytes from ``source`` to ``destination``."""
    shutil.copyfileobj(source, destination, chunk_size)


def stage_stream(
    stream: BinaryIO,
    settings: ParserSettings = DEFAULT_SETTINGS,
    message_source: Optional[MessageSource] = None,
) -> Path:
    """Write ``stream`` to a temporary module file and return its path.

    The input stream is always closed. The temporary file is NOT removed
    here; whoever owns the returned path is responsible for it.

    Raises:
        InputError: if the stream cannot be read or the file cannot be written.
    """
    temp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            prefix=settings.temp_prefix,
            suffix=settings.temp_suffix,
            dir=settings.temp_dir,
            delete=False,
        ) as out:
            temp_path = Path(out.name)
            copy_stream(stream, out)
            written = out.tell()
        logger.debug(f"Staged module stream to {temp_path} ({written} bytes)")
        return temp_path
    except (OSError, ValueError) as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        code = MessageCode.CANNOT_CREATE_FILE
        raise InputError(format_message(message_source, code), key=code.value) from e
    finally:
        try:
            stream.close()
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring error while closing module stream: {e}")


def read_config_entry(
    module_file: Path,
    entry_name: str = "config.xml",
    message_source: Optional[MessageSource] = None,
) -> bytes:
    """Return the raw bytes of ``entry_name`` from the module archive.

    Raises:
        ArchiveIOError: if the archive cannot be opened or the entry read.
        MissingResourceError: if the archive has no ``entry_name`` entry.
    """
    artifact_name = module_file.name
    try:
        archive = zipfile.ZipFile(module_file, "r")
    except (OSError, zipfile.BadZipFile) as e:
        code = MessageCode.CANNOT_GET_JAR_FILE
        raise ArchiveIOError(format_message(message_source, code), artifact_name, key=code.value) from e

    with archive:
        try:
            info = archive.getinfo(entry_name)
        except KeyError as e:
            code = MessageCode.NO_CONFIG_FILE
            raise MissingResourceError(
                format_message(message_source, code, entry_name), artifact_name, key=code.value
            ) from e

        try:
            with archive.open(info) as entry:
                return entry.read()
        except (OSError, EOFError, NotImplementedError, RuntimeError, zipfile.BadZipFile, zlib.error) as e:
            code = MessageCode.CANNOT_GET_CONFIG_FILE_STREAM
            raise ArchiveIOError(
                format_message(message_source, code, entry_name), artifact_name, key=code.value
            ) from e
