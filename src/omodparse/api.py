"""Public API for omodparse.

High-level entry points that return complete, structured results.
Hosts should use these instead of importing from ``_internal``.
"""

import os
from pathlib import Path
from typing import BinaryIO, List, NoReturn, Optional, Union

from pydantic import BaseModel, Field

from omodparse._internal.io.archive import read_config_entry, stage_stream
from omodparse._internal.xml_loader import load_config_document
from omodparse.codes import MessageCode
from omodparse.errors import InputError, ModuleError
from omodparse.kernel.builder import DescriptorBuilder
from omodparse.kernel.datatypes import ClassResolver
from omodparse.kernel.descriptor import ModuleDescriptor
from omodparse.messages import DefaultMessageSource, MessageSource, format_message
from omodparse.settings import DEFAULT_SETTINGS, ParserSettings

PathLike = Union[str, os.PathLike, Path]


def _normalize_path(path: PathLike) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


class ModuleFileParser:
    """Parses one module archive into a ModuleDescriptor.

    A parser is bound to a single artifact for its lifetime. ``parse()`` may
    be called any number of times; each call re-reads the archive and returns
    a fresh descriptor.

    When built with ``from_stream`` the parser owns a temporary copy of the
    stream. That file persists until ``close()`` is called (or the parser is
    used as a context manager); nothing removes it implicitly.
    """

    def __init__(
        self,
        module_file: Optional[PathLike],
        *,
        settings: Optional[ParserSettings] = None,
        message_source: Optional[MessageSource] = None,
        class_resolver: Optional[ClassResolver] = None,
    ):
        self.settings = settings or DEFAULT_SETTINGS
        self.message_source = message_source if message_source is not None else DefaultMessageSource()
        self.class_resolver = class_resolver

        if module_file is None:
            self._fail_input(MessageCode.FILE_CANNOT_BE_NULL)
        path = _normalize_path(module_file)
        if not path.name.endswith(self.settings.archive_extension):
            self._fail_input(MessageCode.INVALID_FILE_EXTENSION, path.name, self.settings.archive_extension)

        self.module_file = path
        self._staged = False

    @classmethod
    def from_stream(
        cls,
        stream: Optional[BinaryIO],
        *,
        settings: Optional[ParserSettings] = None,
        message_source: Optional[MessageSource] = None,
        class_resolver: Optional[ClassResolver] = None,
    ) -> "ModuleFileParser":
        """Stage ``stream`` to a temporary module file and bind a parser to it."""
        settings = settings or DEFAULT_SETTINGS
        message_source = message_source if message_source is not None else DefaultMessageSource()
        if stream is None:
            code = MessageCode.FILE_CANNOT_BE_NULL
            raise InputError(format_message(message_source, code), key=code.value)

        staged_path = stage_stream(stream, settings, message_source)
        # staged files always carry the configured suffix
        if not staged_path.name.endswith(settings.archive_extension):
            settings = settings.model_copy(update={"archive_extension": settings.temp_suffix})
        parser = cls(
            staged_path,
            settings=settings,
            message_source=message_source,
            class_resolver=class_resolver,
        )
        parser._staged = True
        return parser

    @property
    def is_staged(self) -> bool:
        """True when the module file is a temporary copy owned by this parser."""
        return self._staged

    def parse(self) -> ModuleDescriptor:
        """Read, load and build the descriptor for the bound artifact."""
        data = read_config_entry(self.module_file, self.settings.config_entry_name, self.message_source)
        root = load_config_document(
            data,
            artifact_name=self.module_file.name,
            entry_name=self.settings.config_entry_name,
            message_source=self.message_source,
        )
        builder = DescriptorBuilder(
            message_source=self.message_source,
            class_resolver=self.class_resolver,
            settings=self.settings,
            artifact_name=self.module_file.name,
            source_path=self.module_file,
        )
        return builder.build(root)

    def close(self) -> None:
        """Remove the staged temporary file, if this parser created one."""
        if self._staged:
            self.module_file.unlink(missing_ok=True)
            self._staged = False

    def __enter__(self) -> "ModuleFileParser":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _fail_input(self, code: MessageCode, module_name: Optional[str] = None, *args: object) -> NoReturn:
        raise InputError(format_message(self.message_source, code, *args), module_name, key=code.value)


def parse_module_file(
    module: Union[PathLike, BinaryIO],
    *,
    settings: Optional[ParserSettings] = None,
    message_source: Optional[MessageSource] = None,
    class_resolver: Optional[ClassResolver] = None,
) -> ModuleDescriptor:
    """
    Parse a module archive (path or binary stream) into a descriptor.

    Streams are staged to a temporary file which is removed again once the
    descriptor has been built.

    Raises:
        ModuleError: any of its subclasses, for every fatal failure.
    """
    if hasattr(module, "read"):
        with ModuleFileParser.from_stream(
            module,
            settings=settings,
            message_source=message_source,
            class_resolver=class_resolver,
        ) as parser:
            return parser.parse()

    parser = ModuleFileParser(
        module,
        settings=settings,
        message_source=message_source,
        class_resolver=class_resolver,
    )
    return parser.parse()


def parse_config_xml(
    data: Union[bytes, str],
    *,
    settings: Optional[ParserSettings] = None,
    message_source: Optional[MessageSource] = None,
    class_resolver: Optional[ClassResolver] = None,
    artifact_name: Optional[str] = None,
) -> ModuleDescriptor:
    """Build a descriptor from bare config.xml content (no archive)."""
    settings = settings or DEFAULT_SETTINGS
    message_source = message_source if message_source is not None else DefaultMessageSource()
    if isinstance(data, str):
        data = data.encode("utf-8")
    root = load_config_document(
        data,
        artifact_name=artifact_name,
        entry_name=settings.config_entry_name,
        message_source=message_source,
    )
    builder = DescriptorBuilder(
        message_source=message_source,
        class_resolver=class_resolver,
        settings=settings,
        artifact_name=artifact_name,
    )
    return builder.build(root)


class InspectionIssue(BaseModel):
    """A single inspection issue (error or warning)."""
    code: str  # message key for errors, "ENTRY_WARNING" for dropped/degraded entries
    message: str
    error_type: Optional[str] = None  # exception class name for errors


class InspectionResult(BaseModel):
    """Result of inspecting a module archive without raising."""
    ok: bool  # True if no errors (warnings don't block)
    module_id: Optional[str] = None
    errors: List[InspectionIssue] = Field(default_factory=list)
    warnings: List[InspectionIssue] = Field(default_factory=list)
    descriptor: Optional[ModuleDescriptor] = None


def inspect_module_file(
    module: PathLike,
    *,
    settings: Optional[ParserSettings] = None,
    message_source: Optional[MessageSource] = None,
    class_resolver: Optional[ClassResolver] = None,
) -> InspectionResult:
    """
    Parse a module archive and report the outcome as data.

    This is READ-ONLY - no side effects, no file writes. Fatal errors become
    entries in ``errors`` instead of exceptions.
    """
    try:
        descriptor = parse_module_file(
            module,
            settings=settings,
            message_source=message_source,
            class_resolver=class_resolver,
        )
    except ModuleError as e:
        return InspectionResult(
            ok=False,
            errors=[InspectionIssue(
                code=e.key or "MODULE_ERROR",
                message=str(e),
                error_type=type(e).__name__,
            )],
        )

    warnings = [InspectionIssue(code="ENTRY_WARNING", message=w) for w in descriptor.warnings]
    return InspectionResult(
        ok=True,
        module_id=descriptor.module_id,
        warnings=warnings,
        descriptor=descriptor,
    )
