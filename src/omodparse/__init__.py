"""omodparse: module descriptor (config.xml) parsing and validation."""

import logging
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("omodparse")
except PackageNotFoundError:
    __version__ = "dev"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API exports
from omodparse.api import (
    InspectionResult,
    ModuleFileParser,
    inspect_module_file,
    parse_config_xml,
    parse_module_file,
)
from omodparse.codes import MessageCode
from omodparse.errors import (
    ArchiveIOError,
    ConditionalResourcesError,
    DescriptorValidationError,
    FormatError,
    InputError,
    MissingResourceError,
    ModuleError,
)
from omodparse.kernel.descriptor import (
    SUPPORTED_CONFIG_VERSIONS,
    AdvicePoint,
    ConditionalResource,
    GlobalProperty,
    ModuleAndVersion,
    ModuleDescriptor,
    Privilege,
)
from omodparse.settings import ParserSettings

__all__ = [
    "__version__",
    "ModuleFileParser",
    "parse_module_file",
    "parse_config_xml",
    "inspect_module_file",
    "InspectionResult",
    "MessageCode",
    "ParserSettings",
    "ModuleError",
    "InputError",
    "ArchiveIOError",
    "MissingResourceError",
    "FormatError",
    "DescriptorValidationError",
    "ConditionalResourcesError",
    "SUPPORTED_CONFIG_VERSIONS",
    "ModuleDescriptor",
    "AdvicePoint",
    "Privilege",
    "GlobalProperty",
    "ConditionalResource",
    "ModuleAndVersion",
]
