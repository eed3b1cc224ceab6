"""Message key constants for omodparse errors.

These constants prevent stringly-typed message keys and keep every fatal
error routed through the message source.
"""

from enum import Enum


class MessageCode(str, Enum):
    """Message keys for fatal parse errors."""

    # Input / archive
    FILE_CANNOT_BE_NULL = "Module.error.fileCannotBeNull"
    INVALID_FILE_EXTENSION = "Module.error.invalidFileExtension"
    CANNOT_CREATE_FILE = "Module.error.cannotCreateFile"
    CANNOT_GET_JAR_FILE = "Module.error.cannotGetJarFile"
    NO_CONFIG_FILE = "Module.error.noConfigFile"
    CANNOT_GET_CONFIG_FILE_STREAM = "Module.error.cannotGetConfigFileStream"

    # Document
    CANNOT_PARSE_CONFIG_FILE = "Module.error.cannotParseConfigFile"
    INVALID_CONFIG_VERSION = "Module.error.invalidConfigVersion"

    # Required fields
    NAME_CANNOT_BE_EMPTY = "Module.error.nameCannotBeEmpty"
    ID_CANNOT_BE_EMPTY = "Module.error.idCannotBeEmpty"
    PACKAGE_CANNOT_BE_EMPTY = "Module.error.packageCannotBeEmpty"

    # conditionalResources structure
    MULTIPLE_CONDITIONAL_RESOURCES = "Module.error.multipleConditionalResources"
    INVALID_CONDITIONAL_RESOURCE_TAG = "Module.error.invalidConditionalResourceTag"
    CONDITIONAL_RESOURCE_PATH_BLANK = "Module.error.conditionalResourcePathBlank"
