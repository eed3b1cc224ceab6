"""Message lookup for user-facing error text.

The host application may supply its own localized ``MessageSource``; the
default one carries the English catalog. Lookups never fail: when no source
is available, the source raises, or the key is unknown, the raw key is used.
"""

import logging
from typing import Dict, Optional, Protocol, Union

from omodparse.codes import MessageCode

logger = logging.getLogger(__name__)


DEFAULT_MESSAGES: Dict[str, str] = {
    MessageCode.FILE_CANNOT_BE_NULL.value: "Module file cannot be null",
    MessageCode.INVALID_FILE_EXTENSION.value: "Module file must end with {0}",
    MessageCode.CANNOT_CREATE_FILE.value: "Unable to create temporary module file",
    MessageCode.CANNOT_GET_JAR_FILE.value: "Unable to open module file",
    MessageCode.NO_CONFIG_FILE.value: "Unable to find {0} in module file",
    MessageCode.CANNOT_GET_CONFIG_FILE_STREAM.value: "Unable to read {0} from module file",
    MessageCode.CANNOT_PARSE_CONFIG_FILE.value: "Error parsing module {0} file",
    MessageCode.INVALID_CONFIG_VERSION.value: (
        "Invalid config version: {0}. Supported versions are: {1}"
    ),
    MessageCode.NAME_CANNOT_BE_EMPTY.value: "Module name cannot be empty",
    MessageCode.ID_CANNOT_BE_EMPTY.value: "Module id cannot be empty",
    MessageCode.PACKAGE_CANNOT_BE_EMPTY.value: "Module package cannot be empty",
    MessageCode.MULTIPLE_CONDITIONAL_RESOURCES.value: (
        "Found multiple conditionalResources tags. There can be only one."
    ),
    MessageCode.INVALID_CONDITIONAL_RESOURCE_TAG.value: (
        "Found the {0} node under conditionalResources. Only conditionalResource is allowed."
    ),
    MessageCode.CONDITIONAL_RESOURCE_PATH_BLANK.value: (
        "The path of a conditional resource must not be blank"
    ),
}


class MessageSource(Protocol):
    """Anything that can turn a message key and arguments into text."""

    def get_message(self, key: str, *args: object) -> str:
        ...


class DefaultMessageSource:
    """English message catalog with ``str.format`` positional placeholders."""

    def __init__(self, messages: Optional[Dict[str, str]] = None):
        self.messages = dict(DEFAULT_MESSAGES)
        if messages:
            self.messages.update(messages)

    def get_message(self, key: str, *args: object) -> str:
        template = self.messages.get(key)
        if template is None:
            return key
        try:
            return template.format(*args)
        except (IndexError, KeyError, ValueError):
            logger.warning(f"Could not format message {key!r} with args {args!r}")
            return template


def format_message(
    source: Optional[MessageSource],
    key: Union[MessageCode, str],
    *args: object,
) -> str:
    """Look up ``key`` through ``source``, falling back to the raw key."""
    raw_key = key.value if isinstance(key, MessageCode) else key
    if source is None:
        return raw_key
    try:
        message = source.get_message(raw_key, *args)
    except Exception as e:
        logger.warning(f"Message source failed for {raw_key!r}: {e}")
        return raw_key
    return message or raw_key
