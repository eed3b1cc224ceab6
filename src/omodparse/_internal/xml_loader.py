"""Hardened loading of config.xml bytes into an element tree."""

import logging
import xml.etree.ElementTree as ET
from typing import Optional
from xml.etree.ElementTree import Element

from defusedxml import ElementTree as DEFUSED_ET
from defusedxml.common import DefusedXmlException

from omodparse.codes import MessageCode
from omodparse.errors import FormatError
from omodparse.messages import MessageSource, format_message

logger = logging.getLogger(__name__)


def load_config_document(
    data: bytes,
    artifact_name: Optional[str] = None,
    entry_name: str = "config.xml",
    message_source: Optional[MessageSource] = None,
) -> Element:
    """Parse descriptor bytes and return the root element.

    The parser never fetches the external DTD subset or external entities.
    Internal entities are expanded, bounded by expat's amplification limits.
    Namespaced tags are reduced to their local names, so a descriptor with a
    default ``xmlns`` reads the same as one without.

    Raises:
        FormatError: if the content is not well-formed XML or uses a
            forbidden construct. The raw content is logged first.
    """
    try:
        root = DEFUSED_ET.fromstring(data, forbid_entities=False, forbid_external=True)
    except (ET.ParseError, DefusedXmlException) as e:
        logger.error(f"Error parsing {entry_name}: {artifact_name}: {e}")
        logger.error(f"{entry_name} content: {_decode_for_log(data, entry_name)}")
        code = MessageCode.CANNOT_PARSE_CONFIG_FILE
        raise FormatError(
            format_message(message_source, code, entry_name),
            artifact_name,
            key=code.value,
        ) from e
    strip_namespaces(root)
    return root


def strip_namespaces(root: Element) -> None:
    """Rewrite ``{uri}local`` tags in place to ``local``."""
    for element in root.iter():
        if isinstance(element.tag, str) and element.tag.startswith("{"):
            element.tag = element.tag.split("}", 1)[1]


def _decode_for_log(data: bytes, entry_name: str) -> str:
    """Best-effort UTF-8 rendering of the raw content."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"Another error parsing {entry_name}: {e}")
        return data.decode("utf-8", errors="replace")
