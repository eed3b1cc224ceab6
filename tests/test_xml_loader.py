"""Tests for hardened config.xml loading."""

import logging
import pyexpat

import pytest

from omodparse._internal.xml_loader import load_config_document
from omodparse.errors import FormatError
from omodparse.messages import DefaultMessageSource


def test_well_formed_document_returns_root(config_xml):
    root = load_config_document(config_xml().encode("utf-8"))
    assert root.tag == "module"
    assert root.get("configVersion") == "1.6"


def test_malformed_document_raises_and_logs_content(caplog):
    data = b"<module><id>broken</module>"
    with caplog.at_level(logging.ERROR, logger="omodparse"):
        with pytest.raises(FormatError) as excinfo:
            load_config_document(data, "broken.omod", message_source=DefaultMessageSource())

    assert excinfo.value.key == "Module.error.cannotParseConfigFile"
    assert excinfo.value.module_name == "broken.omod"
    assert "Error parsing module config.xml file" in str(excinfo.value)
    assert excinfo.value.__cause__ is not None
    assert "<module><id>broken</module>" in caplog.text


def test_undecodable_content_is_still_logged(caplog):
    data = b"<module>\xff\xfe"
    with caplog.at_level(logging.WARNING, logger="omodparse"):
        with pytest.raises(FormatError):
            load_config_document(data, "bad.omod")
    assert "Another error parsing config.xml" in caplog.text


def test_empty_content_is_format_error():
    with pytest.raises(FormatError):
        load_config_document(b"")


def test_external_entities_rejected():
    data = (
        b'<?xml version="1.0"?>\n'
        b'<!DOCTYPE module [<!ENTITY xxe SYSTEM "file:///etc/passwd">]>\n'
        b'<module configVersion="1.6"><id>&xxe;</id></module>'
    )
    with pytest.raises(FormatError):
        load_config_document(data, "xxe.omod")


def test_internal_entities_are_expanded():
    data = (
        b'<?xml version="1.0"?>\n'
        b'<!DOCTYPE module [<!ENTITY v "Basic">]>\n'
        b'<module configVersion="1.6"><name>&v; module</name></module>'
    )
    root = load_config_document(data)
    assert root.find("name").text == "Basic module"


@pytest.mark.skipif(pyexpat.version_info < (2, 4, 0), reason="expat without amplification limits")
def test_entity_expansion_bomb_rejected():
    levels = [b'<!ENTITY e0 "laughlaughlaughlaugh">']
    for i in range(1, 10):
        levels.append(b'<!ENTITY e%d "' % i + (b"&e%d;" % (i - 1)) * 10 + b'">')
    data = (
        b'<?xml version="1.0"?>\n<!DOCTYPE module ['
        + b"".join(levels)
        + b']>\n<module configVersion="1.6"><id>&e9;</id></module>'
    )
    with pytest.raises(FormatError):
        load_config_document(data)


def test_default_namespace_is_stripped():
    data = (
        b'<module xmlns="http://example.org/ns" configVersion="1.6">'
        b"<id>basicmodule</id><privilege><name>P</name></privilege></module>"
    )
    root = load_config_document(data)
    assert root.tag == "module"
    assert [element.tag for element in root.iter()] == ["module", "id", "privilege", "name"]


def test_external_dtd_reference_is_not_fetched():
    data = (
        b'<?xml version="1.0" encoding="UTF-8"?>\n'
        b'<!DOCTYPE module PUBLIC "-//OpenMRS//DTD OpenMRS Config 1.6//EN" '
        b'"http://resources.openmrs.org/doctype/config-1.6.dtd">\n'
        b'<module configVersion="1.6"><id>basicmodule</id></module>'
    )
    root = load_config_document(data)
    assert root.find("id").text == "basicmodule"


def test_comments_and_processing_instructions_are_ignored():
    data = (
        b'<module configVersion="1.6"><!-- a comment --><?some-pi data?>'
        b"<id>basicmodule</id></module>"
    )
    root = load_config_document(data)
    assert [child.tag for child in root] == ["id"]
