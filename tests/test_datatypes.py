"""Tests for class resolution of global property datatypes."""

import collections

import pytest

from omodparse.kernel.datatypes import (
    ClassNotFoundError,
    CustomDatatype,
    import_class,
    is_allowed_class,
    resolve_datatype,
)


class IntegerDatatype(CustomDatatype):
    def configure(self, config):
        self.maximum = int(config) if config else None

    def validate(self, value):
        number = int(value)
        if self.maximum is not None and number > self.maximum:
            raise ValueError(f"{number} exceeds {self.maximum}")

    def deserialize(self, text):
        return int(text)


class Holder:
    class Nested(CustomDatatype):
        def validate(self, value):
            pass


def test_import_class_resolves_module_attribute():
    assert import_class("collections.OrderedDict") is collections.OrderedDict


def test_import_class_resolves_nested_class():
    assert import_class(f"{__name__}.Holder.Nested") is Holder.Nested


@pytest.mark.parametrize(
    "class_name",
    [
        "org.openmrs.customdatatype.NotThere",
        "collections.NotThere",
        "OrderedDict",
        "collections.",
        "",
    ],
)
def test_import_class_unknown(class_name):
    with pytest.raises(ClassNotFoundError):
        import_class(class_name)


def test_import_class_rejects_non_class():
    with pytest.raises(ClassNotFoundError, match="does not name a class"):
        import_class("os.path.join")


def test_resolve_datatype_accepts_subclass():
    resolved = resolve_datatype(f"{__name__}.IntegerDatatype", import_class)
    assert resolved is IntegerDatatype


def test_resolve_datatype_rejects_other_classes():
    with pytest.raises(TypeError, match="CustomDatatype"):
        resolve_datatype("collections.OrderedDict", import_class)


def test_resolve_datatype_wraps_resolver_lookup_errors():
    def resolver(class_name):
        raise KeyError(class_name)

    with pytest.raises(ClassNotFoundError) as excinfo:
        resolve_datatype("org.example.Anything", resolver)
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_resolve_datatype_wraps_import_errors():
    def resolver(class_name):
        raise ModuleNotFoundError(class_name)

    with pytest.raises(ClassNotFoundError):
        resolve_datatype("org.example.Anything", resolver)


def test_custom_datatype_defaults():
    datatype = IntegerDatatype()
    datatype.configure("10")
    datatype.validate("7")
    with pytest.raises(ValueError):
        datatype.validate("11")
    assert datatype.serialize(None) == ""
    assert datatype.serialize(3) == "3"
    assert datatype.deserialize("3") == 3


def test_resolve_datatype_wraps_any_resolver_failure():
    def resolver(class_name):
        raise RuntimeError("registry offline")

    with pytest.raises(ClassNotFoundError, match="registry offline") as excinfo:
        resolve_datatype("org.example.Anything", resolver)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_resolve_datatype_wraps_errors_raised_while_importing(tmp_path, monkeypatch):
    (tmp_path / "explodingdatatypes.py").write_text("raise RuntimeError('import side effect')\n")
    monkeypatch.syspath_prepend(str(tmp_path))

    with pytest.raises(ClassNotFoundError):
        resolve_datatype("explodingdatatypes.Thing", import_class)


def test_resolve_datatype_checks_allowed_packages_before_resolving():
    calls = []

    def resolver(class_name):
        calls.append(class_name)
        return IntegerDatatype

    with pytest.raises(ClassNotFoundError, match="outside the allowed datatype packages"):
        resolve_datatype("os.system", resolver, ("org.openmrs",))
    assert calls == []


@pytest.mark.parametrize(
    "class_name, allowed, expected",
    [
        ("org.openmrs.customdatatype.Text", (), True),
        ("org.openmrs.customdatatype.Text", ("org.openmrs",), True),
        ("org.openmrsx.Text", ("org.openmrs",), False),
        ("org.openmrs", ("org.openmrs",), False),
        ("com.example.Text", ("org.openmrs", "com.example"), True),
    ],
)
def test_is_allowed_class(class_name, allowed, expected):
    assert is_allowed_class(class_name, allowed) is expected
