"""Custom datatype capability and class resolution for global properties."""

import importlib
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional

ClassResolver = Callable[[str], type]


class ClassNotFoundError(LookupError):
    """Raised when a class name cannot be resolved to a loadable type."""


class CustomDatatype(ABC):
    """Typed validation for a global property value.

    A global property may name a datatype class in its descriptor; that class
    must be a subclass of this one to be associated with the property.
    """

    def configure(self, config: Optional[str]) -> None:
        """Apply the property's ``datatypeConfig`` string (no-op by default)."""

    @abstractmethod
    def validate(self, value: Any) -> None:
        """Raise ``ValueError`` if ``value`` is not acceptable."""

    def serialize(self, value: Any) -> str:
        return "" if value is None else str(value)

    def deserialize(self, text: str) -> Any:
        return text


def import_class(class_name: str) -> type:
    """Resolve ``package.module.ClassName`` to the class object.

    This imports whatever module the name points at, so hosts parsing
    untrusted descriptors should restrict it with
    ``ParserSettings.allowed_datatype_packages`` or inject their own resolver.

    Nested classes (``package.module.Outer.Inner``) are resolved by trying
    progressively shorter module paths.

    Raises:
        ClassNotFoundError: if no module/attribute combination yields a class.
    """
    parts = class_name.strip().split(".")
    if len(parts) < 2 or not all(parts):
        raise ClassNotFoundError(f"Not a fully qualified class name: {class_name!r}")

    for split_at in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split_at])
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            continue
        obj: Any = module
        try:
            for attr in parts[split_at:]:
                obj = getattr(obj, attr)
        except AttributeError:
            continue
        if isinstance(obj, type):
            return obj
        raise ClassNotFoundError(f"{class_name} does not name a class")

    raise ClassNotFoundError(f"Class {class_name} could not be found")


def is_allowed_class(class_name: str, allowed_packages: Iterable[str]) -> bool:
    """True when ``class_name`` lives under one of ``allowed_packages``.

    An empty ``allowed_packages`` allows everything.
    """
    packages = tuple(allowed_packages)
    if not packages:
        return True
    return any(class_name.startswith(f"{package}.") for package in packages)


def resolve_datatype(
    class_name: str,
    resolver: ClassResolver,
    allowed_packages: Iterable[str] = (),
) -> type:
    """Resolve ``class_name`` and narrow it to a ``CustomDatatype`` subclass.

    Any failure inside the resolver (including errors raised while importing
    the target module) is reported as ``ClassNotFoundError``.

    Raises:
        ClassNotFoundError: if the name is outside ``allowed_packages`` or the
            resolver cannot produce a class.
        TypeError: if the class is not a ``CustomDatatype`` subclass.
    """
    if not is_allowed_class(class_name, allowed_packages):
        raise ClassNotFoundError(f"{class_name} is outside the allowed datatype packages")

    try:
        resolved = resolver(class_name)
    except ClassNotFoundError:
        raise
    except Exception as e:
        raise ClassNotFoundError(f"Class {class_name} could not be found: {e}") from e

    if not isinstance(resolved, type) or not issubclass(resolved, CustomDatatype):
        raise TypeError(
            f"{class_name} must be a subclass of {CustomDatatype.__module__}.{CustomDatatype.__qualname__}"
        )
    return resolved
