"""Build a ModuleDescriptor from a parsed config.xml tree.

Fatal problems (unsupported config version, blank name/id/package, a
malformed conditionalResources block) raise immediately. Malformed repeated
entries (advice, extension, privilege, globalProperty) are dropped with a
warning so that one bad entry never rejects the whole module.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Generic, Iterator, List, NoReturn, Optional, Tuple, TypeVar
from xml.etree.ElementTree import Element

from omodparse.codes import MessageCode
from omodparse.errors import ConditionalResourcesError, DescriptorValidationError
from omodparse.messages import MessageSource, format_message
from omodparse.settings import DEFAULT_SETTINGS, ParserSettings

from .datatypes import ClassNotFoundError, ClassResolver, import_class, resolve_datatype
from .descriptor import (
    EXTENSION_ID_SEPARATOR,
    MANDATORY_MIN_CONFIG_VERSION,
    SUPPORTED_CONFIG_VERSIONS,
    AdvicePoint,
    ConditionalResource,
    GlobalProperty,
    ModuleAndVersion,
    ModuleDescriptor,
    Privilege,
    sorted_config_versions,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class EntryOutcome(Generic[T]):
    """Result of parsing one repeated element.

    ``value`` is None when the entry was rejected. ``warning`` may be set
    alongside a value when the entry was kept in degraded form.
    """
    value: Optional[T] = None
    warning: Optional[str] = None


def text_content(element: Element) -> str:
    """All character data inside ``element``, like DOM ``textContent``."""
    return "".join(element.itertext())


def iter_descendants(root: Element, tag: str) -> Iterator[Element]:
    """Every element named ``tag`` below ``root`` (at any depth), in document order."""
    for element in root.iter(tag):
        if element is not root:
            yield element


def iter_child_elements(element: Element) -> Iterator[Element]:
    """Direct child elements, skipping comments and processing instructions."""
    for child in element:
        if isinstance(child.tag, str):
            yield child


def get_element(root: Element, tag: str) -> str:
    """Text content of the first descendant named ``tag``, or ``""``."""
    for element in iter_descendants(root, tag):
        return text_content(element)
    return ""


def split_whitespace(text: str) -> List[str]:
    """Split on any whitespace, dropping empty tokens."""
    return text.split()


def get_module_to_version_map(root: Element, parent_tag: str, child_tag: str) -> Dict[str, Optional[str]]:
    """Collect ``child_tag`` entries of the first ``parent_tag`` element.

    Keys are the trimmed text of each entry; values are its ``version``
    attribute, or None when absent. Later duplicates overwrite earlier ones.
    """
    for parent in iter_descendants(root, parent_tag):
        modules: Dict[str, Optional[str]] = {}
        for child in iter_child_elements(parent):
            if child.tag == child_tag:
                modules[text_content(child).strip()] = child.get("version")
        return modules
    return {}


def _read_fields(element: Element, names: Tuple[str, ...], trim: Tuple[str, ...] = ()) -> Dict[str, str]:
    """Read named direct children of ``element``; the last occurrence wins."""
    values = {name: "" for name in names}
    for child in iter_child_elements(element):
        if child.tag in values:
            text = text_content(child)
            values[child.tag] = text.strip() if child.tag in trim else text
    return values


def parse_advice(element: Element) -> EntryOutcome[AdvicePoint]:
    fields = _read_fields(element, ("point", "class"), trim=("point", "class"))
    point, class_name = fields["point"], fields["class"]
    logger.debug(f"point: {point} class: {class_name}")

    if not point or not class_name:
        return EntryOutcome(
            warning=f"'point' and 'class' are required for advice. Given '{point}' and '{class_name}'"
        )
    return EntryOutcome(value=AdvicePoint(point=point, class_name=class_name))


def parse_extension(element: Element, separator: str = EXTENSION_ID_SEPARATOR) -> EntryOutcome[Tuple[str, str]]:
    fields = _read_fields(element, ("point", "class"), trim=("point", "class"))
    point, class_name = fields["point"], fields["class"]
    logger.debug(f"point: {point} class: {class_name}")

    if not point or not class_name:
        return EntryOutcome(
            warning=f"'point' and 'class' are required for extensions. Given '{point}' and '{class_name}'"
        )
    if separator in point:
        return EntryOutcome(warning=f"Point id contains illegal character: '{separator}'")
    return EntryOutcome(value=(point, class_name))


def parse_privilege(element: Element) -> EntryOutcome[Privilege]:
    fields = _read_fields(element, ("name", "description"), trim=("name", "description"))
    name, description = fields["name"], fields["description"]
    logger.debug(f"name: {name} description: {description}")

    if not name or not description:
        return EntryOutcome(
            warning=f"'name' and 'description' are required for privileges. Given '{name}' and '{description}'"
        )
    return EntryOutcome(value=Privilege(name=name, description=description))


def parse_global_property(
    element: Element,
    class_resolver: Optional[ClassResolver] = None,
    allowed_packages: Tuple[str, ...] = (),
) -> EntryOutcome[GlobalProperty]:
    """Parse one ``globalProperty`` element.

    Only a blank ``property`` rejects the entry. An unresolvable
    ``datatypeClassname`` keeps the property but leaves ``datatype`` unset,
    and the returned outcome carries the reason as its warning.
    """
    fields = _read_fields(
        element,
        ("property", "defaultValue", "description", "datatypeClassname", "datatypeConfig"),
        trim=("property", "description", "datatypeClassname", "datatypeConfig"),
    )
    name = fields["property"]
    default_value = fields["defaultValue"]
    description = fields["description"].replace("\t", "").strip()
    datatype_class_name = fields["datatypeClassname"]
    datatype_config = fields["datatypeConfig"]
    logger.debug(f"property: {name} defaultValue: {default_value} description: {description}")
    logger.debug(f"datatypeClassname: {datatype_class_name} datatypeConfig: {datatype_config}")

    if not name:
        return EntryOutcome(warning=f"'property' is required for global properties. Given '{name}'")

    datatype = None
    warning = None
    if datatype_class_name:
        try:
            datatype = resolve_datatype(datatype_class_name, class_resolver or import_class, allowed_packages)
        except ClassNotFoundError as e:
            warning = f"The class specified by 'datatypeClassname' ({datatype_class_name}) could not be found. {e}"
            logger.error(warning)
        except TypeError as e:
            warning = (
                f"The class specified by 'datatypeClassname' ({datatype_class_name}) "
                f"must be a subtype of CustomDatatype."
            )
            logger.error(f"{warning} {e}")

    prop = GlobalProperty(
        property_name=name,
        default_value=default_value,
        description=description,
        datatype_class_name=datatype_class_name or None,
        datatype=datatype,
        datatype_config=datatype_config or None,
    )
    return EntryOutcome(value=prop, warning=warning)


def get_conditional_resources(
    root: Element,
    message_source: Optional[MessageSource] = None,
    module_name: Optional[str] = None,
) -> List[ConditionalResource]:
    """Parse the single ``conditionalResources`` block, if any.

    Raises:
        ConditionalResourcesError: on more than one block, on a child other
            than ``conditionalResource``, or on a blank ``path``.
    """
    blocks = list(iter_descendants(root, "conditionalResources"))
    if not blocks:
        return []
    if len(blocks) > 1:
        code = MessageCode.MULTIPLE_CONDITIONAL_RESOURCES
        raise ConditionalResourcesError(format_message(message_source, code), module_name, key=code.value)

    resources: List[ConditionalResource] = []
    for resource_el in iter_child_elements(blocks[0]):
        if resource_el.tag != "conditionalResource":
            code = MessageCode.INVALID_CONDITIONAL_RESOURCE_TAG
            raise ConditionalResourcesError(
                format_message(message_source, code, resource_el.tag), module_name, key=code.value
            )

        path: Optional[str] = None
        platform_version: Optional[str] = None
        modules: List[ModuleAndVersion] = []
        for child in iter_child_elements(resource_el):
            if child.tag == "path":
                path = text_content(child).strip()
                if not path:
                    code = MessageCode.CONDITIONAL_RESOURCE_PATH_BLANK
                    raise ConditionalResourcesError(
                        format_message(message_source, code), module_name, key=code.value
                    )
            elif child.tag in ("openmrsVersion", "openmrsPlatformVersion"):
                # legacy and current names share one field; first one seen wins
                if not platform_version:
                    platform_version = text_content(child).strip() or None
            elif child.tag == "modules":
                modules.extend(_parse_resource_modules(child))

        if path is None:
            code = MessageCode.CONDITIONAL_RESOURCE_PATH_BLANK
            raise ConditionalResourcesError(format_message(message_source, code), module_name, key=code.value)

        resources.append(ConditionalResource(
            path=path,
            openmrs_platform_version=platform_version,
            modules=modules,
        ))
    return resources


def _parse_resource_modules(modules_el: Element) -> List[ModuleAndVersion]:
    modules = []
    for module_el in iter_child_elements(modules_el):
        if module_el.tag != "module":
            continue
        fields = _read_fields(module_el, ("moduleId", "version"), trim=("moduleId", "version"))
        modules.append(ModuleAndVersion(module_id=fields["moduleId"], version=fields["version"]))
    return modules


def get_mandatory(root: Element, config_version: str) -> bool:
    """True only for config version >= 1.3 with ``<mandatory>true</mandatory>``."""
    if float(config_version) >= MANDATORY_MIN_CONFIG_VERSION:
        return get_element(root, "mandatory").strip().lower() == "true"
    return False  # older config files cannot declare mandatory


class DescriptorBuilder:
    """Turns the root element of a config.xml document into a ModuleDescriptor.

    The builder holds only its collaborators; every ``build`` call starts
    from scratch and never mutates the returned descriptor afterwards.
    """

    def __init__(
        self,
        message_source: Optional[MessageSource] = None,
        class_resolver: Optional[ClassResolver] = None,
        settings: Optional[ParserSettings] = None,
        artifact_name: Optional[str] = None,
        source_path: Optional[Path] = None,
    ):
        self.message_source = message_source
        self.class_resolver = class_resolver or import_class
        self.settings = settings or DEFAULT_SETTINGS
        self.artifact_name = artifact_name
        self.source_path = source_path

    def build(self, root: Element) -> ModuleDescriptor:
        warnings: List[str] = []

        config_version = (root.get("configVersion") or "").strip()
        if config_version not in SUPPORTED_CONFIG_VERSIONS:
            self._fail(
                MessageCode.INVALID_CONFIG_VERSION,
                self.artifact_name,
                config_version,
                ", ".join(sorted_config_versions()),
            )

        name = get_element(root, "name").strip()
        module_id = get_element(root, "id").strip()
        package_name = get_element(root, "package").strip()

        if not name:
            self._fail(MessageCode.NAME_CANNOT_BE_EMPTY, self.artifact_name)
        if not module_id:
            self._fail(MessageCode.ID_CANNOT_BE_EMPTY, name)
        if not package_name:
            self._fail(MessageCode.PACKAGE_CANNOT_BE_EMPTY, name)

        advice_points = self._collect(root, "advice", parse_advice, warnings)
        extension_points = dict(self._collect(
            root,
            "extension",
            lambda el: parse_extension(el, self.settings.extension_id_separator),
            warnings,
        ))
        privileges = self._collect(root, "privilege", parse_privilege, warnings)
        global_properties = self._collect(
            root,
            "globalProperty",
            lambda el: parse_global_property(el, self.class_resolver, self.settings.allowed_datatype_packages),
            warnings,
        )

        conditional_resources = get_conditional_resources(root, self.message_source, name)

        return ModuleDescriptor(
            name=name,
            module_id=module_id,
            package_name=package_name,
            author=get_element(root, "author").strip(),
            description=get_element(root, "description").strip(),
            version=get_element(root, "version").strip(),
            config_version=config_version,
            activator_class_name=get_element(root, "activator").strip(),
            required_database_version=get_element(root, "require_database_version").strip(),
            required_platform_version=get_element(root, "require_version").strip(),
            update_url=get_element(root, "updateURL").strip(),
            required_modules=get_module_to_version_map(root, "require_modules", "require_module"),
            aware_of_modules=get_module_to_version_map(root, "aware_of_modules", "aware_of_module"),
            start_before_modules=get_module_to_version_map(root, "start_before_modules", "module"),
            advice_points=advice_points,
            extension_points=extension_points,
            privileges=privileges,
            global_properties=global_properties,
            mapping_files=split_whitespace(get_element(root, "mappingFiles")),
            packages_with_mapped_classes=frozenset(split_whitespace(get_element(root, "packagesWithMappedClasses"))),
            mandatory=get_mandatory(root, config_version),
            conditional_resources=conditional_resources,
            raw_config_document=root,
            source_artifact_path=self.source_path,
            warnings=warnings,
        )

    def _collect(
        self,
        root: Element,
        tag: str,
        parse_entry: Callable[[Element], EntryOutcome[T]],
        warnings: List[str],
    ) -> List[T]:
        """Parse every ``tag`` element, keeping valid values in document order."""
        elements = list(iter_descendants(root, tag))
        if elements:
            logger.debug(f"# {tag}: {len(elements)}")

        values: List[T] = []
        for element in elements:
            outcome = parse_entry(element)
            if outcome.warning:
                if outcome.value is None:
                    logger.warning(outcome.warning)
                warnings.append(outcome.warning)
            if outcome.value is not None:
                values.append(outcome.value)
        return values

    def _fail(self, code: MessageCode, module_name: Optional[str], *args: object) -> NoReturn:
        message = format_message(self.message_source, code, *args)
        raise DescriptorValidationError(message, module_name, key=code.value)
