"""Pydantic models for a parsed module descriptor."""

from pathlib import Path
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Optional, Tuple, Type
from xml.etree.ElementTree import Element

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .datatypes import CustomDatatype

# Schema versions of config.xml this parser understands
SUPPORTED_CONFIG_VERSIONS: FrozenSet[str] = frozenset(
    {"1.0", "1.1", "1.2", "1.3", "1.4", "1.5", "1.6"}
)

# First config version that honours <mandatory>
MANDATORY_MIN_CONFIG_VERSION = 1.3

# Extension point ids may not contain this
EXTENSION_ID_SEPARATOR = "|"


def sorted_config_versions() -> List[str]:
    """Supported config versions in ascending numeric order."""
    return sorted(SUPPORTED_CONFIG_VERSIONS, key=float)


class AdvicePoint(BaseModel):
    """An interception point and the class that advises it."""
    point: str
    class_name: str

    model_config = ConfigDict(frozen=True)


class Privilege(BaseModel):
    """A privilege the module declares."""
    name: str
    description: str

    model_config = ConfigDict(frozen=True)


class GlobalProperty(BaseModel):
    """A global property declaration with its default value.

    ``datatype`` is only set when ``datatype_class_name`` resolved to a
    ``CustomDatatype`` subclass; otherwise it stays ``None`` and the class
    name is kept for diagnostics.
    """
    property_name: str
    default_value: str = ""
    description: str = ""
    datatype_class_name: Optional[str] = None
    datatype: Optional[Type[CustomDatatype]] = None
    datatype_config: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("property_name")
    @classmethod
    def validate_property_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Global property name must not be blank")
        return v


class ModuleAndVersion(BaseModel):
    """A module condition on a conditional resource."""
    module_id: str = ""
    version: str = ""

    model_config = ConfigDict(frozen=True)


class ConditionalResource(BaseModel):
    """A bundled file that is only loaded when its conditions hold."""
    path: str
    openmrs_platform_version: Optional[str] = None
    modules: Tuple[ModuleAndVersion, ...] = ()

    model_config = ConfigDict(frozen=True)

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("The path of a conditional resource must not be blank")
        return v


class ModuleDescriptor(BaseModel):
    """Structured, validated content of a module's config.xml.

    Immutable once built: sequences are tuples and mappings are read-only
    ``MappingProxyType`` views.
    """
    name: str
    module_id: str
    package_name: str
    author: str = ""
    description: str = ""
    version: str = ""
    config_version: str

    activator_class_name: str = ""
    required_database_version: str = ""
    required_platform_version: str = ""
    update_url: str = ""

    required_modules: Mapping[str, Optional[str]] = Field(default_factory=dict, validate_default=True)
    aware_of_modules: Mapping[str, Optional[str]] = Field(default_factory=dict, validate_default=True)
    start_before_modules: Mapping[str, Optional[str]] = Field(default_factory=dict, validate_default=True)

    advice_points: Tuple[AdvicePoint, ...] = ()
    extension_points: Mapping[str, str] = Field(default_factory=dict, validate_default=True)  # point -> class name
    privileges: Tuple[Privilege, ...] = ()
    global_properties: Tuple[GlobalProperty, ...] = ()

    mapping_files: Tuple[str, ...] = ()
    packages_with_mapped_classes: FrozenSet[str] = Field(default_factory=frozenset)

    mandatory: bool = False
    conditional_resources: Tuple[ConditionalResource, ...] = ()

    raw_config_document: Optional[Element] = Field(default=None, repr=False)
    source_artifact_path: Optional[Path] = None
    warnings: Tuple[str, ...] = ()  # Non-fatal diagnostics, in emission order

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator("name", "module_id", "package_name")
    @classmethod
    def validate_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("config_version")
    @classmethod
    def validate_config_version(cls, v: str) -> str:
        if v not in SUPPORTED_CONFIG_VERSIONS:
            raise ValueError(
                f"Unsupported config version {v!r}; expected one of {', '.join(sorted_config_versions())}"
            )
        return v

    @field_validator("required_modules", "aware_of_modules", "start_before_modules", "extension_points")
    @classmethod
    def freeze_mapping(cls, v: Mapping) -> Mapping:
        """Store mappings as read-only views."""
        return MappingProxyType(dict(v))

    @field_serializer("required_modules", "aware_of_modules", "start_before_modules", "extension_points")
    def serialize_mapping(self, v: Mapping) -> dict:
        return dict(v)

    def get_required_module_ids(self) -> set[str]:
        """Get set of all required module package names."""
        return set(self.required_modules)

    def get_all_referenced_module_ids(self) -> set[str]:
        """Get set of every module this one requires, is aware of, or starts before."""
        return (
            set(self.required_modules)
            | set(self.aware_of_modules)
            | set(self.start_before_modules)
        )

    def get_global_property(self, name: str) -> GlobalProperty | None:
        """Get global property declaration by name."""
        for gp in self.global_properties:
            if gp.property_name == name:
                return gp
        return None

    def to_summary_dict(self) -> dict:
        """JSON-friendly view without the raw document or type handles."""
        data = self.model_dump(
            mode="json",
            exclude={"raw_config_document", "global_properties", "packages_with_mapped_classes"},
        )
        data["packages_with_mapped_classes"] = sorted(self.packages_with_mapped_classes)
        data["global_properties"] = [
            {
                "property_name": gp.property_name,
                "default_value": gp.default_value,
                "description": gp.description,
                "datatype_class_name": gp.datatype_class_name,
                "datatype_resolved": gp.datatype is not None,
                "datatype_config": gp.datatype_config,
            }
            for gp in self.global_properties
        ]
        return data
