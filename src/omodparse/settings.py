"""Parser settings."""

from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from omodparse.kernel.descriptor import EXTENSION_ID_SEPARATOR


class ParserSettings(BaseModel):
    """Names and locations the parser relies on.

    The defaults describe the standard ``.omod`` layout; hosts normally use
    them unchanged.
    """
    archive_extension: str = ".omod"
    config_entry_name: str = "config.xml"
    temp_prefix: str = "moduleUpgrade"
    temp_suffix: str = ".omod"
    temp_dir: Optional[Path] = None  # None -> system temp dir
    extension_id_separator: str = EXTENSION_ID_SEPARATOR
    # Packages a datatypeClassname may come from; empty allows any
    allowed_datatype_packages: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("archive_extension", "config_entry_name", "extension_id_separator")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("allowed_datatype_packages")
    @classmethod
    def validate_packages(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        packages = tuple(p.strip().rstrip(".") for p in v)
        if any(not p for p in packages):
            raise ValueError("package names must not be blank")
        return packages


DEFAULT_SETTINGS = ParserSettings()
