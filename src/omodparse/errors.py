"""Exception hierarchy for module file parsing."""

from typing import Optional


class ModuleError(Exception):
    """Base exception for every fatal module parsing failure.

    Carries the rendered message, the module the failure belongs to (file
    name, or module name once it is known) and the message key it was
    produced from.
    """

    def __init__(self, message: str, module_name: Optional[str] = None, key: Optional[str] = None):
        self.message = message
        self.module_name = module_name
        self.key = key
        super().__init__(self._render())

    def _render(self) -> str:
        if self.module_name:
            return f"{self.message} Module: {self.module_name}"
        return self.message


class InputError(ModuleError, ValueError):
    """Raised when the artifact is missing, misnamed or cannot be staged."""


class ArchiveIOError(ModuleError, OSError):
    """Raised when the archive or its descriptor entry cannot be read."""

    def __init__(self, message: str, module_name: Optional[str] = None, key: Optional[str] = None):
        # OSError.__init__ would reinterpret positional args as (errno, strerror)
        ModuleError.__init__(self, message, module_name, key)

    def __str__(self) -> str:
        return self._render()


class MissingResourceError(ModuleError, LookupError):
    """Raised when the archive has no descriptor entry."""


class FormatError(ModuleError, ValueError):
    """Raised when the descriptor is not well-formed (or forbidden) XML."""


class DescriptorValidationError(ModuleError, ValueError):
    """Raised when a well-formed descriptor violates a required rule."""


class ConditionalResourcesError(DescriptorValidationError):
    """Raised when the conditionalResources block is structurally invalid."""
