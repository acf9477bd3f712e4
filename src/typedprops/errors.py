"""Error types for typedprops.

Only programmer misuse raises. Malformed stored values and missing
configuration are absorbed by the codecs and the settings store and are
logged instead, so a single bad field never breaks a property view.
"""


class TypedPropsError(Exception):
    """Base exception for all typedprops errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnknownTypeError(TypedPropsError):
    """Raised when a type key is required but not registered."""

    def __init__(self, type_key: str, available_types: list = None):
        message = f"Property type not registered: {type_key}"
        details = {"type_key": type_key}
        if available_types:
            details["available_types"] = available_types
            message += f". Available: {', '.join(available_types[:5])}"
            if len(available_types) > 5:
                message += f" (+{len(available_types) - 5} more)"
        super().__init__(message, details)
        self.type_key = type_key


class ContractViolationError(TypedPropsError):
    """Raised when an internal callback contract is broken.

    Indicates a bug in calling code (for example a list item callback
    invoked without an item), never bad user input.
    """

    def __init__(self, operation: str, reason: str):
        message = f"{operation}: {reason}"
        super().__init__(message, {"operation": operation, "reason": reason})
        self.operation = operation


class SettingsError(TypedPropsError):
    """Raised when a settings record written by code fails its schema."""

    def __init__(self, property_path: str, type_key: str, errors: list = None):
        message = f"Invalid settings for {type_key!r} on property {property_path!r}"
        details = {"property": property_path, "type_key": type_key}
        if errors:
            details["errors"] = errors
            message += f": {errors[0]}"
        super().__init__(message, details)
        self.property_path = property_path
        self.type_key = type_key


class ConfigError(TypedPropsError):
    """Raised when the configuration file or overrides fail validation."""

    def __init__(self, source: str, errors: list = None):
        message = f"Invalid configuration in {source}"
        details = {"source": source}
        if errors:
            details["errors"] = errors
            message += f": {errors[0]}"
        super().__init__(message, details)
        self.source = source
