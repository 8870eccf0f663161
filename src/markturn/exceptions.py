#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the markturn library.

This module defines the exception classes raised while building options,
registering rules and converting HTML trees to Markdown.

Exception Hierarchy
-------------------
- MarkturnError (base exception)

  - ValidationError (invalid options or rule definitions)

  - MalformedInputError (structurally invalid document tree)

  - ConversionError (unexpected failure while rendering)

  - RuleConflictError (two exclusive rules claim the same elements)

  - PluginError (unknown or failing plugin)

  - ConfigError (unreadable options file)

Invalid option values passed through ``resolve_options`` never raise; they
degrade to the documented default.

"""

from typing import Any


class MarkturnError(Exception):
    """Base exception class for all markturn-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(MarkturnError):
    """Exception raised for invalid option values or rule definitions.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class MalformedInputError(MarkturnError):
    """Exception raised when a document tree violates basic structural assumptions.

    Examples are an element without a tag name, a text node whose data is not
    a string, or a child that is not a document node at all. Conversion of the
    offending call is aborted.

    Parameters
    ----------
    message : str
        Description of what is malformed
    node : any, optional
        The offending node
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, node: Any = None, original_error: Exception | None = None):
        """Initialize the malformed input error."""
        super().__init__(message, original_error=original_error)
        self.node = node


class ConversionError(MarkturnError):
    """Exception raised when rendering fails for reasons other than bad input.

    Parameters
    ----------
    message : str
        Description of the failure
    conversion_stage : str, optional
        Stage that failed (e.g. "html_parsing", "rendering")
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self, message: str, conversion_stage: str | None = None, original_error: Exception | None = None
    ):
        """Initialize the conversion error."""
        super().__init__(message, original_error=original_error)
        self.conversion_stage = conversion_stage


class RuleConflictError(MarkturnError):
    """Exception raised in strict mode when exclusive rules overlap.

    Parameters
    ----------
    rule_name : str
        Name of the rule being registered
    conflicting_rule : str
        Name of the already-registered rule it overlaps
    tags : iterable of str, optional
        The tag names both rules claim
    message : str, optional
        Custom error message

    """

    def __init__(
        self,
        rule_name: str,
        conflicting_rule: str,
        tags: Any = None,
        message: str | None = None,
    ):
        """Initialize the rule conflict error."""
        if message is None:
            claimed = ", ".join(sorted(tags)) if tags else "the same elements"
            message = f"Rule '{rule_name}' conflicts with exclusive rule '{conflicting_rule}' over {claimed}"
        super().__init__(message)
        self.rule_name = rule_name
        self.conflicting_rule = conflicting_rule
        self.tags = tags


class PluginError(MarkturnError):
    """Exception raised when a plugin cannot be found or fails to register.

    Parameters
    ----------
    message : str
        Description of the failure
    plugin_name : str, optional
        Name of the plugin
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, plugin_name: str | None = None, original_error: Exception | None = None):
        """Initialize the plugin error."""
        super().__init__(message, original_error=original_error)
        self.plugin_name = plugin_name


class ConfigError(MarkturnError):
    """Exception raised when an options file cannot be read or parsed.

    Parameters
    ----------
    message : str
        Description of the failure
    config_path : str, optional
        Path to the configuration file
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, config_path: str | None = None, original_error: Exception | None = None):
        """Initialize the configuration error."""
        super().__init__(message, original_error=original_error)
        self.config_path = config_path


__all__ = [
    "MarkturnError",
    "ValidationError",
    "MalformedInputError",
    "ConversionError",
    "RuleConflictError",
    "PluginError",
    "ConfigError",
]
