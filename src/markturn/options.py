#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Conversion options and the option resolver.

``ConversionOptions`` is an immutable record holding one choice per
configurable Markdown style dimension. Constructing it directly is strict:
values outside a field's choice table raise ``ValidationError``.

``resolve_options`` is the lenient front door used for user-supplied input
(config files, command-line style mappings). It accepts several spellings of
each key, accepts 1-based numeric selectors, and silently degrades invalid
values to the field default.

Examples
--------
    >>> from markturn.options import resolve_options
    >>> options = resolve_options({"headingStyle": "setext", "b": 2})
    >>> options.heading_style, options.bullet_list_marker
    ('setext', '-')

"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from markturn.constants import (
    DEFAULT_BR,
    DEFAULT_BULLET_LIST_MARKER,
    DEFAULT_CODE_BLOCK_STYLE,
    DEFAULT_EM_DELIMITER,
    DEFAULT_FENCE,
    DEFAULT_HEADING_STYLE,
    DEFAULT_HR,
    DEFAULT_LINK_REFERENCE_STYLE,
    DEFAULT_LINK_STYLE,
    DEFAULT_PREFORMATTED_CODE,
    DEFAULT_STRONG_DELIMITER,
    FALSY_STRINGS,
    OPTION_CHOICES,
    OPTION_KEY_ALIASES,
    TRUTHY_STRINGS,
    BulletListMarker,
    CodeBlockStyle,
    EmDelimiter,
    FenceChar,
    HeadingStyle,
    HorizontalRuleMarker,
    LineBreakMarker,
    LinkReferenceStyle,
    LinkStyle,
    StrongDelimiter,
)
from markturn.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)


@dataclass(frozen=True)
class ConversionOptions(CloneFrozenMixin):
    r"""Markdown style choices for one conversion.

    Parameters
    ----------
    heading_style : {"atx", "setext"}, default "atx"
        "atx" prefixes headings with ``#`` per level. "setext" underlines
        levels 1 and 2 with ``=`` / ``-`` and falls back to atx below that.
    hr : {"\*", "-", "\_"}, default "\*"
        Marker used for thematic breaks, written three times.
    bullet_list_marker : {"\*", "-", "+"}, default "\*"
        Marker for unordered list items.
    code_block_style : {"indented", "fenced"}, default "indented"
        How ``<pre><code>`` blocks are written.
    fence : {"`", "~"}, default "`"
        Fence character for fenced code blocks.
    em_delimiter : {"\_", "\*"}, default "\_"
        Delimiter for emphasis.
    strong_delimiter : {"\*\*", "\_\_"}, default "\*\*"
        Delimiter for strong emphasis.
    link_style : {"inlined", "referenced"}, default "inlined"
        Inline ``[text](url)`` links or reference links collected at the end.
    link_reference_style : {"full", "collapsed", "shortcut"}, default "full"
        Label form used when ``link_style`` is "referenced".
    preformatted_code : bool, default False
        Keep whitespace verbatim inside ``<pre>`` and ``<code>``.
    br : {"  ", "\\"}, default two spaces
        Marker written before the newline of a hard line break.

    """

    heading_style: HeadingStyle = field(
        default=DEFAULT_HEADING_STYLE,
        metadata={"help": "Heading style", "choices": OPTION_CHOICES["heading_style"]},
    )
    hr: HorizontalRuleMarker = field(
        default=DEFAULT_HR,
        metadata={"help": "Horizontal rule marker", "choices": OPTION_CHOICES["hr"]},
    )
    bullet_list_marker: BulletListMarker = field(
        default=DEFAULT_BULLET_LIST_MARKER,
        metadata={"help": "Bullet list marker", "choices": OPTION_CHOICES["bullet_list_marker"]},
    )
    code_block_style: CodeBlockStyle = field(
        default=DEFAULT_CODE_BLOCK_STYLE,
        metadata={"help": "Code block style", "choices": OPTION_CHOICES["code_block_style"]},
    )
    fence: FenceChar = field(
        default=DEFAULT_FENCE,
        metadata={"help": "Fence character for fenced code blocks", "choices": OPTION_CHOICES["fence"]},
    )
    em_delimiter: EmDelimiter = field(
        default=DEFAULT_EM_DELIMITER,
        metadata={"help": "Emphasis delimiter", "choices": OPTION_CHOICES["em_delimiter"]},
    )
    strong_delimiter: StrongDelimiter = field(
        default=DEFAULT_STRONG_DELIMITER,
        metadata={"help": "Strong delimiter", "choices": OPTION_CHOICES["strong_delimiter"]},
    )
    link_style: LinkStyle = field(
        default=DEFAULT_LINK_STYLE,
        metadata={"help": "Link style", "choices": OPTION_CHOICES["link_style"]},
    )
    link_reference_style: LinkReferenceStyle = field(
        default=DEFAULT_LINK_REFERENCE_STYLE,
        metadata={"help": "Link reference style", "choices": OPTION_CHOICES["link_reference_style"]},
    )
    preformatted_code: bool = field(
        default=DEFAULT_PREFORMATTED_CODE,
        metadata={"help": "Preserve whitespace in preformatted code", "choices": OPTION_CHOICES["preformatted_code"]},
    )
    br: LineBreakMarker = field(
        default=DEFAULT_BR,
        metadata={"help": "Hard line break marker", "choices": OPTION_CHOICES["br"]},
    )

    def __post_init__(self) -> None:
        """Reject values outside each field's choice table.

        Raises
        ------
        ValidationError
            If any field holds a value that is not one of its choices.

        """
        for option_field in fields(self):
            value = getattr(self, option_field.name)
            choices = option_field.metadata["choices"]
            # bool is an int subclass; 1 == True must not pass for the bool field
            if not any(value == choice and type(value) is type(choice) for choice in choices):
                raise ValidationError(
                    f"Invalid value for {option_field.name}: {value!r}. Expected one of {list(choices)!r}",
                    parameter_name=option_field.name,
                    parameter_value=value,
                )


OPTION_FIELD_NAMES: tuple[str, ...] = tuple(option_field.name for option_field in fields(ConversionOptions))


def normalize_option_key(key: str) -> Optional[str]:
    """Map any accepted spelling of an option key to its field name.

    Parameters
    ----------
    key : str
        snake_case field name, camelCase name, or long/short flag name
        (leading dashes are ignored)

    Returns
    -------
    str or None
        The field name, or None when the key is not recognized

    """
    stripped = key.lstrip("-")
    if stripped in OPTION_FIELD_NAMES:
        return stripped
    if stripped in OPTION_KEY_ALIASES:
        return OPTION_KEY_ALIASES[stripped]
    snake = stripped.replace("-", "_")
    if snake in OPTION_FIELD_NAMES:
        return snake
    return None


def _selector_index(value: Any) -> Optional[int]:
    """Return the 0-based index for a 1-based numeric selector, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value - 1
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip()) - 1
    return None


def _coerce_bool(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUTHY_STRINGS:
            return True
        if lowered in FALSY_STRINGS:
            return False
    return value


def resolve_option_value(name: str, value: Any, default: Any) -> Any:
    """Resolve a single raw option value against its choice table.

    Parameters
    ----------
    name : str
        Field name
    value : Any
        Raw value: a choice, a 1-based numeric selector, or (for booleans)
        a truthy/falsy string
    default : Any
        Value kept when ``value`` is an out-of-range selector or invalid

    Returns
    -------
    Any
        The resolved choice

    """
    choices = OPTION_CHOICES[name]

    if name == "preformatted_code":
        value = _coerce_bool(value)
        if isinstance(value, bool):
            return value

    for choice in choices:
        if value == choice and type(value) is type(choice):
            return choice

    index = _selector_index(value)
    if index is not None:
        if 0 <= index < len(choices):
            return choices[index]
        logger.debug(f"Ignoring out-of-range selector {value!r} for {name}")
        return default

    logger.warning(f"Invalid value {value!r} for option '{name}', using default {choices[0]!r}")
    return choices[0]


def resolve_options(
    raw_options: Mapping[str, Any] | ConversionOptions | None = None,
    base: ConversionOptions | None = None,
    **overrides: Any,
) -> ConversionOptions:
    """Merge user-supplied style options with defaults.

    Parameters
    ----------
    raw_options : Mapping or ConversionOptions, optional
        Raw option mapping. Keys may be field names, camelCase names or
        command-line names; unknown keys are ignored. A ``ConversionOptions``
        instance is returned unchanged when no overrides are given.
    base : ConversionOptions, optional
        Options to start from instead of the defaults
    **overrides : Any
        Extra raw options applied after ``raw_options``

    Returns
    -------
    ConversionOptions
        Validated options. This function never raises for bad values.

    Examples
    --------
        >>> resolve_options({"codeBlockStyle": "fenced", "fence": "~"}).fence
        '~'
        >>> resolve_options({"hr": 9}).hr  # out-of-range selector is ignored
        '*'

    """
    if isinstance(raw_options, ConversionOptions):
        base = raw_options
        raw_options = None

    current = base or ConversionOptions()
    merged: dict[str, Any] = {}
    for source in (raw_options or {}, overrides):
        for key, value in source.items():
            name = normalize_option_key(str(key))
            if name is None:
                logger.debug(f"Ignoring unknown option '{key}'")
                continue
            merged[name] = value

    if not merged:
        return current

    resolved = {
        name: resolve_option_value(name, value, getattr(current, name)) for name, value in merged.items()
    }
    return current.create_updated(**resolved)


__all__ = [
    "CloneFrozenMixin",
    "ConversionOptions",
    "OPTION_FIELD_NAMES",
    "normalize_option_key",
    "resolve_option_value",
    "resolve_options",
]
