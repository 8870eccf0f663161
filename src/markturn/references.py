#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Deferred link definitions for reference-style links.

When links are written as ``[text][label]`` the definitions are collected
during rendering and emitted once, after the document body, in the order the
labels were first used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceLink:
    """A single link definition.

    Parameters
    ----------
    label : str
        Reference label as written between brackets
    url : str
        Link destination
    title : str or None, default = None
        Optional link title

    """

    label: str
    url: str
    title: Optional[str] = None

    def to_markdown(self) -> str:
        destination = f"<{self.url}>" if (" " in self.url or not self.url) else self.url
        if self.title:
            escaped_title = self.title.replace('"', '\\"')
            return f'[{self.label}]: {destination} "{escaped_title}"'
        return f"[{self.label}]: {destination}"


def _label_key(label: str) -> str:
    # Labels match case-insensitively with internal whitespace collapsed
    return " ".join(label.split()).casefold()


class ReferenceLinkCollector:
    """Accumulates reference definitions for one conversion.

    Examples
    --------
        >>> collector = ReferenceLinkCollector()
        >>> collector.add_reference("docs", "https://a.example")
        'docs'
        >>> collector.add_reference("docs", "https://b.example")
        'docs 2'
        >>> print(collector.flush())
        [docs]: https://a.example
        [docs 2]: https://b.example

    """

    def __init__(self) -> None:
        self._references: list[ReferenceLink] = []
        self._by_label: dict[str, ReferenceLink] = {}
        self._numbers: dict[tuple[str, Optional[str]], str] = {}
        self._next_number = 1

    def __len__(self) -> int:
        return len(self._references)

    def __bool__(self) -> bool:
        return bool(self._references)

    @property
    def references(self) -> list[ReferenceLink]:
        return list(self._references)

    def add_reference(self, label: str, url: str, title: Optional[str] = None) -> str:
        """Store a definition and return the label to write in the body.

        An identical (label, url, title) reuses the existing definition. A
        label already taken by a different target gets a numeric suffix.

        Parameters
        ----------
        label : str
            Preferred label
        url : str
            Link destination
        title : str, optional
            Link title

        Returns
        -------
        str
            The final, unique label

        """
        candidate = label
        suffix = 1
        while True:
            existing = self._by_label.get(_label_key(candidate))
            if existing is None:
                break
            if existing.url == url and existing.title == title:
                return existing.label
            suffix += 1
            candidate = f"{label} {suffix}"

        if candidate != label:
            logger.debug(f"Reference label '{label}' already used, renamed to '{candidate}'")
        reference = ReferenceLink(label=candidate, url=url, title=title)
        self._references.append(reference)
        self._by_label[_label_key(candidate)] = reference
        return candidate

    def add_numbered(self, url: str, title: Optional[str] = None) -> str:
        """Store a definition under the next free number (``full`` style).

        The same (url, title) pair keeps the number it was first given.
        """
        key = (url, title)
        if key in self._numbers:
            return self._numbers[key]
        label = self.add_reference(self.next_number(), url, title)
        self._numbers[key] = label
        return label

    def next_number(self) -> str:
        """Issue the next numeric label not already in use."""
        while _label_key(str(self._next_number)) in self._by_label:
            self._next_number += 1
        number = str(self._next_number)
        self._next_number += 1
        return number

    def flush(self) -> str:
        """Return the definition block and clear the collector."""
        block = "\n".join(reference.to_markdown() for reference in self._references)
        self._references.clear()
        self._by_label.clear()
        self._numbers.clear()
        self._next_number = 1
        return block


__all__ = ["ReferenceLink", "ReferenceLinkCollector"]
