#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markturn/nodes.py
"""Document tree consumed by the Markdown renderer.

The renderer never works on parser objects directly. HTML is parsed by
BeautifulSoup and copied into the small node hierarchy defined here, so rules
only ever see four shapes of node:

    - Document: the root, holding top-level children
    - Element: tag name, attribute mapping, ordered children
    - Text: character data
    - Comment: HTML comments (ignored when rendering)

Every node keeps a weak, non-owning reference to its parent. Rules use it for
context lookups (is this ``<li>`` inside an ``<ol>``? is this ``<code>``
inside a ``<pre>``?) and never to mutate the tree.

Examples
--------
Build a tree by hand:

    >>> from markturn.nodes import Element, Text
    >>> p = Element("p", children=[Text("Hello "), Element("b", children=[Text("world")])])
    >>> p.text_content
    'Hello world'

Parse HTML:

    >>> from markturn.nodes import parse_html
    >>> doc = parse_html("<h1>Title</h1>")
    >>> doc.children[0].tag
    'h1'

"""

from __future__ import annotations

import html
import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

from bs4 import BeautifulSoup, CData, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag
from bs4 import Comment as SoupComment

from markturn.constants import BLOCK_ELEMENTS, VOID_ELEMENTS
from markturn.exceptions import MalformedInputError


class DocumentNode(ABC):
    """Base class for every node in a document tree."""

    kind: str = "node"

    def __init__(self) -> None:
        self._parent_ref: Optional[weakref.ReferenceType[ParentNode]] = None
        self._index = -1

    @property
    def parent(self) -> Optional[ParentNode]:
        """The containing node, or None for a detached node or the root."""
        ref = getattr(self, "_parent_ref", None)
        return ref() if ref is not None else None

    def _attach(self, parent: ParentNode, index: int) -> None:
        self._parent_ref = weakref.ref(parent)
        self._index = index

    @property
    @abstractmethod
    def text_content(self) -> str:
        """Concatenated text of this node and its descendants."""

    @property
    def tag(self) -> str:
        return ""

    @property
    def is_block(self) -> bool:
        return False

    @property
    def is_void(self) -> bool:
        return False

    def _sibling(self, offset: int) -> Optional[DocumentNode]:
        parent = self.parent
        if parent is None:
            return None
        siblings = parent.children
        index = getattr(self, "_index", -1)
        # The recorded position goes stale if the child list was edited directly
        if not (0 <= index < len(siblings) and siblings[index] is self):
            index = next((i for i, child in enumerate(siblings) if child is self), -1)
            if index < 0:
                return None
            self._index = index
        target = index + offset
        return siblings[target] if 0 <= target < len(siblings) else None

    @property
    def previous_sibling(self) -> Optional[DocumentNode]:
        return self._sibling(-1)

    @property
    def next_sibling(self) -> Optional[DocumentNode]:
        return self._sibling(1)

    def ancestors(self) -> Iterator[ParentNode]:
        """Yield the parent chain from the nearest ancestor to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def has_ancestor(self, *tags: str) -> bool:
        return any(ancestor.tag in tags for ancestor in self.ancestors())

    @abstractmethod
    def outer_html(self) -> str:
        """Serialize the node back to HTML."""


@dataclass(eq=False)
class Text(DocumentNode):
    """Character data.

    Parameters
    ----------
    data : str
        The raw (un-normalized) text

    """

    data: str
    kind = "text"

    def __post_init__(self) -> None:
        DocumentNode.__init__(self)

    @property
    def text_content(self) -> str:
        return self.data

    def outer_html(self) -> str:
        return html.escape(self.data, quote=False)


@dataclass(eq=False)
class Comment(DocumentNode):
    """An HTML comment. Comments never produce Markdown output."""

    data: str
    kind = "comment"

    def __post_init__(self) -> None:
        DocumentNode.__init__(self)

    @property
    def text_content(self) -> str:
        return ""

    def outer_html(self) -> str:
        return f"<!--{self.data}-->"


class _ParentMixin:
    """Shared child handling for Element and Document."""

    children: list[DocumentNode]

    def _adopt_children(self) -> None:
        for index, child in enumerate(self.children):
            if isinstance(child, DocumentNode):
                child._attach(self, index)  # type: ignore[arg-type]

    def append_child(self, child: DocumentNode) -> DocumentNode:
        """Append ``child`` and point its parent reference at this node."""
        self.children.append(child)
        child._attach(self, len(self.children) - 1)  # type: ignore[arg-type]
        return child

    @property
    def first_child(self) -> Optional[DocumentNode]:
        return self.children[0] if self.children else None

    @property
    def last_child(self) -> Optional[DocumentNode]:
        return self.children[-1] if self.children else None

    @property
    def text_content(self) -> str:
        parts: list[str] = []
        stack: list[DocumentNode] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if isinstance(node, Text):
                parts.append(node.data)
            elif isinstance(node, _ParentMixin):
                stack.extend(reversed(node.children))
        return "".join(parts)

    def iter_descendants(self) -> Iterator[DocumentNode]:
        """Yield descendants in document order."""
        stack: list[DocumentNode] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, _ParentMixin):
                stack.extend(reversed(node.children))

    def find(self, tag: str) -> Optional[Element]:
        """Return the first descendant element named ``tag``."""
        for node in self.iter_descendants():
            if isinstance(node, Element) and node.tag == tag:
                return node
        return None

    def find_all(self, tag: str, recursive: bool = True) -> list[Element]:
        candidates = self.iter_descendants() if recursive else iter(self.children)
        return [node for node in candidates if isinstance(node, Element) and node.tag == tag]

    def _inner_html(self) -> str:
        return "".join(child.outer_html() for child in self.children)


@dataclass(eq=False)
class Element(_ParentMixin, DocumentNode):
    """An HTML element.

    Parameters
    ----------
    name : str
        Tag name; stored lower-cased
    attrs : dict[str, str], default = empty dict
        Attribute mapping
    children : list[DocumentNode], default = empty list
        Ordered child nodes

    """

    name: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[DocumentNode] = field(default_factory=list)
    kind = "element"

    def __post_init__(self) -> None:
        DocumentNode.__init__(self)
        if isinstance(self.name, str):
            self.name = self.name.lower()
        self._adopt_children()

    @property
    def tag(self) -> str:
        return self.name

    @property
    def is_block(self) -> bool:
        return self.name in BLOCK_ELEMENTS

    @property
    def is_void(self) -> bool:
        return self.name in VOID_ELEMENTS

    @property
    def is_code(self) -> bool:
        """True for ``<code>`` and anything nested inside one."""
        return self.name == "code" or self.has_ancestor("code")

    def get(self, attr: str, default: Any = None) -> Any:
        return self.attrs.get(attr, default)

    def outer_html(self) -> str:
        attrs = "".join(f' {key}="{html.escape(str(value), quote=True)}"' for key, value in self.attrs.items())
        if self.is_void:
            return f"<{self.name}{attrs}>"
        return f"<{self.name}{attrs}>{self._inner_html()}</{self.name}>"


@dataclass(eq=False)
class Document(_ParentMixin, DocumentNode):
    """Root of a parsed document."""

    children: list[DocumentNode] = field(default_factory=list)
    kind = "document"

    def __post_init__(self) -> None:
        DocumentNode.__init__(self)
        self._adopt_children()

    @property
    def body(self) -> Optional[Element]:
        return self.find("body")

    def outer_html(self) -> str:
        return self._inner_html()


ParentNode = Union[Element, Document]


def validate_tree(root: Any) -> None:
    """Check the structural assumptions the renderer relies on.

    Raises
    ------
    MalformedInputError
        For an element without a tag name, a text or comment node whose data
        is not a string, or a child that is not a ``DocumentNode``

    """
    stack: list[Any] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, Element):
            if not isinstance(node.name, str) or not node.name:
                raise MalformedInputError("Element is missing a tag name", node=node)
            stack.extend(node.children)
        elif isinstance(node, Document):
            stack.extend(node.children)
        elif isinstance(node, (Text, Comment)):
            if not isinstance(node.data, str):
                raise MalformedInputError(
                    f"{type(node).__name__} data must be a string, got {type(node.data).__name__}", node=node
                )
        else:
            raise MalformedInputError(f"Unexpected node of type {type(node).__name__}", node=node)


def _soup_attrs(tag: Tag) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for key, value in tag.attrs.items():
        # bs4 returns multi-valued attributes such as class as lists
        attrs[key] = " ".join(value) if isinstance(value, (list, tuple)) else str(value)
    return attrs


def _convert_soup_node(item: Any) -> Optional[DocumentNode]:
    if isinstance(item, BeautifulSoup):
        return Document()
    if isinstance(item, Tag):
        if not item.name:
            raise MalformedInputError("Element is missing a tag name", node=item)
        return Element(item.name, attrs=_soup_attrs(item))
    if isinstance(item, SoupComment):
        return Comment(str(item))
    if isinstance(item, (Doctype, Declaration, ProcessingInstruction)):
        return None
    if isinstance(item, (CData, NavigableString)):
        return Text(str(item))
    raise MalformedInputError(f"Unsupported parser node type: {type(item).__name__}", node=item)


def from_soup(soup: Union[BeautifulSoup, Tag]) -> Union[Document, Element]:
    """Copy a BeautifulSoup tree into markturn nodes.

    Parameters
    ----------
    soup : BeautifulSoup or Tag
        Parsed document or a single element

    Returns
    -------
    Document or Element
        A ``Document`` for a whole soup, an ``Element`` for a single tag

    Raises
    ------
    MalformedInputError
        If the parser produced a node that cannot be represented

    """
    root = _convert_soup_node(soup)
    if not isinstance(root, (Document, Element)):
        raise MalformedInputError("from_soup expects a BeautifulSoup document or tag", node=soup)

    stack: list[tuple[Tag, Union[Document, Element]]] = [(soup, root)]
    while stack:
        source, target = stack.pop()
        for child in source.children:
            converted = _convert_soup_node(child)
            if converted is None:
                continue
            target.append_child(converted)
            if isinstance(converted, Element):
                stack.append((child, converted))
    return root


def parse_html(markup: str, parser: str = "html.parser") -> Document:
    """Parse an HTML string with BeautifulSoup and convert it.

    Parameters
    ----------
    markup : str
        HTML source
    parser : str, default = "html.parser"
        BeautifulSoup tree builder name

    Returns
    -------
    Document
        The converted document tree

    """
    soup = BeautifulSoup(markup, parser)
    document = from_soup(soup)
    assert isinstance(document, Document)
    return document


__all__ = [
    "DocumentNode",
    "Document",
    "Element",
    "Text",
    "Comment",
    "ParentNode",
    "from_soup",
    "parse_html",
    "validate_tree",
]
