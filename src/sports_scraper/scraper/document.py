# src/sports_scraper/scraper/document.py
"""
A small structural view over a BeautifulSoup tree.

The NFL pages mark the same semantic element with several near-identical
class strings ("schedules-list-matchup post expandable  type-reg",
"schedules-list-matchup post   type-reg", ...). Instead of comparing whole
class strings, nodes are classified with NodeRule: a tag name plus a set of
class tokens that must all be present, and optional exact attribute values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterator, List, Mapping, Optional, Union

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from ..errors import DocumentUnparsable, NodeNotFound

AttrValue = Union[str, FrozenSet[str]]


@dataclass(frozen=True)
class NodeRule:
    """
    Declarative matcher for one semantic role on the page.

    Args:
        tag: Element name, or None for any element.
        classes: Class tokens that must all be present on the element.
        attrs: Exact attribute values. A frozenset value accepts any member.
        exact_classes: Require the class tokens to equal ``classes`` exactly.
        bare: Match only elements without any attribute.
    """
    tag: Optional[str] = None
    classes: FrozenSet[str] = frozenset()
    attrs: Mapping[str, AttrValue] = field(default_factory=dict)
    exact_classes: bool = False
    bare: bool = False

    @classmethod
    def of(cls, tag: Optional[str] = None, classes: str = "", **kwargs) -> "NodeRule":
        """Shorthand: ``NodeRule.of("div", "team-name away")``."""
        return cls(tag=tag, classes=frozenset(classes.split()), **kwargs)

    def matches(self, node: "Node") -> bool:
        if self.tag is not None and node.name != self.tag:
            return False
        if self.bare:
            return not node.attributes
        if self.exact_classes:
            if node.classes != self.classes:
                return False
        elif not self.classes <= node.classes:
            return False
        for name, expected in self.attrs.items():
            actual = node.attributes.get(name)
            if isinstance(expected, frozenset):
                if actual not in expected:
                    return False
            elif actual != expected:
                return False
        return True


class Node:
    """A single element of the parsed page."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    def __repr__(self) -> str:
        return f"<Node {self.name} {self.attributes!r}>"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Node) and other._tag is self._tag

    def __hash__(self) -> int:
        return id(self._tag)

    @property
    def name(self) -> str:
        return self._tag.name

    @property
    def attributes(self) -> Dict[str, str]:
        """Attribute values exactly as written in the source markup."""
        return {key: _as_text(value) for key, value in self._tag.attrs.items()}

    @property
    def classes(self) -> FrozenSet[str]:
        return frozenset(self.attributes.get("class", "").split())

    @property
    def children(self) -> List["Node"]:
        """Element children in document order (text nodes are skipped)."""
        return [Node(child) for child in self._tag.children if isinstance(child, Tag)]

    @property
    def first_child(self) -> Optional["Node"]:
        for child in self._tag.children:
            if isinstance(child, Tag):
                return Node(child)
        return None

    @property
    def is_leaf(self) -> bool:
        return self.first_child is None

    @property
    def text(self) -> str:
        """Concatenated text content of the element and its descendants."""
        return self._tag.get_text()

    def leaf_text(self) -> str:
        """Text of the innermost element reached by following first children."""
        node = self
        while node.first_child is not None:
            node = node.first_child
        return node.text

    def children_matching(self, rule: NodeRule) -> List["Node"]:
        return [child for child in self.children if rule.matches(child)]

    def first_child_matching(self, rule: NodeRule) -> Optional["Node"]:
        for child in self.children:
            if rule.matches(child):
                return child
        return None

    def require_child(self, rule: NodeRule, what: str) -> "Node":
        """First direct child matching ``rule``; NodeNotFound(what) otherwise."""
        child = self.first_child_matching(rule)
        if child is None:
            raise NodeNotFound(what)
        return child

    def iter_descendants(self) -> Iterator["Node"]:
        for tag in self._tag.find_all(True):
            yield Node(tag)

    def find_all(self, rule: NodeRule) -> List["Node"]:
        return [node for node in self.iter_descendants() if rule.matches(node)]

    def find(self, rule: NodeRule) -> Optional["Node"]:
        for node in self.iter_descendants():
            if rule.matches(node):
                return node
        return None


class Document:
    """A parsed HTML page."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    @classmethod
    def parse(cls, raw_html: Union[str, bytes]) -> "Document":
        """
        Parse raw HTML into a Document.

        Raises:
            DocumentUnparsable: empty input, undecodable bytes, or markup
                without a single element.
        """
        if isinstance(raw_html, bytes):
            try:
                raw_html = raw_html.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DocumentUnparsable(f"HTML is not valid UTF-8: {e}") from e

        if raw_html is None or not raw_html.strip():
            raise DocumentUnparsable("HTML document is empty")

        try:
            # Keep class attributes as the raw strings the site emits.
            soup = BeautifulSoup(raw_html, "html.parser", multi_valued_attributes=None)
        except ParserRejectedMarkup as e:
            raise DocumentUnparsable(str(e)) from e

        if soup.find(True) is None:
            raise DocumentUnparsable("HTML document contains no elements")
        return cls(soup)

    @property
    def root(self) -> Node:
        return Node(self._soup.find(True))

    def iter_nodes(self) -> Iterator[Node]:
        for tag in self._soup.find_all(True):
            yield Node(tag)

    def find_all(self, rule: NodeRule) -> List[Node]:
        """All elements matching ``rule`` in document order."""
        return [node for node in self.iter_nodes() if rule.matches(node)]

    def find(self, rule: NodeRule) -> Optional[Node]:
        for node in self.iter_nodes():
            if rule.matches(node):
                return node
        return None


def _as_text(value) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return value
