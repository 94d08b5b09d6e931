"""
Retained element tree with CSS selector lookup.

Every Element is backed by a BeautifulSoup tag that carries its name, id,
classes and attributes; selectors are evaluated by soupsieve against that
tag tree with browser semantics (a query from an element returns its
descendants matching the selector in the context of the whole page).
Presentation state that markup does not carry (text, inner markup, hidden,
inline style) lives on the Element.
"""

from collections.abc import Iterator
from typing import Optional

import soupsieve as sv
from bs4 import BeautifulSoup, Tag

I18N_ATTRIBUTES = ("data-i18n", "data-i18n-html")

_TAG_FACTORY = BeautifulSoup("", "html.parser")


def is_valid_selector(selector: str) -> bool:
    """Whether soupsieve can compile selector."""
    try:
        sv.compile(selector)
    except (sv.SelectorSyntaxError, TypeError):
        return False
    return True


class Element:
    """A mount point or content element."""

    def __init__(self, tag: str = "div", element_id: str = "", classes=(),
                 attributes: Optional[dict[str, str]] = None, text: str = "",
                 children=()):
        attrs: dict = dict(attributes or {})
        if element_id:
            attrs["id"] = element_id
        attrs["class"] = list(classes)
        self.node: Tag = _TAG_FACTORY.new_tag(tag, attrs=attrs)

        self.text = text
        self.html = ""
        self.hidden = False
        self.style: dict[str, str] = {}
        self.parent: Optional["Element"] = None
        self.children: list["Element"] = []
        for child in children:
            self.append(child)

    def __repr__(self) -> str:
        ident = f"#{self.id}" if self.id else ""
        classes = "".join(f".{c}" for c in self.classes)
        return f"<Element {self.tag}{ident}{classes}>"

    @property
    def tag(self) -> str:
        return self.node.name

    @property
    def id(self) -> str:
        return self.node.get("id") or ""

    @property
    def classes(self) -> list[str]:
        return self.node.attrs.setdefault("class", [])

    @property
    def attributes(self) -> dict:
        return self.node.attrs

    # Tree ---------------------------------------------------------------

    def append(self, child: "Element") -> "Element":
        if child.parent is not None:
            child.parent.children.remove(child)
        self.node.append(child.node)
        child.parent = self
        self.children.append(child)
        return child

    def clear(self) -> None:
        for child in self.children:
            child.node.extract()
            child.parent = None
        self.children = []

    def replace_children(self, children) -> None:
        self.clear()
        for child in children:
            self.append(child)

    def descendants(self) -> Iterator["Element"]:
        for child in self.children:
            yield child
            yield from child.descendants()

    def ancestors(self) -> Iterator["Element"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def contains(self, other: Optional["Element"]) -> bool:
        """Whether other is this element or one of its descendants."""
        while other is not None:
            if other is self:
                return True
            other = other.parent
        return False

    # Selectors ------------------------------------------------------------

    def matches(self, selector: str) -> bool:
        return sv.match(selector, self.node)

    def query_all(self, selector: str) -> list["Element"]:
        by_node = {id(element.node): element for element in self.descendants()}
        return [by_node[id(tag)] for tag in sv.select(selector, self.node)
                if id(tag) in by_node]

    def query(self, selector: str) -> Optional["Element"]:
        found = self.query_all(selector)
        return found[0] if found else None

    def closest(self, selector: str) -> Optional["Element"]:
        tag = sv.closest(selector, self.node)
        if tag is None:
            return None
        for element in (self, *self.ancestors()):
            if element.node is tag:
                return element
        return None

    # Attributes and classes -----------------------------------------------

    def get_attribute(self, name: str) -> Optional[str]:
        return self.node.get(name)

    def set_attribute(self, name: str, value) -> None:
        self.node[name] = str(value).lower() if isinstance(value, bool) else str(value)

    def has_attribute(self, name: str) -> bool:
        return self.node.has_attr(name)

    @property
    def dataset(self) -> dict[str, str]:
        return {k[5:]: v for k, v in self.attributes.items() if k.startswith("data-")}

    @property
    def is_i18n_bound(self) -> bool:
        """Text of translation-bound elements belongs to the i18n layer."""
        return any(self.node.has_attr(name) for name in I18N_ATTRIBUTES)

    def add_class(self, name: str) -> None:
        if name not in self.classes:
            self.classes.append(name)

    def remove_class(self, name: str) -> None:
        if name in self.classes:
            self.classes.remove(name)

    def toggle_class(self, name: str, force: Optional[bool] = None) -> bool:
        enabled = (name not in self.classes) if force is None else force
        if enabled:
            self.add_class(name)
        else:
            self.remove_class(name)
        return enabled

    def set_text_unless_bound(self, text: str) -> bool:
        """Set text content unless the element is bound to a translation key."""
        if self.is_i18n_bound:
            return False
        self.text = text
        return True


class Document:
    """Page root that components locate their mount points in."""

    def __init__(self, root: Optional[Element] = None):
        self.root = root or Element(tag="html")
        self.active_element: Optional[Element] = None

    def query(self, selector: str) -> Optional[Element]:
        if self.root.matches(selector):
            return self.root
        return self.root.query(selector)

    def query_all(self, selector: str) -> list[Element]:
        found = self.root.query_all(selector)
        return [self.root, *found] if self.root.matches(selector) else found

    def focus(self, element: Optional[Element]) -> None:
        self.active_element = element
