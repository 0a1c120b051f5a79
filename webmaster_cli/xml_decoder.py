"""Conversion of Google's Atom XML responses into a uniform node tree.

Every element becomes an :class:`XMLNode` with a normalized ``name``, its
direct text as ``value``, its ``attributes`` and its ``children``. Names are
snake_cased and lowercased while keeping namespace prefixes, so
``wt:crawlType`` turns into ``wt:crawl_type``. Children sharing a name are
collected into a list in document order; a lone child stays a single node.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from xml.parsers.expat import ExpatError

import xmltodict

from .errors import MalformedDocument

logger = logging.getLogger(__name__)

_ATTR_PREFIX = "@"
_TEXT_KEY = "#text"
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_BOOLEANS = {"true": True, "false": False}

NodeValue = Union[str, bool]


@dataclass
class XMLNode:
    name: str
    value: NodeValue = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    children: Dict[str, Union["XMLNode", List["XMLNode"]]] = field(default_factory=dict)

    def child(self, name: str) -> Optional["XMLNode"]:
        """Return the only (or first) child called ``name``."""
        slot = self.children.get(name)
        if isinstance(slot, list):
            return slot[0] if slot else None
        return slot

    def child_list(self, name: str) -> List["XMLNode"]:
        return as_list(self.children.get(name))

    def child_value(self, name: str, default: Any = None) -> Any:
        node = self.child(name)
        if node is None:
            return default
        return node.value

    def attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary form; empty ``attributes``/``children`` are omitted."""
        data: Dict[str, Any] = {"name": self.name, "value": self.value}
        if self.attributes:
            data["attributes"] = dict(self.attributes)
        if self.children:
            data["children"] = {
                key: [item.to_dict() for item in slot] if isinstance(slot, list) else slot.to_dict()
                for key, slot in self.children.items()
            }
        return data


def as_list(slot: Union[None, XMLNode, List[XMLNode]]) -> List[XMLNode]:
    if slot is None:
        return []
    if isinstance(slot, list):
        return slot
    return [slot]


def normalize_name(name: str) -> str:
    name = name.replace("-", "_")
    return _CAMEL_BOUNDARY.sub(r"\1_\2", name).lower()


def _is_namespace_declaration(attr_name: str) -> bool:
    return attr_name == "xmlns" or attr_name.startswith("xmlns:")


def _coerce_value(text: str) -> NodeValue:
    return _BOOLEANS.get(text, text)


def _add_child(children: Dict[str, Union[XMLNode, List[XMLNode]]], node: XMLNode) -> None:
    existing = children.get(node.name)
    if existing is None:
        children[node.name] = node
    elif isinstance(existing, list):
        existing.append(node)
    else:
        children[node.name] = [existing, node]


def _expand(raw_name: str, content: Any) -> XMLNode:
    node = XMLNode(name=normalize_name(raw_name))

    # xmltodict yields None for empty elements and a plain string for text-only ones
    if content is None:
        return node
    if isinstance(content, str):
        node.value = _coerce_value(content)
        return node

    for key, item in content.items():
        if key == _TEXT_KEY:
            node.value = _coerce_value(item or "")
        elif key.startswith(_ATTR_PREFIX):
            attr_name = key[len(_ATTR_PREFIX):]
            if not _is_namespace_declaration(attr_name):
                node.attributes[normalize_name(attr_name)] = item
        else:
            # repeated siblings arrive grouped in document order
            for occurrence in item if isinstance(item, list) else [item]:
                _add_child(node.children, _expand(key, occurrence))
    return node


def decode(xml_text: Union[str, bytes]) -> Dict[str, XMLNode]:
    """Parse ``xml_text`` and return its top-level elements keyed by name.

    Raises :class:`MalformedDocument` when the text is not well-formed XML.
    """
    try:
        parsed = xmltodict.parse(
            xml_text,
            attr_prefix=_ATTR_PREFIX,
            cdata_key=_TEXT_KEY,
            strip_whitespace=False,
        )
    except (ExpatError, ValueError, UnicodeError) as exc:
        # ValueError: DTD entities are refused; UnicodeError: lone surrogates
        raise MalformedDocument(f"Invalid XML document: {exc}") from exc

    result: Dict[str, XMLNode] = {}
    for raw_name, content in parsed.items():
        node = _expand(raw_name, content)
        result[node.name] = node
    logger.debug("Decoded XML document with root(s): %s", ", ".join(result))
    return result
