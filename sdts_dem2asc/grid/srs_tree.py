#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tree view of a spatial reference.

The GDAL Python bindings expose a spatial reference's attributes only by
path (``GetAttrValue``), not as nodes, so the WKT1 export is read back into
a small (name, children) tree that can be walked recursively.
"""
import re
from typing import Iterator, List, NamedTuple, Optional
from osgeo import osr


class SrsNode(NamedTuple):
    """A WKT node. Leaf values are nodes with no children."""
    name: str
    children: List["SrsNode"]


# quoted string | bracket or separator | bare word/number
_TOKEN_RE = re.compile(r'\s*(?:"((?:[^"]|"")*)"|([\[\]\(\),])|([^\s\[\]\(\),"]+))')
_OPEN = ("[", "(")
_CLOSE = ("]", ")")


def _tokenize(wkt: str) -> Iterator[str]:
    pos = 0
    wkt = wkt.rstrip()
    while pos < len(wkt):
        match = _TOKEN_RE.match(wkt, pos)
        if match is None or match.end() == pos:
            raise ValueError(f"Malformed WKT near offset {pos}: {wkt[pos:pos + 20]!r}")
        quoted, punct, word = match.groups()
        if quoted is not None:
            yield "V" + quoted.replace('""', '"')
        elif punct is not None:
            yield punct
        else:
            yield "V" + word
        pos = match.end()


def parse_wkt(wkt: str) -> SrsNode:
    """
    Parse WKT1 text into an ``SrsNode`` tree.

    Parameters
    ----------
    wkt : str
        WKT1 text, e.g. from ``osr.SpatialReference.ExportToWkt``.

    Returns
    -------
    SrsNode
        Root node (``PROJCS``, ``GEOGCS``, ...).

    Raises
    ------
    ValueError
        If the text is not well-formed WKT.
    """
    tokens = list(_tokenize(wkt))
    if not tokens:
        raise ValueError("Empty WKT")
    node, pos = _parse_node(tokens, 0)
    if pos != len(tokens):
        raise ValueError(f"Unexpected trailing WKT tokens: {tokens[pos:]}")
    return node


def _parse_node(tokens: List[str], pos: int):
    if pos >= len(tokens):
        raise ValueError("Unexpected end of WKT")
    token = tokens[pos]
    if not token.startswith("V"):
        raise ValueError(f"Expected a value, got {token!r}")
    name = token[1:]
    pos += 1
    children = []
    if pos < len(tokens) and tokens[pos] in _OPEN:
        pos += 1
        while True:
            child, pos = _parse_node(tokens, pos)
            children.append(child)
            if pos >= len(tokens):
                raise ValueError(f"Unterminated WKT node {name}")
            if tokens[pos] == ",":
                pos += 1
                continue
            if tokens[pos] in _CLOSE:
                pos += 1
                break
            raise ValueError(f"Unexpected token {tokens[pos]!r} in WKT node {name}")
    return SrsNode(name, children), pos


def srs_to_tree(srs: osr.SpatialReference) -> SrsNode:
    """Return the WKT1 tree of a spatial reference."""
    return parse_wkt(srs.ExportToWkt())


def find_node(root: SrsNode, name: str) -> Optional[SrsNode]:
    """
    Find the first node called ``name``.

    The root itself is checked first, then its immediate children, then
    each child's subtree in order, so a direct child wins over a deeper
    node of the same name (``UNIT`` of a ``PROJCS`` rather than the one of
    its ``GEOGCS``).
    """
    if root.name.upper() == name.upper():
        return root
    for child in root.children:
        if child.children and child.name.upper() == name.upper():
            return child
    for child in root.children:
        found = find_node(child, name) if child.children else None
        if found is not None:
            return found
    return None


def format_node(node: SrsNode, level: int = 0) -> List[str]:
    """
    Render a node and its subtree.

    Each node prints as ``<indent>NAME [n children]:`` with two spaces of
    indent per level; each leaf child prints as ``<index>: '<value>'``.
    """
    spaces = "  " * level
    lines = [f"  {spaces}{node.name} [{len(node.children)} children]:"]
    for index, child in enumerate(node.children):
        if child.children:
            lines.extend(format_node(child, level + 1))
        else:
            lines.append(f"    {index}: '{child.name}'")
    return lines
