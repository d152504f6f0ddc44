"""
Textual header for a Huffman tree

    tree     := leaf | internal
    leaf     := "." <raw symbol character>
    internal := "(" tree_zero tree_one ")"

Symbols are bytes, so each leaf character is chr(symbol) and the whole header
encodes to latin-1 one byte per character.
"""

from typing import List, Tuple

from huffman import HuffmanNode
from huffman_errors import FormatError

LEAF = '.'
OPEN = '('
CLOSE = ')'
MAX_DEPTH = 255 # 256 byte leaves never sit deeper than this


def flatten_tree_to_header(root: HuffmanNode) -> str:
    parts: List[str] = []

    def flatten(node):
        if node.is_leaf():
            parts.append(LEAF + chr(node.symbol))
            return
        parts.append(OPEN)
        flatten(node.zero)
        flatten(node.one)
        parts.append(CLOSE)

    flatten(root)
    return ''.join(parts)


def _parse_node(header: str, pos: int, depth: int = 0) -> Tuple[HuffmanNode, int]:
    # Returns the subtree starting at pos and the position just past it
    if pos >= len(header):
        raise FormatError(f"header ended at offset {pos} where a node was expected")

    mark = header[pos]
    if mark == LEAF:
        if pos + 1 >= len(header):
            raise FormatError(f"leaf at offset {pos} has no symbol")
        symbol = ord(header[pos + 1])
        if symbol > 0xFF:
            raise FormatError(f"leaf symbol {header[pos + 1]!r} at offset {pos + 1} is not a byte")
        return HuffmanNode(symbol, 0), pos + 2

    if mark != OPEN:
        raise FormatError(f"expected {LEAF!r} or {OPEN!r} at offset {pos}, found {mark!r}")

    if depth >= MAX_DEPTH:
        raise FormatError(f"internal node at offset {pos} is nested deeper than {MAX_DEPTH}")
    zero, pos = _parse_node(header, pos + 1, depth + 1)
    one, pos = _parse_node(header, pos, depth + 1)
    if pos >= len(header):
        raise FormatError(f"header ended at offset {pos} where {CLOSE!r} was expected")
    if header[pos] != CLOSE:
        raise FormatError(f"expected {CLOSE!r} at offset {pos}, found {header[pos]!r}")
    return HuffmanNode(None, 0, zero, one), pos + 1


def recreate_tree_from_header(header: str) -> HuffmanNode:
    root, end = _parse_node(header, 0)
    if end != len(header):
        raise FormatError(f"{len(header) - end} unexpected characters after header at offset {end}")
    return root


def measure_header(data: bytes, start: int = 0) -> int:
    """
    Find where a header beginning at data[start] ends, without building the tree.

    Only token structure and parenthesis balance are checked here; the full
    shape is validated by recreate_tree_from_header. Returns the offset just
    past the header.
    """
    depth = 0
    pos = start
    while True:
        if pos >= len(data):
            raise FormatError(f"header ended at offset {pos} before it was balanced")
        mark = chr(data[pos])
        if mark == LEAF:
            if pos + 1 >= len(data):
                raise FormatError(f"leaf at offset {pos} has no symbol")
            pos += 2
        elif mark == OPEN:
            depth += 1
            pos += 1
            continue
        elif mark == CLOSE:
            if depth == 0:
                raise FormatError(f"unbalanced {CLOSE!r} at offset {pos}")
            depth -= 1
            pos += 1
        else:
            raise FormatError(f"expected {LEAF!r} or {OPEN!r} at offset {pos}, found {mark!r}")

        if depth == 0:
            return pos
