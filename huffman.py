import heapq
import itertools
from typing import BinaryIO, Dict

from huffman_errors import DuplicateCodeError, EmptyInputError

CHUNK_SIZE = 64 * 1024
SINGLE_SYMBOL_CODE = '0' # a lone leaf would otherwise get the empty code


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, frequency, zero = None, one = None, order = 0):
        self.symbol = symbol    # byte or None
        self.frequency = frequency
        self.zero = zero
        self.one = one
        self.order = order # creation serial, breaks frequency ties

    def is_leaf(self) -> bool:
        return self.symbol is not None

    def __lt__(self, other):
        return (self.frequency, self.order) < (other.frequency, other.order) # min-heap on frequency, then age


def build_frequency_table(data: bytes) -> Dict[int, int]:
    ft: Dict[int, int] = {}
    for b in data:
        ft[b] = ft.get(b, 0) + 1
    return ft


def stream_frequency_table(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Dict[int, int]:
    """
    Count symbols over a binary stream read in chunks, leaving the stream at EOF
    """
    ft: Dict[int, int] = {}
    for chunk in iter(lambda: stream.read(chunk_size), b""):
        for b in chunk:
            ft[b] = ft.get(b, 0) + 1
    return ft


def build_huffman_tree(frequency_table: Dict[int, int]) -> HuffmanNode: # frequency_table: dict of symbol -> frequency
    if not frequency_table:
        raise EmptyInputError("cannot build a Huffman tree from an empty frequency table")

    serial = itertools.count()
    # Seed in symbol order so equal frequencies always break the same way
    priority_queue = [HuffmanNode(symbol, frequency, order=next(serial))
                      for symbol, frequency in sorted(frequency_table.items())]
    heapq.heapify(priority_queue)

    # Build the tree
    while len(priority_queue) > 1:
        zero = heapq.heappop(priority_queue)
        one = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(None, zero.frequency + one.frequency, zero, one, order=next(serial))
        heapq.heappush(priority_queue, merged_node)

    return priority_queue[0] # root of the tree, a bare leaf when only one symbol was seen


def generate_huffman_codes(root: HuffmanNode) -> Dict[int, str]: # root: root of the Huffman tree
    if root.is_leaf():
        return {root.symbol: SINGLE_SYMBOL_CODE}

    codes: Dict[int, str] = {}
    def generate_codes_helper(node, current_code):
        if node.is_leaf():
            if node.symbol in codes:
                raise DuplicateCodeError(f"symbol {node.symbol} appears at more than one leaf")
            codes[node.symbol] = current_code
            return

        generate_codes_helper(node.zero, current_code + '0')
        generate_codes_helper(node.one, current_code + '1')

    generate_codes_helper(root, '')
    return codes # mapping of symbols to their code words


def build_decode_table(code_map: Dict[int, str]) -> Dict[str, int]:
    """
    Invert a code table into code word -> symbol
    """
    table: Dict[str, int] = {}
    for symbol, code in code_map.items():
        if code in table:
            raise DuplicateCodeError(f"code {code!r} assigned to both {table[code]} and {symbol}")
        table[code] = symbol
    return table
