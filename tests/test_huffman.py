import io
import random

import pytest

import huffman as huff
from huffman_errors import DuplicateCodeError, EmptyInputError


def _codes_for(data: bytes):
    return huff.generate_huffman_codes(huff.build_huffman_tree(huff.build_frequency_table(data)))


def test_frequency_table_counts_every_byte():
    ft = huff.build_frequency_table(b"aaabbc")
    assert ft == {ord('a'): 3, ord('b'): 2, ord('c'): 1}
    assert sum(ft.values()) == 6


def test_frequency_table_empty_input():
    assert huff.build_frequency_table(b"") == {}


def test_stream_frequency_table_matches_bytes_version():
    data = bytes(random.Random(7).getrandbits(8) for _ in range(5000))
    stream = io.BytesIO(data)
    assert huff.stream_frequency_table(stream, chunk_size=333) == huff.build_frequency_table(data)
    assert stream.read() == b""


def test_empty_table_has_no_tree():
    with pytest.raises(EmptyInputError):
        huff.build_huffman_tree({})


def test_single_symbol_tree_is_a_leaf_with_one_bit_code():
    root = huff.build_huffman_tree({ord('a'): 4})
    assert root.is_leaf()
    assert root.symbol == ord('a')
    assert huff.generate_huffman_codes(root) == {ord('a'): '0'}


def test_two_symbols_get_one_bit_each():
    root = huff.build_huffman_tree({ord('a'): 1, ord('b'): 1})
    assert not root.is_leaf()
    assert root.frequency == 2
    codes = huff.generate_huffman_codes(root)
    assert sorted(codes.values()) == ['0', '1']


def test_most_frequent_symbol_gets_shortest_code():
    codes = _codes_for(b"aaabbc")
    a, b, c = (len(codes[ord(ch)]) for ch in "abc")
    assert a == min(a, b, c)
    assert c == max(a, b, c)


def test_leaves_are_exactly_the_table_symbols():
    ft = {s: s + 1 for s in range(0, 256, 3)}
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(ft))
    assert set(codes) == set(ft)


def test_codes_are_prefix_free():
    codes = _codes_for(b"the quick brown fox jumps over the lazy dog" * 3)
    words = list(codes.values())
    for i, x in enumerate(words):
        assert x
        for j, y in enumerate(words):
            if i != j:
                assert not y.startswith(x)


def test_lower_frequency_never_gets_shorter_code():
    rng = random.Random(11)
    ft = {s: rng.randint(1, 50) for s in range(40)}
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(ft))
    for s in ft:
        for t in ft:
            if ft[s] < ft[t]:
                assert len(codes[s]) >= len(codes[t])


def test_construction_is_deterministic_across_table_order():
    ft = {ord(ch): 1 for ch in "zyxwvu"}
    ft[ord('m')] = 2
    reordered = dict(reversed(list(ft.items())))
    assert _table_codes(ft) == _table_codes(reordered)


def _table_codes(ft):
    return huff.generate_huffman_codes(huff.build_huffman_tree(ft))


def test_decode_table_inverts_code_table():
    codes = _codes_for(b"abracadabra")
    table = huff.build_decode_table(codes)
    assert len(table) == len(codes)
    for symbol, code in codes.items():
        assert table[code] == symbol


def test_decode_table_rejects_duplicate_codes():
    with pytest.raises(DuplicateCodeError):
        huff.build_decode_table({1: '01', 2: '01'})


def test_repeated_leaf_symbol_is_rejected():
    leaf_a = huff.HuffmanNode(ord('a'), 0)
    other_a = huff.HuffmanNode(ord('a'), 0)
    with pytest.raises(DuplicateCodeError):
        huff.generate_huffman_codes(huff.HuffmanNode(None, 0, leaf_a, other_a))
