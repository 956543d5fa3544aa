import pytest

import huffman as huff
from errors import EmptyAlphabetError, TruncatedStreamError, UnknownSymbolError


SAMPLES = [
    "hello",
    "aaaa",
    "abracadabra",
    "héllo, wörld! 日本語 😀\n\t",
    "the quick brown fox jumps over the lazy dog " * 50,
]


@pytest.fixture
def hello_tree():
    return huff.build_huffman_tree(huff.frequency_table("hello"))


def test_frequency_table_hello():
    assert huff.frequency_table("hello") == {"h": 1, "e": 1, "l": 2, "o": 1}


def test_frequency_table_empty():
    assert huff.frequency_table("") == {}


def test_frequency_table_counts_code_points_not_bytes():
    ft = huff.frequency_table("日日本😀")
    assert ft == {"日": 2, "本": 1, "😀": 1}


@pytest.mark.parametrize("text", SAMPLES + [""])
def test_frequency_conservation(text):
    assert sum(huff.frequency_table(text).values()) == len(text)


def test_build_empty_table_raises():
    with pytest.raises(EmptyAlphabetError):
        huff.build_huffman_tree({})


def test_single_symbol_tree_is_one_leaf():
    tree = huff.build_huffman_tree({"a": 4})
    assert len(tree) == 1
    assert tree.root_node.is_leaf()
    assert huff.generate_huffman_codes(tree) == {"a": "0"}


@pytest.mark.parametrize("text", SAMPLES)
def test_internal_frequency_is_sum_of_children(text):
    ft = huff.frequency_table(text)
    tree = huff.build_huffman_tree(ft)
    for node in tree.nodes:
        if node.is_leaf():
            assert node.frequency == ft[node.symbol]
        else:
            assert node.frequency == tree.node(node.left).frequency + tree.node(node.right).frequency
    assert tree.root_node.frequency == len(text)
    assert tree.leaf_count() == len(ft)
    assert len(tree) == 2 * len(ft) - 1


def test_hello_codes(hello_tree):
    codes = huff.generate_huffman_codes(hello_tree)
    assert codes == {"e": "00", "h": "01", "o": "10", "l": "11"}
    assert all(len(codes["l"]) <= len(c) for c in codes.values())


@pytest.mark.parametrize("text", SAMPLES)
def test_codes_are_prefix_free(text):
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(huff.frequency_table(text)))
    assert len(codes) == len(set(text))
    for a, code_a in codes.items():
        assert code_a
        for b, code_b in codes.items():
            if a != b:
                assert not code_b.startswith(code_a)


@pytest.mark.parametrize("text", SAMPLES[2:])
def test_codes_fill_the_tree(text):
    # Kraft sum of a full binary tree is exactly 1
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(huff.frequency_table(text)))
    assert sum(2.0 ** -len(c) for c in codes.values()) == pytest.approx(1.0)


def test_more_frequent_symbols_never_get_longer_codes():
    ft = {"a": 50, "b": 20, "c": 10, "d": 10, "e": 5, "f": 5}
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(ft))
    for x in ft:
        for y in ft:
            if ft[x] > ft[y]:
                assert len(codes[x]) <= len(codes[y])


def test_tree_is_deterministic_regardless_of_table_order():
    ties = {"d": 1, "b": 1, "a": 1, "c": 1, "e": 2}
    reordered = dict(sorted(ties.items()))
    first = huff.generate_huffman_codes(huff.build_huffman_tree(ties))
    second = huff.generate_huffman_codes(huff.build_huffman_tree(reordered))
    third = huff.generate_huffman_codes(huff.build_huffman_tree(ties))
    assert first == second == third


def test_encode_hello(hello_tree):
    codes = huff.generate_huffman_codes(hello_tree)
    assert huff.huffman_encode("hello", codes) == "0100111110"


def test_encode_unknown_symbol(hello_tree):
    codes = huff.generate_huffman_codes(hello_tree)
    with pytest.raises(UnknownSymbolError) as exc:
        huff.huffman_encode("hex", codes)
    assert exc.value.symbol == "x"
    assert exc.value.position == 2


@pytest.mark.parametrize("text", SAMPLES)
def test_encode_decode_roundtrip(text):
    tree = huff.build_huffman_tree(huff.frequency_table(text))
    bits = huff.huffman_encode(text, huff.generate_huffman_codes(tree))
    assert huff.huffman_decode(bits, tree) == text


def test_single_symbol_encode_uses_one_bit_per_symbol():
    tree = huff.build_huffman_tree({"a": 4})
    bits = huff.huffman_encode("aaaa", huff.generate_huffman_codes(tree))
    assert bits == "0000"
    assert huff.huffman_decode(bits, tree) == "aaaa"


def test_decode_stops_mid_code_word(hello_tree):
    with pytest.raises(TruncatedStreamError) as exc:
        huff.huffman_decode("0100111", hello_tree)
    assert exc.value.bit_index == 7


def test_decode_padding_is_not_silently_accepted(hello_tree):
    # "hello" plus the 6 padding bits pack_bits would add
    with pytest.raises(TruncatedStreamError):
        huff.huffman_decode("0100111110" + "0", hello_tree)


def test_decode_single_symbol_tree_rejects_one_bit():
    tree = huff.build_huffman_tree({"a": 3})
    with pytest.raises(TruncatedStreamError):
        huff.huffman_decode("001", tree)


def test_decode_rejects_non_binary_characters(hello_tree):
    with pytest.raises(ValueError):
        huff.huffman_decode("01x1", hello_tree)


def test_decode_empty_bitstring(hello_tree):
    assert huff.huffman_decode("", hello_tree) == ""
