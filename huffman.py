"""Static Huffman coding of byte strings.

A compressed unit is laid out MSB-first as:

    [trie, pre-order]  internal node = 0 <left> <right>, leaf = 1 <byte>
    [length]           32-bit unsigned count of original bytes
    [payload]          one code per original byte, in order
    [pad]              zero bits up to the next byte boundary

An empty input is written as a lone leaf for byte 0 with a length of 0.
"""

import sys
from collections import namedtuple
from heapq import heapify, heappop, heappush

from bitstring import Bits
from bitio import BitReader, BitWriter, UnderflowError, INT_BITS


ALPHABET_SIZE = 256
LENGTH_BITS = INT_BITS
# 256 distinct leaves can never sit deeper than this
MAX_TRIE_DEPTH = ALPHABET_SIZE - 1


class HuffmanError(Exception):
    pass


class CorruptTrieError(HuffmanError):
    """The serialized trie is malformed."""


class TruncatedTrieError(CorruptTrieError, UnderflowError):
    """The bitstream ended in the middle of the serialized trie."""


class EmptyInputError(HuffmanError, ValueError):
    """Compression of an empty input was refused."""


class TrailingDataError(HuffmanError):
    """Whole bytes remain after the last encoded symbol."""


Leaf = namedtuple('Leaf', ['symbol', 'freq'])
Internal = namedtuple('Internal', ['freq', 'left', 'right'])


def is_leaf(node):
    return isinstance(node, Leaf)


def count_frequencies(data):
    freq = [0] * ALPHABET_SIZE
    for b in data:
        freq[b] += 1
    return freq


def make_huffman_tree(freq):
    """Build the Huffman trie for a 256-slot frequency table.

    Heap entries are (freq, order, node). Leaves are ordered by byte value
    and merged nodes after every leaf in creation order, so equal
    frequencies always resolve the same way.
    """
    pq = [(f, s, Leaf(s, f)) for s, f in enumerate(freq) if f > 0]
    if not pq:
        raise EmptyInputError('cannot build a Huffman trie with no symbols')
    heapify(pq)
    order = ALPHABET_SIZE
    while len(pq) > 1:
        f1, _, left = heappop(pq)
        f2, _, right = heappop(pq)
        heappush(pq, (f1 + f2, order, Internal(f1 + f2, left, right)))
        order += 1
    return pq[0][2]


def make_encoding_dictionary(tree):
    """Map each byte in the trie to its code as a string of '0'/'1'.

    A trie that is a single leaf gives that byte the empty code.
    """
    def encode_node(node, code):
        if is_leaf(node):
            return {node.symbol: code}
        else:
            merged = {}
            merged.update(encode_node(node.left, code + '0'))
            merged.update(encode_node(node.right, code + '1'))
            return merged
    return encode_node(tree, '')


def serialize_huffman_tree(node, writer):
    if is_leaf(node):
        writer.write_bit(True)
        writer.write_byte(node.symbol)
    else:
        writer.write_bit(False)
        serialize_huffman_tree(node.left, writer)
        serialize_huffman_tree(node.right, writer)


def deserialize_huffman_tree(reader):
    seen = set()

    def read_node(depth):
        if depth > MAX_TRIE_DEPTH:
            raise CorruptTrieError(f'trie nests deeper than {MAX_TRIE_DEPTH} levels')
        try:
            is_leaf_bit = reader.read_bit()
            if is_leaf_bit:
                symbol = reader.read_byte()
        except UnderflowError as e:
            raise TruncatedTrieError(str(e)) from e
        if is_leaf_bit:
            if symbol in seen:
                raise CorruptTrieError(f'byte {symbol} appears in more than one leaf')
            seen.add(symbol)
            return Leaf(symbol, None)
        left = read_node(depth + 1)
        right = read_node(depth + 1)
        return Internal(None, left, right)

    return read_node(0)


def huffman_encode(data, allow_empty=True, verbose=False):
    if not data and not allow_empty:
        raise EmptyInputError('input is empty')
    if len(data) >= 2**LENGTH_BITS:
        raise ValueError(f'input of {len(data)} bytes does not fit a {LENGTH_BITS}-bit length')

    if data:
        tree = make_huffman_tree(count_frequencies(data))
    else:
        tree = Leaf(0, 0)
    dictionary = make_encoding_dictionary(tree)

    out = BitWriter()
    serialize_huffman_tree(tree, out)
    trie_bits = len(out)
    out.write_int(len(data))

    # A single-leaf trie has an empty code and no payload
    if not is_leaf(tree):
        codes = {s: Bits(bin=c) for s, c in dictionary.items()}
        for b in data:
            out.write_bits(codes[b])

    encoded = out.flush()
    if verbose:
        print(f'Symbols: {len(dictionary)}, trie: {trie_bits} bits', file=sys.stderr)
        print(f'Original size: {len(data)}', file=sys.stderr)
        print(f'Compressed size: {len(encoded)}', file=sys.stderr)
        if data:
            print(f'Compression ratio: {len(encoded) / len(data)}', file=sys.stderr)
    return encoded


def huffman_decode(data, verbose=False):
    bits = BitReader(data)
    tree = deserialize_huffman_tree(bits)
    length = bits.read_int()
    if is_leaf(tree):
        # a single-leaf trie carries no payload, only padding
        if bits.bits_remaining >= 8:
            raise TrailingDataError(f'{bits.bits_remaining} bits follow a single-symbol header')
        out = bytes([tree.symbol]) * length
    else:
        # every symbol of a multi-leaf trie costs at least one bit
        if length > bits.bits_remaining:
            raise UnderflowError(
                f'{length} symbols declared but only {bits.bits_remaining} bits remain')
        out = bytearray()
        for _ in range(length):
            node = tree
            while not is_leaf(node):
                node = node.right if bits.read_bit() else node.left
            out.append(node.symbol)
        if bits.bits_remaining >= 8:
            raise TrailingDataError(f'{bits.bits_remaining} bits left after {length} symbols')

    if verbose:
        print(f'Compressed size: {len(data)}', file=sys.stderr)
        print(f'Decoded size: {length}', file=sys.stderr)
        print(f'Unused pad bits: {bits.bits_remaining}', file=sys.stderr)
    return bytes(out)
