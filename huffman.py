import heapq
import logging
from typing import Dict, List, Optional

from errors import EmptyAlphabetError, TruncatedStreamError, UnknownSymbolError

logger = logging.getLogger(__name__)

NO_CHILD = -1


class HuffmanNode: # Node for Huffman tree, children are indices into HuffmanTree.nodes
    __slots__ = ("symbol", "frequency", "left", "right")

    def __init__(self, symbol: Optional[str], frequency: int, left: int = NO_CHILD, right: int = NO_CHILD):
        self.symbol = symbol    # single character or None
        self.frequency = frequency
        self.left = left
        self.right = right

    def is_leaf(self) -> bool:
        return self.left == NO_CHILD and self.right == NO_CHILD

    def __repr__(self):
        if self.is_leaf():
            return f"HuffmanNode({self.symbol!r}, {self.frequency})"
        return f"HuffmanNode(None, {self.frequency}, left={self.left}, right={self.right})"


class HuffmanTree:
    """
    Arena of HuffmanNode objects. Leaves come first (ascending code point),
    merged nodes follow in creation order, so the root is always the last node.
    """

    def __init__(self, nodes: List[HuffmanNode], root: int):
        self.nodes = nodes
        self.root = root

    def __len__(self):
        return len(self.nodes)

    def node(self, index: int) -> HuffmanNode:
        return self.nodes[index]

    @property
    def root_node(self) -> HuffmanNode:
        return self.nodes[self.root]

    def leaf_count(self) -> int:
        return sum(1 for n in self.nodes if n.is_leaf())


def frequency_table(text: str) -> Dict[str, int]: # symbol -> occurrence count
    ft: Dict[str, int] = {}
    for ch in text:
        ft[ch] = ft.get(ch, 0) + 1
    return ft


def build_huffman_tree(table: Dict[str, int]) -> HuffmanTree:
    """
    Merge the two lowest nodes until one remains.

    Queue entries are (frequency, sequence, index). Leaves are numbered in
    ascending code point order and each merged node takes the next sequence
    number, so ties always resolve the same way for a given table. The first
    node popped becomes the left child.
    """
    if not table:
        raise EmptyAlphabetError()

    nodes: List[HuffmanNode] = []
    priority_queue = []
    for symbol in sorted(table):
        index = len(nodes)
        nodes.append(HuffmanNode(symbol, table[symbol]))
        priority_queue.append((table[symbol], index, index))
    heapq.heapify(priority_queue)

    sequence = len(nodes)
    while len(priority_queue) > 1:
        left_freq, _, left = heapq.heappop(priority_queue)
        right_freq, _, right = heapq.heappop(priority_queue)
        index = len(nodes)
        nodes.append(HuffmanNode(None, left_freq + right_freq, left, right))
        heapq.heappush(priority_queue, (left_freq + right_freq, sequence, index))
        sequence += 1

    root = priority_queue[0][2]
    logger.debug("built Huffman tree: %d symbols, %d nodes", len(table), len(nodes))
    return HuffmanTree(nodes, root)


def generate_huffman_codes(tree: HuffmanTree) -> Dict[str, str]: # symbol -> bitstring
    root = tree.root_node
    if root.is_leaf():
        # A lone symbol still needs one bit per occurrence
        return {root.symbol: "0"}

    codes: Dict[str, str] = {}
    stack = [(tree.root, "")]
    while stack:
        index, current_code = stack.pop()
        node = tree.nodes[index]
        if node.is_leaf():
            codes[node.symbol] = current_code
            continue
        # right pushed first so the left subtree is visited first
        stack.append((node.right, current_code + "1"))
        stack.append((node.left, current_code + "0"))
    return codes


def huffman_encode(text: str, code_map: Dict[str, str]) -> str:
    pieces = []
    for position, ch in enumerate(text):
        code = code_map.get(ch)
        if code is None:
            raise UnknownSymbolError(ch, position)
        pieces.append(code)
    return "".join(pieces)


def huffman_decode(bitstring: str, tree: HuffmanTree) -> str:
    nodes = tree.nodes
    root = nodes[tree.root]
    decoded = []

    if root.is_leaf():
        for bit_index, bit in enumerate(bitstring):
            if bit == "0":
                decoded.append(root.symbol)
            elif bit == "1":
                raise TruncatedStreamError("bit '1' does not match a single-symbol tree", bit_index)
            else:
                raise ValueError(f"invalid bit {bit!r} at position {bit_index}")
        return "".join(decoded)

    node = root
    for bit_index, bit in enumerate(bitstring):
        if bit == "0":
            node = nodes[node.left]
        elif bit == "1":
            node = nodes[node.right]
        else:
            raise ValueError(f"invalid bit {bit!r} at position {bit_index}")

        if node.is_leaf(): # reached a leaf
            decoded.append(node.symbol)
            node = root

    if node is not root:
        raise TruncatedStreamError("bitstream ended inside a code word", len(bitstring))
    return "".join(decoded)
