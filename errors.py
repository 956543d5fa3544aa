class HuffmanError(ValueError): # base class for every codec/container failure
    pass


class EmptyAlphabetError(HuffmanError):
    def __init__(self):
        super().__init__("cannot build a Huffman tree from an empty frequency table")


class UnknownSymbolError(HuffmanError):
    def __init__(self, symbol, position: int):
        self.symbol = symbol
        self.position = position
        super().__init__(f"symbol {symbol!r} at position {position} is not in the code table")


class TruncatedStreamError(HuffmanError):
    def __init__(self, message: str, bit_index: int):
        self.bit_index = bit_index
        super().__init__(f"{message} (at bit {bit_index})")


class CorruptContainerError(HuffmanError):
    pass
