class HuffmanError(ValueError): # base for every data error raised by the codec
    pass


class FormatError(HuffmanError): # header or container does not follow the grammar
    pass


class DuplicateCodeError(HuffmanError): # two leaves produced the same code word or symbol
    pass


class EmptyInputError(HuffmanError): # tree requested for a table with no symbols
    pass


class TruncatedStreamError(HuffmanError): # bit source ended in the middle of a code word
    pass
