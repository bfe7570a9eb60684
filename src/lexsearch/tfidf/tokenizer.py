"""
Tokenizer for TF-IDF text processing.

Tokenization rules (applied left to right until the text is exhausted):
1. Skip whitespace
2. Alphabetic start: take the longest alphanumeric run, upper-case it
3. Numeric start: take the longest numeric run, keep it verbatim
4. Anything else: a single character is its own term

No stemming and no stopword removal: "Running" and "RUN" are different terms.
Upper-casing touches ASCII letters only, so a term never changes length.
"""

import string
from typing import Iterator

_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)


def tokenize(text: str) -> Iterator[str]:
    """
    Lazily split text into normalized terms.

    Args:
        text: Raw plain text (already extracted from markup)

    Yields:
        Normalized terms in input order

    Examples:
        >>> list(tokenize("glBindBuffer(GL_ARRAY_BUFFER, 0);"))
        ['GLBINDBUFFER', '(', 'GL', '_', 'ARRAY', '_', 'BUFFER', ',', '0', ')', ';']

        >>> list(tokenize("OpenGL 4.5"))
        ['OPENGL', '4', '.', '5']

        >>> list(tokenize("   "))
        []
    """
    n = len(text)
    pos = 0

    while True:
        while pos < n and text[pos].isspace():
            pos += 1

        if pos >= n:
            return

        start = pos
        char = text[pos]

        if char.isalpha():
            while pos < n and text[pos].isalnum():
                pos += 1
            yield text[start:pos].translate(_ASCII_UPPER)
        elif char.isnumeric():
            while pos < n and text[pos].isnumeric():
                pos += 1
            yield text[start:pos]
        else:
            pos += 1
            yield char


class Lexer:
    """
    Restartable term sequence over a fixed text.

    Every iteration starts again from the first character; a single iterator
    is consumed once and cannot be rewound.
    """

    def __init__(self, content: str):
        self.content = content

    def __iter__(self) -> Iterator[str]:
        return tokenize(self.content)

    def __repr__(self) -> str:
        preview = self.content[:30]
        return f"Lexer({preview!r}{'...' if len(self.content) > 30 else ''})"
