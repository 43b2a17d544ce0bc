"""Go tokenizer.

Splits Go source into tokens and applies the automatic semicolon
insertion rules of the Go language. Comments never reach the token
stream; they are recorded per line so the parser can look up doc
comments.
"""

import re
from dataclasses import dataclass, field

from go_openapi_gen.errors import GoSyntaxError

KEYWORDS = {
    "break", "case", "chan", "const", "continue", "default", "defer",
    "else", "fallthrough", "for", "func", "go", "goto", "if", "import",
    "interface", "map", "package", "range", "return", "select", "struct",
    "switch", "type", "var",
}

# Longest first so that the regex alternation prefers "<<=" over "<<".
OPERATORS = [
    "<<=", ">>=", "&^=", "...",
    "&&", "||", "<-", "++", "--", "==", "!=", "<=", ">=", ":=",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<", ">>", "&^",
    "+", "-", "*", "/", "%", "&", "|", "^", "<", ">", "=", "!", "~",
    "(", ")", "[", "]", "{", "}", ",", ";", ".", ":",
]

_TOKEN_RE = re.compile(
    r"""
    (?P<newline>\n)
  | (?P<space>[ \t\r\f]+)
  | (?P<line_comment>//[^\n]*)
  | (?P<block_comment>/\*.*?\*/)
  | (?P<raw_string>`[^`]*`)
  | (?P<string>"(?:[^"\\\n]|\\.)*")
  | (?P<char>'(?:[^'\\\n]|\\.[^'\n]*)')
  | (?P<imag>(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d[\d_]*)?i)
  | (?P<float>
        0[xX][0-9a-fA-F_]*\.?[0-9a-fA-F_]*[pP][+-]?\d[\d_]*
      | \d[\d_]*\.[\d_]*(?:[eE][+-]?\d[\d_]*)?
      | \d[\d_]*[eE][+-]?\d[\d_]*
      | \.\d[\d_]*(?:[eE][+-]?\d[\d_]*)?
    )
  | (?P<int>0[xX][0-9a-fA-F_]+|0[bB][01_]+|0[oO][0-7_]+|\d[\d_]*)
  | (?P<ident>[^\W\d]\w*)
  | (?P<op>"""
    + "|".join(re.escape(op) for op in OPERATORS)
    + r""")
    """,
    re.VERBOSE | re.DOTALL,
)

_LITERAL_KINDS = {
    "raw_string": "STRING",
    "string": "STRING",
    "char": "CHAR",
    "imag": "IMAG",
    "float": "FLOAT",
    "int": "INT",
}

# A newline after any of these ends the statement.
_SEMICOLON_TRIGGERS = {
    "IDENT", "INT", "FLOAT", "IMAG", "CHAR", "STRING",
    "break", "continue", "fallthrough", "return",
    "++", "--", ")", "]", "}",
}


@dataclass
class Token:
    kind: str  # IDENT / INT / FLOAT / IMAG / CHAR / STRING / EOF, or the keyword/operator itself
    value: str
    line: int


@dataclass
class TokenStream:
    """Tokens of one file plus the comment lines needed for doc lookup."""

    tokens: list[Token]
    comments: dict[int, str] = field(default_factory=dict)  # line -> text of a comment-only line

    def doc_comment(self, line: int) -> str:
        """Return the contiguous comment block that ends on the line above ``line``."""
        lines = []
        current = line - 1
        while current in self.comments:
            lines.append(self.comments[current])
            current -= 1
        return "\n".join(reversed(lines)).strip()


def tokenize(source: str, filename: str = "<source>") -> TokenStream:
    """Tokenize Go source, inserting semicolons where Go would."""
    tokens: list[Token] = []
    comments: dict[int, str] = {}
    line = 1
    line_has_code = False
    pos = 1 if source.startswith("\ufeff") else 0
    length = len(source)

    def last_triggers() -> bool:
        return bool(tokens) and tokens[-1].kind in _SEMICOLON_TRIGGERS and tokens[-1].value != "\n"

    while pos < length:
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            raise GoSyntaxError(f"unexpected character {source[pos]!r}", filename, line)
        kind = match.lastgroup
        text = match.group()
        pos = match.end()

        if kind == "newline":
            if last_triggers():
                tokens.append(Token(";", "\n", line))
            line += 1
            line_has_code = False
            continue
        if kind == "space":
            continue
        if kind == "line_comment":
            if not line_has_code:
                comments[line] = _strip_comment(text)
            continue
        if kind == "block_comment":
            newlines = text.count("\n")
            if newlines:
                if last_triggers():
                    tokens.append(Token(";", "\n", line))
                if not line_has_code:
                    for offset, part in enumerate(_strip_comment(text).splitlines()):
                        comments[line + offset] = part.strip()
                line += newlines
                line_has_code = False
            elif not line_has_code:
                comments[line] = _strip_comment(text)
            continue

        line_has_code = True
        if kind in _LITERAL_KINDS:
            tokens.append(Token(_LITERAL_KINDS[kind], text, line))
            line += text.count("\n")
        elif kind == "ident":
            tokens.append(Token(text if text in KEYWORDS else "IDENT", text, line))
        else:
            tokens.append(Token(text, text, line))

    if last_triggers():
        tokens.append(Token(";", "\n", line))
    tokens.append(Token("EOF", "", line))
    return TokenStream(tokens=tokens, comments=comments)


def _strip_comment(text: str) -> str:
    if text.startswith("//"):
        return text[2:].strip()
    return text[2:-2].strip()
