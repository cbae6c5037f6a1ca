r"""
Argfold tokenizer: classify raw argv strings into typed tokens.

Overview
- TokenKind: the five token classes the engine understands.
  • VALUE: bare word, or the right-hand side of '=' (inline value).
  • LONG:  '--name' (camel-cased: '--no-op' → 'noOp').
  • SHORT: '-n'.
  • FLAG:  one character of a clustered short group ('-vvv' → v, v, v).
  • KEY:   the ':suffix' segment attached to a long/short name (without the colon).
- Token: immutable (kind, text) pair.
- RULES: ordered (pattern, emitter) table; the first pattern that full-matches a raw
  string decides which tokens it yields. Anything unmatched is a single VALUE.
- tokenize(argv, rules=RULES): flatten a whole argument vector into tokens.
- Input: immutable, front-consumable token stream handed to combinators.

Rules (priority order)
    --name[:key][=value]  → LONG(name) [KEY(key)] [VALUE(value)]
    -xy...                → FLAG(x) FLAG(y) ...
    -x[:key][=value]      → SHORT(x) [KEY(key)] [VALUE(value)]
    anything else         → VALUE(original)

Notes
- Empty captures are dropped: '--format=' yields LONG('format') alone.
- Emitted tokens are never re-scanned: '--define=--x' yields VALUE('--x').
- Patterns are compiled once at import and never mutated, so tokenize() is a pure
  function safe to share across parse calls.

Quick example
    >>> tokenize(["--define:DEBUG=true", "-vv", "index.ts"])
    (Token(kind=<TokenKind.LONG: 1>, text='define'), Token(kind=<TokenKind.KEY: 4>, text='DEBUG'), ...)
"""
import re
from collections import namedtuple
from collections.abc import Iterable
from enum import IntEnum


class TokenKind(IntEnum):
    """
    token classes produced by the tokenizer.

    VALUE is the only kind that can become a positional argument or a sub-command
    selector; LONG, SHORT and FLAG name a parameter; KEY qualifies the name right
    before it.
    """
    VALUE = 0
    LONG  = 1
    SHORT = 2
    FLAG  = 3
    KEY   = 4

    @property
    def named(self):
        """
        whether tokens of this kind name a parameter (LONG, SHORT or FLAG).
        """
        return self in (TokenKind.LONG, TokenKind.SHORT, TokenKind.FLAG)


Token = namedtuple("Token", ("kind", "text"))
Token.__doc__ = "a classified fragment derived from one raw argument string"


def camelize(name, /):
    """
    fold kebab-case into camelCase: every '-x' becomes 'X' ('no-op' → 'noOp').
    """
    return re.sub(r"-(.)", lambda match: match[1].upper(), name)


def _tokens(*pairs):
    # Empty captures (None or "") do not produce tokens.
    return [Token(kind, text) for kind, text in pairs if text]


def _long(name, key, value):
    return _tokens((TokenKind.LONG, camelize(name)), (TokenKind.KEY, key), (TokenKind.VALUE, value))


def _cluster(characters):
    return [Token(TokenKind.FLAG, character) for character in characters]


def _short(name, key, value):
    return _tokens((TokenKind.SHORT, name), (TokenKind.KEY, key), (TokenKind.VALUE, value))


RULES = (
    (re.compile(r"--([a-zA-Z][a-zA-Z0-9_-]*)(?::([^=]*))?(?:=(.*))?", re.DOTALL), _long),
    (re.compile(r"-([a-zA-Z0-9_$%]{2,})"), _cluster),
    (re.compile(r"-([a-zA-Z0-9_$%])(?::([^=]*))?(?:=(.*))?", re.DOTALL), _short),
)
"""
default token grammar (esbuild-style flags); see the module docstring.

each entry is (compiled pattern, emitter); the emitter receives the pattern's
groups positionally and returns a list of tokens.
"""


def classify(argument, /, rules=RULES):
    """
    convert one raw string into zero or more tokens, in order of appearance.

    parameters
    - argument: str
      one element of the argument vector.
    - rules: Iterable[(re.Pattern, Callable[..., list[Token]])]
      grammar table; the first full match wins.

    returns
    - list[Token]; a single VALUE carrying the original string when no rule matches.
    """
    for pattern, emitter in rules:
        if match := pattern.fullmatch(argument):
            return emitter(*match.groups())
    return [Token(TokenKind.VALUE, argument)]


def tokenize(argv, /, rules=RULES):
    """
    flatten an argument vector into a single ordered tuple of tokens.

    raises
    - TypeError: when argv is not an iterable of strings.
    """
    if isinstance(argv, str) or not isinstance(argv, Iterable):
        raise TypeError("tokenize() argument must be an iterable of strings")

    tokens = []
    for argument in argv:
        if not isinstance(argument, str):
            raise TypeError("tokenize() argument must be an iterable of strings")
        tokens.extend(classify(argument, rules))
    return tuple(tokens)


class Input:
    """
    Immutable, front-consumable sequence of tokens.

    Combinators never mutate an Input: consuming returns a new Input positioned
    after the consumed tokens, so a rejected attempt leaves the caller's stream
    untouched and rolling back is simply keeping the old reference.

    Operations
    - peek():         next token, or None when exhausted.
    - expect(kind):   (token, rest) when the next token has that kind, else None.
    - advance(n=1):   the stream without its first n tokens.
    - len()/bool():   remaining token count / whether any token remains.
    """
    __slots__ = ("_tokens", "_index")

    def __init__(self, tokens=(), /, index=0):
        self._tokens = tuple(tokens)
        self._index = index

    def peek(self):
        try:
            return self._tokens[self._index]
        except IndexError:
            return None

    def expect(self, kind, /):
        token = self.peek()
        if token is None or token.kind != kind:
            return None
        return token, self.advance()

    def advance(self, count=1, /):
        return Input(self._tokens, index=min(self._index + count, len(self._tokens)))

    def __len__(self):
        return len(self._tokens) - self._index

    def __bool__(self):
        return self._index < len(self._tokens)

    def __iter__(self):
        return iter(self._tokens[self._index:])

    def __eq__(self, other):
        if not isinstance(other, Input):
            return NotImplemented
        return tuple(self) == tuple(other)

    def __hash__(self):
        return hash(tuple(self))

    def __repr__(self):
        return "Input(%r)" % (tuple(self),)

    def __rich_repr__(self):
        yield from self


__all__ = (
    "TokenKind",
    "Token",
    "RULES",
    "camelize",
    "classify",
    "tokenize",
    "Input",
)
