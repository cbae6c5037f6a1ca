r"""
Argfold parameter combinators.

Overview
- Every factory here returns a reducer with the contract

      reduce(input, state=Unset, /) -> Consumed(input, state) | Rejected(reason)

  where `input` is an argfold.tokens.Input positioned right after the flag that
  selected the parameter, and `state` is the parameter's prior state in the active
  scope (Unset on first sight).
- Consumed carries the remaining stream and the new state; Rejected carries a short
  reason ("expected value", "expected one-of", "missing key"). A rejection never
  consumes input: the caller keeps its own stream reference.

Factories
- Value(accumulate=True)          one VALUE token; repeats promote to a list.
- Flag()                          no tokens; True, then 2, 3, ...
- OneOf(*patterns, accumulate=True)
                                  like Value(), only if a str pattern equals the text
                                  or a compiled regex pattern searches it.
- Key(inner=Unset)                one KEY token; dict of key → counter or inner state.
- KeyValue(accumulate=True)       one KEY then one VALUE; dict of key → value(s).
- Maybe(inner)                    inner's state, or the sentinel True when inner
                                  cannot (or did not) consume anything.
- Many(inner)                     list of inner's results, one per occurrence.

State conventions
- The sentinel True left by Maybe() counts as "no state" for value-bearing reducers,
  so '--format --format esm' under Maybe(Value()) settles on 'esm'.
- Reducers never mutate the prior state; lists and dicts are copied.

Quick example
    >>> from argfold.tokens import Input, tokenize
    >>> Value()(Input(tokenize(["esm"])))
    Consumed(input=Input(()), state='esm')
"""
import re
from collections import namedtuple

from .tokens import TokenKind
from .utils import *

Consumed = namedtuple("Consumed", ("input", "state"))
Consumed.__doc__ = "successful reduction: the remaining input and the new state"

Rejected = namedtuple("Rejected", ("reason",))
Rejected.__doc__ = "failed reduction: nothing was consumed"


def _describe(reducer):
    return getattr(reducer, "__name__", type(reducer).__name__)


def _empty(state):
    return state is Unset or state is True


def _bump(state):
    # Unset → True → 2 → 3 ...
    if _empty(state):
        return True if state is Unset else 2
    return state + 1


def _accumulate(state, value, accumulate):
    if _empty(state) or not accumulate:
        return value
    if isinstance(state, list):
        return [*state, value]
    return [state, value]


def _sanitize_inner(name, inner):
    if not callable(inner):
        raise TypeError(f"{name}() argument must be a callable reducer")


def Value(*, accumulate=True):
    """
    consume exactly one VALUE token.

    state
    - first occurrence: the token text.
    - later occurrences: a list of texts in input order (accumulate=True), or the
      latest text (accumulate=False; use Many() for explicit lists).
    """
    @rename("Value")
    def reduce(input, state=Unset, /):
        if (match := input.expect(TokenKind.VALUE)) is None:
            return Rejected("expected value")
        token, rest = match
        return Consumed(rest, _accumulate(state, token.text, accumulate))

    return reduce


def Flag():
    """
    consume nothing; count occurrences.

    state: True on the first occurrence, then 2, 3, ... (so '-vvv' gives 3).
    """
    @rename("Flag")
    def reduce(input, state=Unset, /):
        return Consumed(input, _bump(state))

    return reduce


def OneOf(*patterns, accumulate=True):
    """
    consume one VALUE token whose text matches at least one pattern.

    patterns
    - str: exact, case-sensitive equality with the whole text.
    - re.Pattern: matched with search(), so the pattern's own anchors and flags
      decide ('^debug$' with re.I accepts 'dEbUg'; 'debug' alone accepts 'xdebugx').

    state: as Value().

    raises
    - TypeError: when no pattern is given or a pattern is neither str nor re.Pattern.
    """
    if not patterns:
        raise TypeError("OneOf() must specify at least one pattern")
    for pattern in patterns:
        if not isinstance(pattern, str | re.Pattern):
            raise TypeError("OneOf() patterns must be strings or compiled regular expressions")

    def matches(text):
        for pattern in patterns:
            if isinstance(pattern, str):
                if pattern == text:
                    return True
            elif pattern.search(text) is not None:
                return True
        return False

    @rename("OneOf")
    def reduce(input, state=Unset, /):
        if (match := input.expect(TokenKind.VALUE)) is None:
            return Rejected("expected value")
        token, rest = match
        if not matches(token.text):
            return Rejected("expected one-of")
        return Consumed(rest, _accumulate(state, token.text, accumulate))

    reduce.patterns = patterns
    return reduce


def Key(inner=Unset, /):
    """
    consume one KEY token ('--external:fs' → key 'fs'), then optionally delegate.

    state: a dict keyed by the key text.
    - Key():       each key counts its occurrences (True, 2, 3, ...).
    - Key(inner):  each key holds inner's state; inner's rejection propagates.
    """
    if inner is not Unset:
        _sanitize_inner("Key", inner)

    @rename("Key" if inner is Unset else "Key(%s)" % _describe(inner))
    def reduce(input, state=Unset, /):
        if (match := input.expect(TokenKind.KEY)) is None:
            return Rejected("missing key")
        token, rest = match
        mapping = {} if _empty(state) else dict(state)
        if inner is Unset:
            mapping[token.text] = _bump(mapping.get(token.text, Unset))
            return Consumed(rest, mapping)
        result = inner(rest, mapping.get(token.text, Unset))
        if isinstance(result, Rejected):
            return result
        mapping[token.text] = result.state
        return Consumed(result.input, mapping)

    return reduce


def KeyValue(*, accumulate=True):
    """
    consume one KEY token then one VALUE token ('--define:DEBUG true').

    state: dict of key → text, or key → list of texts when the same key repeats
    (accumulate=True).
    """
    return rename(Key(Value(accumulate=accumulate)), "KeyValue")


def Maybe(inner, /):
    """
    speculatively apply inner; never rejects.

    behavior
    - input exhausted or next token names a parameter: the sentinel True, without
      invoking inner.
    - otherwise inner runs with the prior state; on rejection the input is left
      as it was and the state becomes the sentinel True.
    """
    _sanitize_inner("Maybe", inner)

    @rename("Maybe(%s)" % _describe(inner))
    def reduce(input, state=Unset, /):
        token = input.peek()
        if token is None or token.kind.named:
            return Consumed(input, True)
        result = inner(input, state)
        if isinstance(result, Rejected):
            return Consumed(input, True)
        return result

    return reduce


def Many(inner, /):
    """
    apply inner once per occurrence and collect the results into a list.

    inner always starts from Unset; its rejection propagates unchanged.
    """
    _sanitize_inner("Many", inner)

    @rename("Many(%s)" % _describe(inner))
    def reduce(input, state=Unset, /):
        result = inner(input, Unset)
        if isinstance(result, Rejected):
            return result
        items = state if isinstance(state, list) else []
        return Consumed(result.input, [*items, result.state])

    return reduce


__all__ = (
    # Result variants
    "Consumed",
    "Rejected",

    # Factories
    "Value",
    "Flag",
    "OneOf",
    "Key",
    "KeyValue",
    "Maybe",
    "Many",
)
