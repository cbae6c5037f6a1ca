r"""
Argfold parse engine: fold an argument vector into params and positional arguments.

What this module provides
- Parser: a reusable parser bound to a configuration and runtime options.
  • config: any spelling understood by argfold.scopes (mapping, sequence of
    entries, generator, callback), or Unset for "no parameters at all".
  • rules: token grammar (argfold.tokens.RULES by default).
  • shell/fancy/colorful: how faults surface (raise, or render with rich and exit).
- parse(argv, config): one-shot convenience over Parser(config).parse(argv).

The loop (single Scanning state)
- VALUE token: the active scope may claim it as a sub-command; the engine then
  attaches a fresh {} under that name and switches to the nested scope for good
  (there is no return to the parent). Unclaimed values become positional arguments.
- LONG/SHORT/FLAG token: resolved (aliases included) against the active scope and
  handed to its reducer together with the rest of the stream and the key's prior
  state; the reducer decides how many tokens to take.
- KEY token reaching the loop: nothing claimed it, which is an error.
- input exhausted: return (params, positional arguments).

Failure messages (str(fault))
- "unknown parameter: --name" / "unknown parameter: -n" (plus ":key" when given)
- "<reason> for: --name" where reason is the reducer's (e.g. "expected value")
- "unexpected key for: --name:key"
- "unknown sub-command: text"

Quick start
    >>> from argfold import parse, Value, Flag
    >>> parse(["-v", "--format", "esm", "index.ts"], {"format": Value(), "v": Flag()})
    ({'v': True, 'format': 'esm'}, ['index.ts'])
"""
import difflib
import logging
import sys

from .combinators import Rejected
from .faults import *
from .scopes import Scope
from .tokens import RULES, Input, TokenKind, tokenize
from .utils import *

logger = logging.getLogger(__name__)


def _render(token, key=Unset, /):
    """
    spell a flag token back the way the user wrote it ('--name', '-n', plus ':key').
    """
    dashes = "--" if token.kind == TokenKind.LONG else "-"
    return dashes + token.text + ("" if key is Unset else ":" + key)


def _sanitize_rules(rules):
    rules = tuple(rules)
    for rule in rules:
        if (
            not isinstance(rule, tuple) or
            len(rule) != 2 or
            not hasattr(rule[0], "fullmatch") or
            not callable(rule[1])
        ):
            raise TypeError("parser 'rules' must be (pattern, emitter) pairs")
    return rules


class Parser:
    """
    Reusable argument parser.

    Parameters
    - config: Unset | Mapping | Sequence | generator (function) | Callable
      the parameter configuration (see argfold.scopes). A generator object is
      single-use; pass the generator function to parse more than once.
    - rules: token grammar table (see argfold.tokens.RULES).
    - prog: program name for rendered faults (defaults to __main__.__prog__ or
      the basename of sys.argv[0]).
    - shell: when True, faults are printed through rich and the process exits with
      status 1; otherwise they are raised.
    - fancy: render faults in a rich panel (shell mode).
    - colorful: style rendered faults (shell mode).
    """

    def __init__(
            self,
            config=Unset,
            /,
            *,
            rules=RULES,
            prog=Unset,
            shell=False,
            fancy=False,
            colorful=True,
    ):
        self.config = config
        self.rules = _sanitize_rules(rules)
        self.prog = coalesce(prog)
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)

    def trigger(self, fault, /, **options):
        """
        surface a fault with this parser's runtime options (never returns).
        """
        logger.debug("parse failed: %s", fault)
        trigger(
            fault,
            **options,
            prog=self.prog,
            shell=self.shell,
            fancy=self.fancy,
            colorful=self.colorful,
        )

    def parse(self, argv=Unset, /):
        """
        Parse an argument vector.

        Parameters
        - argv: Unset | Iterable[str]
          • Unset: read sys.argv[1:].
          • Iterable[str]: the raw arguments (no shell splitting is performed).

        Returns
        - (params, args): the nested params dict and the positional arguments.

        Raises (non-shell mode)
        - UnknownParameterError, UnknownSubCommandError, CombinatorMismatchError.
        - TypeError: when argv is not an iterable of strings.
        """
        if argv is Unset:
            argv = sys.argv[1:]

        input = Input(tokenize(argv, self.rules))
        logger.debug("parsing %d token(s)", len(input))

        params = root = {}
        args = []
        scope = Scope.of(self.config)
        scopes = [scope]
        previous = Unset

        try:
            while input:
                token = input.peek()

                if token.kind == TokenKind.VALUE:
                    input = input.advance()
                    try:
                        nested = scope.descend(token.text)
                    except LookupError:
                        self.trigger(UnknownSubCommandError(
                            "unknown sub-command: %s" % token.text,
                            title="unknown sub-command",
                            code=FaultCode.UNKNOWN_SUBCOMMAND,
                            token=token.text,
                            path=scope.path,
                            hint="check the spelling of %r" % token.text,
                        ))
                    if nested is None:
                        logger.debug("positional argument %r", token.text)
                        args.append(token.text)
                        continue
                    logger.debug("descending into sub-command %r", token.text)
                    params[token.text] = {}
                    params = params[token.text]
                    scope = nested
                    scopes.append(scope)

                elif token.kind in (TokenKind.LONG, TokenKind.SHORT, TokenKind.FLAG):
                    rest = input.advance()
                    following = rest.peek()
                    key = following.text if following is not None and following.kind == TokenKind.KEY else Unset
                    previous = _render(token, key)

                    try:
                        canonical, reduce = scope.lookup(token.text)
                    except KeyError:
                        suggestions = difflib.get_close_matches(token.text, scope.parameters, 1)
                        self.trigger(UnknownParameterError(
                            "unknown parameter: %s" % previous,
                            title="unknown parameter",
                            code=FaultCode.UNKNOWN_PARAMETER,
                            token=previous,
                            path=scope.path,
                            suggestions=suggestions,
                            hint="did you mean %r?" % _render(token._replace(text=suggestions[0])) if suggestions else "",
                        ))

                    result = reduce(rest, params.get(canonical, Unset))
                    if isinstance(result, Rejected):
                        self.trigger(CombinatorMismatchError(
                            "%s for: %s" % (result.reason, previous),
                            title=result.reason,
                            code=FaultCode.of(result.reason),
                            token=previous,
                            reason=result.reason,
                            path=scope.path,
                        ))
                    input, params[canonical] = result

                else:
                    self.trigger(CombinatorMismatchError(
                        "unexpected key for: %s" % coalesce(previous, ":" + token.text),
                        title="unexpected key",
                        code=FaultCode.UNEXPECTED_KEY,
                        token=token.text,
                        reason="unexpected key",
                        path=scope.path,
                        hint="remove ':%s' or declare the parameter with Key()" % token.text,
                    ))
        finally:
            for scope in scopes:
                scope.close()

        return root, args

    def __call__(self, argv=Unset, /):
        return self.parse(argv)

    def __repr__(self):
        return "Parser(%r)" % (self.config,)


def parse(argv=Unset, config=Unset, /, **options):
    """
    Parse argv against config in one call; see Parser for the options.

    Omitting config is the same as an empty one: values become positional
    arguments and any flag fails as unknown.
    """
    return Parser(config, **options).parse(argv)


__all__ = (
    "Parser",
    "parse",
)
