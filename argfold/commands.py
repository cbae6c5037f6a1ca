"""
Argfold command dispatch: route a parsed result to per-sub-command handlers.

Usage
    params, args = parse(sys.argv[1:], CONFIG)
    cmds(params, args)({
        "build": lambda params, args: build(args, **params),
        "watch": lambda params, args: watch(args, **params),
    }, lambda params, args: usage())

Behavior
- the first key of params (iteration order, i.e. the order in which parameters and
  sub-commands were first seen) that has a handler wins; the handler receives that
  key's value (the sub-command's nested params) and the positional arguments.
- when no key has a handler, the optional nomatch callback receives the full params
  and the positional arguments.
- the dispatcher returns whatever the invoked callback returns (None otherwise).
"""
import logging
from collections.abc import Mapping

from .utils import *

logger = logging.getLogger(__name__)


def cmds(params, args, /):
    """
    bind a parsed (params, args) pair and return its dispatcher.

    raises
    - TypeError: when params is not a mapping.
    """
    if not isinstance(params, Mapping):
        raise TypeError("cmds() first argument must be a mapping")

    @rename("dispatch")
    def dispatch(handlers, nomatch=Unset, /):
        if not isinstance(handlers, Mapping):
            raise TypeError("dispatch() first argument must be a mapping of handlers")
        if nomatch is not Unset and not callable(nomatch):
            raise TypeError("dispatch() second argument must be callable")

        for key, value in params.items():
            if key in handlers:
                logger.debug("dispatching %r", key)
                return handlers[key](value, args)

        if nomatch is not Unset:
            logger.debug("no handler matched, falling back")
            return nomatch(params, args)
        return None

    return dispatch


__all__ = (
    "cmds",
)
