r"""
Argfold scopes: resolve a parse configuration into lookups and sub-command descent.

Configuration spellings
- mapping:   {"format": Value(), "f": "format", "build": {"level": OneOf("debug")}}
- sequence:  [(("format", "f"), Value()), ("build", [("level", OneOf("debug"))])]
             (the first name of a tuple is canonical, the others are aliases)
- generator: a generator function (or generator object) that first yields the root
             config, then receives each candidate sub-command text via send() and
             yields that sub-command's config:

                 def config():
                     command = yield {"verbose": Flag(), "v": "verbose"}
                     yield {"build": BUILD, "watch": WATCH}[command]

             yielding None or exhaustion means "not a sub-command" (the text stays
             positional; only exhaustion stops further sends); a
             LookupError raised inside rejects the text as an unknown sub-command.
- callback:  any other callable, called as callback() for the root config and as
             callback(*path) for each candidate sub-command path ("build",
             "build", "x", ...); None means "not a sub-command", LookupError rejects.

Entries
- static entries are resolved once, when the scope is entered, into tagged variants:
  • CombinatorEntry(combinator): a parameter reducer.
  • NestedScope(config):         a sub-command (any config spelling but callback).
  • Alias(target):               an indirection to a canonical combinator entry.

Validation (at scope entry)
- TypeError: malformed entries (non-string names, unsupported values).
- ValueError: empty or duplicated names, aliases to missing or non-combinator entries.
"""
import inspect
import logging
from collections import namedtuple
from collections.abc import Mapping, Sequence

from .utils import *

logger = logging.getLogger(__name__)

CombinatorEntry = namedtuple("CombinatorEntry", ("combinator",))
NestedScope = namedtuple("NestedScope", ("config",))
Alias = namedtuple("Alias", ("target",))


def _is_config(value):
    return (
        isinstance(value, Mapping) or
        isinstance(value, Sequence) and not isinstance(value, str) or
        inspect.isgeneratorfunction(value) or
        inspect.isgenerator(value)
    )


def _classify(value):
    if isinstance(value, str):
        return Alias(value)
    if _is_config(value):
        return NestedScope(value)
    if callable(value):
        return CombinatorEntry(value)
    raise TypeError("config values must be reducers, alias strings, or nested configs")


def _pairs(config):
    if isinstance(config, Mapping):
        for name, value in config.items():
            yield (name,), value
        return

    for item in config:
        if isinstance(item, str) or not isinstance(item, Sequence) or len(item) != 2:
            raise TypeError("config entries must be (names, value) pairs")
        names, value = item
        if isinstance(names, str):
            names = (names,)
        elif not isinstance(names, Sequence) or not names:
            raise TypeError("config entry names must be a string or a non-empty sequence of strings")
        yield tuple(names), value


def _resolve_entries(config):
    """
    Internal: turn a static config into {name: entry}, validating as it goes.
    """
    entries = {}
    for names, value in _pairs(config):
        entry = _classify(value)
        if len(names) > 1 and not isinstance(entry, CombinatorEntry):
            raise ValueError("only parameters can declare aliases")
        canonical = names[0]
        for index, name in enumerate(names):
            if not isinstance(name, str):
                raise TypeError("config names must be strings")
            if not name:
                raise ValueError("config names cannot be empty-strings")
            if name in entries:
                raise ValueError("config names cannot contain duplicates (%r)" % name)
            entries[name] = entry if index == 0 else Alias(canonical)

    for name, entry in entries.items():
        if isinstance(entry, Alias):
            if not isinstance(entries.get(entry.target), CombinatorEntry):
                raise ValueError("alias %r must target a parameter of the same scope" % name)
    return entries


class Scope:
    """
    Static scope: a fixed set of parameters and sub-commands.

    Attributes
    - path: tuple of sub-command names leading to this scope (empty at the root).
    - names: every name (canonical, alias, sub-command) known by this scope.
    - parameters: the names that lookup() can resolve (canonical and alias).

    Operations
    - lookup(name) -> (canonical, combinator); KeyError when unknown or when the
      name is a sub-command.
    - descend(text) -> Scope | None; None when text is not a sub-command here.
    - close(): release dynamic resources (no-op for static scopes).
    - Scope.of(config, path=()): build the right scope kind for a config.
    """
    __slots__ = ("_entries", "path")

    def __init__(self, config=Unset, /, path=()):
        if config is Unset or config is None:
            config = {}
        self._entries = _resolve_entries(config)
        self.path = tuple(path)

    @classmethod
    def of(cls, config=Unset, /, path=()):
        if config is Unset or config is None:
            return Scope({}, path)
        if inspect.isgeneratorfunction(config):
            config = config()
        if inspect.isgenerator(config):
            return GeneratorScope.start(config, path)
        if isinstance(config, Mapping) or isinstance(config, Sequence) and not isinstance(config, str):
            return Scope(config, path)
        if callable(config):
            return CallbackScope(config, config(*path), path)
        raise TypeError("config must be a mapping, a sequence of entries, a generator, or a callable")

    @property
    def names(self):
        return tuple(self._entries)

    @property
    def parameters(self):
        return tuple(name for name, entry in self._entries.items() if not isinstance(entry, NestedScope))

    def lookup(self, name, /):
        entry = self._entries[name]
        if isinstance(entry, Alias):
            name, entry = entry.target, self._entries[entry.target]
        if not isinstance(entry, CombinatorEntry):
            raise KeyError(name)
        return name, entry.combinator

    def descend(self, text, /):
        entry = self._entries.get(text)
        if isinstance(entry, NestedScope):
            return Scope.of(entry.config, (*self.path, text))
        return None

    def close(self):
        pass

    def __repr__(self):
        return "%s(path=%r, names=%r)" % (type(self).__name__, self.path, self.names)

    def __rich_repr__(self):
        yield "path", self.path
        yield "names", self.names


class GeneratorScope(Scope):
    """
    Dynamic scope driven by a cooperative generator (see module docstring).

    The generator is shared by a scope and all scopes descended from it; once it
    is exhausted no further text is sent into it.
    """
    __slots__ = ("_generator",)

    def __init__(self, generator, config, /, path=()):
        super().__init__(config, path)
        self._generator = generator

    @classmethod
    def start(cls, generator, /, path=()):
        try:
            config = next(generator)
        except StopIteration:
            return cls(None, {}, path)
        return cls(generator, config, path)

    def descend(self, text, /):
        if (nested := super().descend(text)) is not None:
            return nested
        if self._generator is None:
            return None
        logger.debug("sending %r into the sub-command generator", text)
        try:
            config = self._generator.send(text)
        except StopIteration:
            self._generator = None
            return None
        if config is None:
            return None
        return GeneratorScope(self._generator, config, (*self.path, text))

    def close(self):
        if self._generator is not None:
            self._generator.close()


class CallbackScope(Scope):
    """
    Dynamic scope driven by a next-scope callback (see module docstring).
    """
    __slots__ = ("_callback",)

    def __init__(self, callback, config, /, path=()):
        super().__init__(config, path)
        self._callback = callback

    def descend(self, text, /):
        if (nested := super().descend(text)) is not None:
            return nested
        path = (*self.path, text)
        if (config := self._callback(*path)) is None:
            return None
        return CallbackScope(self._callback, config, path)


__all__ = (
    "CombinatorEntry",
    "NestedScope",
    "Alias",
    "Scope",
    "GeneratorScope",
    "CallbackScope",
)
