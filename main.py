import logging
import re

from rich.pretty import pprint

from argfold import *

__prog__ = "bundle"


def config():
    command = yield [
        (("verbose", "v"), Flag()),
        (("format", "f"), Maybe(OneOf("esm", "cjs", "iife"))),
        ("define", KeyValue()),
        (("external", "e"), Key()),
    ]
    if command == "build":
        yield [("level", OneOf(re.compile(r"^(debug|info)$", re.I)))]
    elif command == "watch":
        yield {"poll": Value(accumulate=False)}
    else:
        raise LookupError(command)


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    params, args = Parser(config, shell=True, fancy=True).parse()
    pprint(params)
    pprint(args)
    pprint(cmds(params, args)({
        "build": lambda params, args: ("build", params, args),
        "watch": lambda params, args: ("watch", params, args),
    }, lambda params, args: "nothing to do"))
