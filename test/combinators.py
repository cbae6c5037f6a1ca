"""
Combinators behavioral tests (reducers exercised directly on token streams).

Scope
- Validate consumption and state transitions of every factory.
- Validate rejection reasons and that rejections never consume input.
- Validate the accumulation policy and the Maybe sentinel conventions.
- Validate construction-time argument checks.

Conventions
- Test method names follow CamelCase per project convention.
"""
import re
import unittest
from unittest import TestCase

from argfold.combinators import *
from argfold.tokens import Input, Token, TokenKind, tokenize
from argfold.utils import Unset


def stream(*argv):
    return Input(tokenize(argv))


def keyed(*argv):
    # Drop the leading flag so the stream starts at its KEY token.
    return stream(*argv).advance()


class TestValue(TestCase):

    def testConsumesOneValue(self):
        result = Value()(stream("esm", "index.ts"))
        self.assertIsInstance(result, Consumed)
        self.assertEqual(result.state, "esm")
        self.assertEqual(list(result.input), [Token(TokenKind.VALUE, "index.ts")])

    def testRejectsFlagsAndExhaustion(self):
        self.assertEqual(Value()(stream("--format")), Rejected("expected value"))
        self.assertEqual(Value()(stream()), Rejected("expected value"))

    def testRepetitionAccumulates(self):
        _, state = Value()(stream("cjs"), "esm")
        self.assertEqual(state, ["esm", "cjs"])
        _, state = Value()(stream("iife"), state)
        self.assertEqual(state, ["esm", "cjs", "iife"])

    def testRepetitionDoesNotMutatePriorState(self):
        prior = ["esm", "cjs"]
        Value()(stream("iife"), prior)
        self.assertEqual(prior, ["esm", "cjs"])

    def testLatestWinsWithoutAccumulation(self):
        _, state = Value(accumulate=False)(stream("cjs"), "esm")
        self.assertEqual(state, "cjs")

    def testSentinelCountsAsNoState(self):
        _, state = Value()(stream("esm"), True)
        self.assertEqual(state, "esm")

    def testName(self):
        self.assertEqual(Value().__name__, "Value")


class TestFlag(TestCase):

    def testCountsOccurrences(self):
        reduce = Flag()
        input = stream("index.ts")
        self.assertEqual(reduce(input), Consumed(input, True))
        self.assertEqual(reduce(input, True).state, 2)
        self.assertEqual(reduce(input, 2).state, 3)

    def testConsumesNothing(self):
        input = stream("esm")
        self.assertIs(Flag()(input, Unset).input, input)


class TestOneOf(TestCase):

    def testStringPatternsAreExact(self):
        reduce = OneOf("debug", "info")
        self.assertEqual(reduce(stream("info")).state, "info")
        self.assertEqual(reduce(stream("INFO")), Rejected("expected one-of"))
        self.assertEqual(reduce(stream("inf")), Rejected("expected one-of"))

    def testRegexPatternsUseTheirOwnAnchors(self):
        anchored = OneOf(re.compile(r"^debug$", re.I), "info")
        self.assertEqual(anchored(stream("dEbUg")).state, "dEbUg")
        self.assertEqual(anchored(stream("xdebugx")), Rejected("expected one-of"))
        # Without anchors the pattern may match anywhere in the text.
        self.assertEqual(OneOf(re.compile("debug"))(stream("xdebugx")).state, "xdebugx")

    def testRejectsNonValues(self):
        self.assertEqual(OneOf("debug")(stream("--level")), Rejected("expected value"))

    def testAccumulates(self):
        _, state = OneOf("debug", "info")(stream("info"), "debug")
        self.assertEqual(state, ["debug", "info"])

    def testConstructionChecks(self):
        with self.assertRaises(TypeError):
            OneOf()
        with self.assertRaises(TypeError):
            OneOf("debug", 1)


class TestKey(TestCase):

    def testCountsKeys(self):
        reduce = Key()
        result = reduce(keyed("--external:fs"))
        self.assertEqual(result.state, {"fs": True})
        self.assertFalse(result.input)
        self.assertEqual(reduce(keyed("--external:fs"), result.state).state, {"fs": 2})
        self.assertEqual(reduce(keyed("--external:os"), result.state).state, {"fs": True, "os": True})

    def testDoesNotMutatePriorState(self):
        prior = {"fs": True}
        Key()(keyed("--external:fs"), prior)
        self.assertEqual(prior, {"fs": True})

    def testMissingKey(self):
        self.assertEqual(Key()(stream("fs")), Rejected("missing key"))

    def testDelegatesToInner(self):
        result = Key(Value())(keyed("--define:DEBUG", "true"))
        self.assertEqual(result.state, {"DEBUG": "true"})
        self.assertEqual(Key(Value()).__name__, "Key(Value)")

    def testInnerRejectionPropagates(self):
        self.assertEqual(Key(Value())(keyed("--define:DEBUG")), Rejected("expected value"))

    def testConstructionChecks(self):
        with self.assertRaises(TypeError):
            Key("Value")


class TestKeyValue(TestCase):

    def testKeyThenValue(self):
        reduce = KeyValue()
        _, state = reduce(keyed("--define:DEBUG=true"))
        self.assertEqual(state, {"DEBUG": "true"})
        _, state = reduce(keyed("--define:DEBUG", "false"), state)
        self.assertEqual(state, {"DEBUG": ["true", "false"]})

    def testRejections(self):
        self.assertEqual(KeyValue()(stream("true")), Rejected("missing key"))
        self.assertEqual(KeyValue()(keyed("--define:DEBUG")), Rejected("expected value"))

    def testName(self):
        self.assertEqual(KeyValue().__name__, "KeyValue")


class TestMaybe(TestCase):

    def testSentinelWhenExhausted(self):
        input = stream()
        self.assertEqual(Maybe(Value())(input), Consumed(input, True))

    def testDoesNotInvokeInnerBeforeAFlag(self):
        calls = []

        def spy(input, state=Unset, /):
            calls.append(input)
            return Value()(input, state)

        input = stream("--other")
        self.assertEqual(Maybe(spy)(input), Consumed(input, True))
        self.assertEqual(calls, [])

    def testDoesNotInvokeInnerBeforeShortOrClusteredFlags(self):
        for argv in (("-f",), ("-vv",)):
            with self.subTest(argv=argv):
                input = stream(*argv)
                self.assertEqual(Maybe(Value())(input), Consumed(input, True))

    def testInnerSuccess(self):
        self.assertEqual(Maybe(Value())(stream("esm")).state, "esm")

    def testRollsBackOnRejection(self):
        input = stream("warn")
        result = Maybe(OneOf("debug", "info"))(input)
        self.assertEqual(result.state, True)
        self.assertIs(result.input, input)

    def testPassesPriorState(self):
        self.assertEqual(Maybe(Value())(stream("cjs"), "esm").state, ["esm", "cjs"])

    def testName(self):
        self.assertEqual(Maybe(Value()).__name__, "Maybe(Value)")

    def testConstructionChecks(self):
        with self.assertRaises(TypeError):
            Maybe(None)


class TestMany(TestCase):

    def testCollectsResults(self):
        reduce = Many(Value(accumulate=False))
        _, state = reduce(stream("esm"))
        self.assertEqual(state, ["esm"])
        _, state = reduce(stream("cjs"), state)
        self.assertEqual(state, ["esm", "cjs"])

    def testInnerAlwaysStartsFresh(self):
        _, state = Many(Flag())(stream(), [True, True])
        self.assertEqual(state, [True, True, True])

    def testRejectionPropagates(self):
        self.assertEqual(Many(Value())(stream("--x")), Rejected("expected value"))


if __name__ == "__main__":
    unittest.main()
