"""
Commands module behavioral tests (binding, composition, driver entry points).

Scope
- Name derivation and validation for command() and Command().
- Binding-time faults: unsupported types, misplaced multi-valued arguments,
  invalid topology, double binding. A failed bind leaves the command unbound.
- Composition: paths, settings propagation, child helpers.
- Drivers: invoke/ainvoke results, handle/ahandle exit codes and reporting.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (command, invoke, Command, Settings, describe).
"""
import asyncio
import gc
import unittest
from unittest import TestCase

from reflectargs import (
    AmbiguousNameError,
    Command,
    InvalidNameError,
    InvalidTopologyError,
    MultipleValuesMisplacedError,
    ParsingError,
    Settings,
    TooFewArgumentsError,
    UnsupportedTypeError,
    command,
    describe,
    invoke,
)


def _settings(info=None, error=None, **options):
    return Settings(
        log_info=(info if info is not None else []).append,
        log_error=(error if error is not None else []).append,
        **options
    )


class TestNaming(TestCase):
    """Behavioral tests for command names."""

    def testNameDerivedFromCallable(self):
        def remoteAdd():
            pass

        self.assertEqual(command(remoteAdd, settings=_settings()).name, "remote-add")

    def testExplicitNameWins(self):
        def anything():
            pass

        self.assertEqual(command(anything, name="other", settings=_settings()).name, "other")

    def testLambdaFallsBackToHint(self):
        cmd = command(lambda: None, hint="Git.cloneRepo", settings=_settings())
        self.assertEqual(cmd.name, "clone-repo")

    def testLambdaWithoutHintIsAmbiguous(self):
        with self.assertRaises(AmbiguousNameError):
            command(lambda: None, settings=_settings())

    def testAmbiguousNameIsAValueError(self):
        with self.assertRaises(ValueError):
            command(lambda: None, hint="<bad>", settings=_settings())

    def testInvalidNamesRejected(self):
        for name in ("", "a b", "x.y", "<lambda>"):
            with self.subTest(name=name):
                with self.assertRaises(InvalidNameError):
                    Command(name, settings=_settings())

    def testDescriptionFromDocstring(self):
        def build():
            """Build the project

            Longer explanation that is not shown in listings.
            """

        self.assertEqual(command(build, settings=_settings()).descr, "Build the project")


class TestBinding(TestCase):
    """Behavioral tests for Command.bind()."""

    def testPartitionPreservesOrder(self):
        def test(int_arg: int, bool_arg: bool, string_arg: str = "myString", ao: str = "ao"):
            pass

        cmd = command(test, settings=_settings())
        self.assertEqual([x.name for x in cmd.positionals], ["int_arg", "bool_arg"])
        self.assertEqual([x.name for x in cmd.named], ["string_arg", "ao"])

    def testUnsupportedTypeLeavesCommandUnbound(self):
        def ratio(value: float):
            pass

        cmd = Command("ratio", settings=_settings())
        with self.assertRaises(UnsupportedTypeError) as context:
            cmd.bind(ratio)
        self.assertIn("float", context.exception.message)
        self.assertFalse(cmd.bound)
        self.assertEqual(cmd.positionals, [])

    def testUnresolvedAnnotationNamesTheMissingType(self):
        def clone(repo: "str", color: "Palette"):
            pass

        cmd = Command("clone", settings=_settings())
        with self.assertRaises(UnsupportedTypeError) as context:
            cmd.bind(clone)
        self.assertIn("'Palette'", context.exception.message)
        self.assertNotIn("'str'", context.exception.message)
        self.assertIsInstance(context.exception.__cause__, NameError)
        self.assertFalse(cmd.bound)

    def testKeywordVariadicsRejected(self):
        def loose(**options):
            pass

        with self.assertRaises(UnsupportedTypeError):
            command(loose, settings=_settings())

    def testOnlyLastArgumentMayAcceptMany(self):
        def bad(values: list[int], last: int):
            pass

        with self.assertRaises(MultipleValuesMisplacedError) as context:
            command(bad, settings=_settings())
        self.assertEqual(context.exception.message, "Only the last argument may accept many values")

    def testManyValuedNamedParametersMayBeAnywhere(self):
        def fine(first: int, tags: list[str] | None = None, last: int = 0):
            pass

        self.assertTrue(command(fine, settings=_settings()).bound)

    def testDoubleBindRejected(self):
        def one():
            pass

        cmd = command(one, settings=_settings())
        with self.assertRaises(TypeError):
            cmd.bind(one)

    def testDescriptionsAttachRegardlessOfDecoratorOrder(self):
        @describe(repo="repository to clone")
        @command(settings=_settings())
        def clone(repo: str):
            pass

        @command(settings=_settings())
        @describe(repo="repository to clone")
        def fetch(repo: str):
            pass

        self.assertEqual(clone.positionals[0].descr, "repository to clone")
        self.assertEqual(fetch.positionals[0].descr, "repository to clone")

    def testDescriptionOfUnknownParameterRejected(self):
        @describe(missing="nope")
        def clone(repo: str):
            pass

        with self.assertRaises(TypeError):
            command(clone, settings=_settings())

    def testCommandForwardsCalls(self):
        @command(settings=_settings())
        def add(a: int, b: int):
            return a + b

        self.assertEqual(add(2, 3), 5)


class TestComposition(TestCase):
    """Behavioral tests for command trees."""

    def testCannotAddChildToCommandWithArguments(self):
        def clone(repo: str):
            pass

        parent = command(clone, settings=_settings())
        with self.assertRaises(InvalidTopologyError):
            parent.add_command(Command("child", settings=_settings()))

    def testCannotBindArgumentsToCommandWithChildren(self):
        def git(repo: str):
            pass

        parent = Command("git", settings=_settings())
        parent.add_command(Command("remote", settings=_settings()))
        with self.assertRaises(InvalidTopologyError):
            parent.bind(git)
        self.assertFalse(parent.bound)

    def testDuplicateChildNamesRejected(self):
        parent = Command("git", settings=_settings())
        parent.add_command(Command("remote"))
        with self.assertRaises(InvalidTopologyError):
            parent.add_command(Command("remote"))

    def testChildCannotHaveTwoParents(self):
        child = Command("remote")
        git = Command("git")
        git.add_command(child)
        with self.assertRaises(InvalidTopologyError):
            Command("hg").add_command(child)

    def testChildOutlivingItsTreeBecomesRoot(self):
        child = Command("remote")
        git = Command("git")
        git.add_command(child)
        self.assertEqual(child.path, ("git", "remote"))

        del git
        gc.collect()
        self.assertIsNone(child.parent)
        self.assertEqual(child.path, ("remote",))

    def testCyclesRejected(self):
        root = Command("git")
        child = Command("remote")
        root.add_command(child)
        with self.assertRaises(InvalidTopologyError):
            child.add_command(root)

    def testPathAndSettingsPropagation(self):
        settings = _settings()
        git = Command("git", settings=settings)
        remote = Command("remote")
        git.add_command(remote)

        @remote.command
        def add(name: str, url: str):
            pass

        self.assertEqual(add.path, ("git", "remote", "add"))
        self.assertEqual(add.fullname, "git remote add")
        self.assertIs(add.parent, remote)
        self.assertIs(add.root, git)
        self.assertIs(remote.settings, settings)
        self.assertIs(add.settings, settings)
        self.assertEqual([x.name for x in remote.children], ["add"])

    def testChildHelperDirectAndDecoratorForms(self):
        git = Command("git", settings=_settings())

        def status():
            pass

        child = git.command(status, "Show the working tree status")
        self.assertIs(child.parent, git)
        self.assertEqual(child.descr, "Show the working tree status")

        @git.command(name="log")
        def show_log(limit: int = 10):
            pass

        self.assertEqual(show_log.name, "log")
        self.assertEqual([x.name for x in git.children], ["status", "log"])


class TestDrivers(TestCase):
    """Behavioral tests for invoke/ainvoke/handle/ahandle."""

    def testInvokeReturnsResult(self):
        @command(settings=_settings())
        def add(a: int, b: int):
            return a + b

        self.assertEqual(add.invoke(["2", "3"]), 5)
        self.assertEqual(add.invoke("4 5"), 9)

    def testInvokeRejectsNonStringTokens(self):
        @command(settings=_settings())
        def add(a: int):
            return a

        with self.assertRaises(TypeError):
            add.invoke([1])

    def testModuleInvokeWrapsPlainCallables(self):
        def double(value: int):
            return value * 2

        self.assertEqual(invoke(double, ["21"]), 42)

    def testModuleInvokeRejectsNonCallables(self):
        with self.assertRaises(TypeError):
            invoke(42, [])

    def testAwaitableResultsAreAwaited(self):
        @command(settings=_settings())
        async def fetch(url: str):
            await asyncio.sleep(0)
            return url.upper()

        self.assertEqual(fetch.invoke(["abc"]), "ABC")
        self.assertEqual(asyncio.run(fetch.ainvoke(["xyz"])), "XYZ")

    def testHandleSuccess(self):
        seen = []

        @command(settings=_settings())
        def record(value: int):
            seen.append(value)

        self.assertEqual(record.handle(["7"]), 0)
        self.assertEqual(seen, [7])

    def testHandleReportsParseErrors(self):
        info, error = [], []
        git = Command("git", settings=_settings(info, error))

        @git.command
        def clone(repo: str):
            pass

        self.assertEqual(git.handle(["clone"]), 1)
        self.assertEqual(error, ["too few arguments for 'clone', expected 1 but got 0"])
        self.assertEqual(info, ["see 'git clone --help' for more information"])

    def testHandleWithoutAutoHelpOmitsHint(self):
        info, error = [], []

        @command(settings=_settings(info, error, auto_help=False))
        def clone(repo: str):
            pass

        self.assertEqual(clone.handle([]), 1)
        self.assertEqual(len(error), 1)
        self.assertEqual(info, [])

    def testHandleLetsCallableErrorsPropagate(self):
        @command(settings=_settings())
        def boom():
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            boom.handle([])

    def testAsyncHandle(self):
        info, error = [], []

        @command(settings=_settings(info, error))
        async def fetch(url: str):
            pass

        self.assertEqual(asyncio.run(fetch.ahandle(["x"])), 0)
        self.assertEqual(asyncio.run(fetch.ahandle([])), 1)
        self.assertEqual(len(error), 1)

    def testParseErrorsCarryFailingCommand(self):
        git = Command("git", settings=_settings())

        @git.command
        def clone(repo: str):
            pass

        with self.assertRaises(TooFewArgumentsError) as context:
            git.invoke(["clone"])
        self.assertIs(context.exception.command, clone)
        self.assertIsInstance(context.exception, ParsingError)

    def testSettingsRejectNonCallableSinks(self):
        with self.assertRaises(TypeError):
            Settings(log_info="stdout")


if __name__ == "__main__":
    unittest.main()
