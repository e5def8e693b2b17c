"""
Report rendering tests.
"""

import io

import pytest
from rich.console import Console

from codegraph_bytecode import (
    ClassResult,
    ClassStatus,
    FatalInconsistency,
    KnownDivergence,
    MissingMethodBody,
    RunMode,
    UnknownDivergence,
    VerificationReport,
)
from codegraph_bytecode.report import SUCCESS_MESSAGE, render_divergence, render_fatal, render_report


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


def output(console: Console) -> str:
    return console.file.getvalue()


class TestRenderDivergence:
    def test_known_divergence_lists_every_version(self, console):
        error = KnownDivergence(
            "Widget",
            "public final void doThing();",
            "1.20.4",
            "1.19.4",
            [("1.19.4", ("net/minecraft/A.a:()V",)), ("1.20.4", ("net/minecraft/A.b:()V",))],
        )

        render_divergence(error, console)

        # rich expands tabs to spaces
        lines = [line.strip() for line in output(console).splitlines()]
        assert lines[0] == "There is a mappings issue with public final void doThing(); (Widget)"
        assert lines[1:4] == ["Bytecode 1.19.4:", "public final void doThing();", "net/minecraft/A.a:()V"]
        assert "Bytecode 1.20.4:" in lines
        assert "net/minecraft/A.b:()V" in lines

    def test_square_brackets_survive(self, console):
        error = KnownDivergence(None, "public final void run(java.lang.String[]);", "2", "1", [("1", ())])

        render_divergence(error, console)

        assert "public final void run(java.lang.String[]);" in output(console).splitlines()

    def test_unknown_divergence(self, console):
        render_divergence(UnknownDivergence("Widget", "1.20.4", "1.19.4"), console)

        text = output(console)
        assert "could not be resolved" in text
        assert "between 1.19.4 and 1.20.4" in text
        assert "Bytecode 1." not in text


class TestRenderReport:
    def test_success(self, console):
        report = VerificationReport(RunMode.MULTI_CLASS, ["1"], [ClassResult("Widget")])

        render_report(report, console)

        text = output(console)
        assert "Bytecode consistency" in text
        assert SUCCESS_MESSAGE in text

    def test_legacy_report_has_no_table(self, console):
        report = VerificationReport(RunMode.LEGACY, ["1"], [ClassResult(None)])

        render_report(report, console)

        assert output(console).strip() == SUCCESS_MESSAGE

    def test_failures_are_detailed(self, console):
        report = VerificationReport(
            RunMode.MULTI_CLASS,
            ["1", "2"],
            [
                ClassResult("Gadget", ClassStatus.DIVERGED, divergence=UnknownDivergence("Gadget", "2", "1")),
                ClassResult(
                    "Widget",
                    ClassStatus.BROKEN,
                    missing_bodies=[MissingMethodBody("2", "Widget", "public void a();")],
                ),
            ],
        )

        render_report(report, console)

        text = output(console)
        assert "diverged" in text
        assert "broken" in text
        assert "Method body missing in 2/Widget: public void a();" in text
        assert SUCCESS_MESSAGE not in text


def test_render_fatal(console):
    render_fatal(FatalInconsistency(), console)
    assert output(console).strip() == FatalInconsistency.MESSAGE
