"""
Console rendering of a VerificationReport.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from codegraph_bytecode.errors import DivergenceError, FatalInconsistency
from codegraph_bytecode.models import ClassResult, ClassStatus, VerificationReport

SUCCESS_MESSAGE = "All bytecodes are identical! No mapping issues will arise!"

_STATUS_STYLE = {
    ClassStatus.PASSED: "green",
    ClassStatus.DIVERGED: "red",
    ClassStatus.BROKEN: "yellow",
}


def render_report(report: VerificationReport, console: Console) -> None:
    """Print the summary table, then the details of every failing class."""
    if report.classes and report.classes[0].class_name is not None:
        _render_summary(report, console)

    for result in report.classes:
        if result.divergence is not None:
            render_divergence(result.divergence, console)
        for missing in result.missing_bodies:
            console.print(
                f"[yellow]Method body missing[/yellow] in {missing.version}/{missing.class_name}: {escape(missing.signature)}"
            )

    if report.succeeded:
        console.print(f"[bold green]{SUCCESS_MESSAGE}[/bold green]")


def render_divergence(error: DivergenceError, console: Console) -> None:
    """
    Known divergences list the offending method per version seen:

        There is a mappings issue with public final void doThing();
        Bytecode 1.20.4:
        public final void doThing();
            net/minecraft/Foo.bar:()V
    """
    if not error.method_known:
        where = f" in {error.class_name}" if error.class_name else ""
        console.print(
            f"[bold red]{error.message}[/bold red]{where} "
            f"(between {error.baseline_version} and {error.version})"
        )
        return

    heading = f"There is a mappings issue with {error.signature}"
    if error.class_name:
        heading += f" ({error.class_name})"
    console.print(f"[bold red]{escape(heading)}[/bold red]", highlight=False)
    for version, symbols in error.implementations:
        console.print(f"Bytecode {version}:", highlight=False)
        console.print(error.signature, markup=False, highlight=False)
        for symbol in symbols:
            console.print(f"\t{symbol}", markup=False, highlight=False)
        console.print()


def render_fatal(error: FatalInconsistency, console: Console) -> None:
    console.print(f"[bold red]{error.message}[/bold red]")


def _render_summary(report: VerificationReport, console: Console) -> None:
    table = Table(title="Bytecode consistency", show_header=True)
    table.add_column("Class", style="cyan")
    table.add_column("Versions", justify="right")
    table.add_column("Status")
    table.add_column("Detail", overflow="fold")

    for result in report.classes:
        style = _STATUS_STYLE[result.status]
        table.add_row(
            result.class_name or "-",
            str(len(result.records)),
            f"[{style}]{result.status.value}[/{style}]",
            _detail(result),
        )
    console.print(table)


def _detail(result: ClassResult) -> str:
    if result.divergence is not None:
        return escape(result.divergence.signature or "unresolved")
    if result.missing_bodies:
        return f"{len(result.missing_bodies)} missing body"
    return ""
