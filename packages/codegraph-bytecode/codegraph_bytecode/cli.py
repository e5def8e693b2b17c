"""
Bytecode consistency CLI.

Usage:
    python -m codegraph_bytecode verify ./builds
    python -m codegraph_bytecode compare ./builds --prefix net/minecraft/
    python -m codegraph_bytecode legacy 1.20.4/bytecode.txt 1.20.5/bytecode.txt

Exit codes:
    0  all bytecodes identical
    1  divergence or missing method body
    2  sanity check failed (verifier inconsistency)
    3  artifact or configuration precondition failed
"""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from codegraph_bytecode.config import BytecodeSettings
from codegraph_bytecode.errors import ArtifactError, ConfigurationError, FatalInconsistency
from codegraph_bytecode.logging import get_logger, setup_logging
from codegraph_bytecode.models import VerificationReport
from codegraph_bytecode.orchestrator import VerificationOrchestrator
from codegraph_bytecode.report import render_fatal, render_report
from codegraph_bytecode.workspace import FileArtifactSource, Workspace, read_lines

app = typer.Typer(
    name="codegraph-bytecode",
    help="Verify that version-specific builds compile to consistent bytecode",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

EXIT_OK = 0
EXIT_DIVERGED = 1
EXIT_FATAL = 2
EXIT_PRECONDITION = 3


def _load_settings(root: Path | None, **overrides) -> BytecodeSettings:
    values = {key: value for key, value in overrides.items() if value is not None}
    if root is not None:
        values["workspace_root"] = root
    try:
        settings = BytecodeSettings(**values)
    except ValidationError as e:
        raise ConfigurationError("Invalid settings", {"errors": e.errors()}) from e
    setup_logging(level=settings.log_level, format=settings.log_format)
    return settings


def _finish(report: VerificationReport) -> None:
    render_report(report, console)
    raise typer.Exit(code=EXIT_OK if report.succeeded else EXIT_DIVERGED)


def _run_guarded(action) -> None:
    try:
        _finish(action())
    except FatalInconsistency as e:
        render_fatal(e, console)
        raise typer.Exit(code=EXIT_FATAL)
    except (ArtifactError, ConfigurationError) as e:
        console.print(f"\n[bold red]❌ Precondition failed:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=EXIT_PRECONDITION)


@app.command()
def verify(
    root: Path | None = typer.Argument(None, help="Folder with one sub-folder per version"),
    prefix: str | None = typer.Option(None, "--prefix", help="Version-specific namespace prefix"),
    class_package: str | None = typer.Option(None, "--class-package", help="Package path of the verified classes"),
    clean: bool = typer.Option(True, "--clean/--no-clean", help="Remove previously extracted trees first"),
    skip_disassembly: bool = typer.Option(False, "--skip-disassembly", help="Reuse existing javap artifacts"),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
    log_format: str | None = typer.Option(None, "--log-format", help="console or json"),
):
    """
    Full pipeline: clean, extract archives, disassemble, compare.
    """

    def _action() -> VerificationReport:
        settings = _load_settings(
            root,
            namespace_prefix=prefix,
            class_package=class_package,
            log_level=log_level,
            log_format=log_format,
        )
        workspace = Workspace(settings)
        versions = workspace.discover_versions()
        console.print(f"[dim]Versions: {', '.join(versions) or '-'}[/dim]")

        if not skip_disassembly:
            if clean and settings.clean_before_run:
                workspace.clean(versions)
            workspace.extract_archives(versions)

        class_names = workspace.collect_class_names(versions)
        console.print(f"[dim]Classes: {', '.join(class_names) or '-'}[/dim]")

        if not skip_disassembly:
            workspace.disassemble(versions, class_names)

        source = FileArtifactSource(workspace.root, versions, class_names)
        return VerificationOrchestrator(settings.namespace_prefix).run(source)

    _run_guarded(_action)


@app.command()
def compare(
    root: Path | None = typer.Argument(None, help="Folder with one sub-folder per version"),
    prefix: str | None = typer.Option(None, "--prefix", help="Version-specific namespace prefix"),
    class_package: str | None = typer.Option(None, "--class-package", help="Package path of the verified classes"),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
    log_format: str | None = typer.Option(None, "--log-format", help="console or json"),
):
    """
    Compare already disassembled artifacts without touching the builds.
    """

    def _action() -> VerificationReport:
        settings = _load_settings(
            root,
            namespace_prefix=prefix,
            class_package=class_package,
            log_level=log_level,
            log_format=log_format,
        )
        source = FileArtifactSource.from_workspace(Workspace(settings))
        return VerificationOrchestrator(settings.namespace_prefix).run(source)

    _run_guarded(_action)


@app.command()
def legacy(
    files: list[Path] = typer.Argument(..., help="One javap -c file per version, in version order"),
    version: list[str] | None = typer.Option(
        None, "--version", "-v", help="Version labels in file order (default: parent folder names)"
    ),
    prefix: str | None = typer.Option(None, "--prefix", help="Version-specific namespace prefix"),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
):
    """
    Single-class mode: compare one disassembly file per version.
    """

    def _action() -> VerificationReport:
        settings = _load_settings(None, namespace_prefix=prefix, log_level=log_level)
        labels = list(version or [])
        if labels and len(labels) != len(files):
            raise ConfigurationError(
                "--version must be given once per file",
                {"files": len(files), "versions": len(labels)},
            )
        if not labels:
            labels = [path.resolve().parent.name for path in files]

        disassemblies = []
        for label, path in zip(labels, files):
            if not path.is_file():
                raise ArtifactError("Disassembly file not found", {"path": str(path)})
            disassemblies.append((label, read_lines(path)))
        return VerificationOrchestrator(settings.namespace_prefix).run_legacy(disassemblies)

    _run_guarded(_action)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
