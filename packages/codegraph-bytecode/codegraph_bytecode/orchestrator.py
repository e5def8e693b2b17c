"""
Verification Orchestrator

Drives builder -> accumulator -> sanity checker over an ArtifactSource.

Iteration order (decides which version becomes each class's baseline):
    multi-class mode: versions (outer) x class names (inner)
    legacy mode:      versions only, one class
"""

from collections.abc import Iterable

from codegraph_bytecode.accumulator import ConsistencyAccumulator
from codegraph_bytecode.builder import BytecodeRecordBuilder
from codegraph_bytecode.config import DEFAULT_NAMESPACE_PREFIX
from codegraph_bytecode.errors import ArtifactError, DivergenceError, MissingMethodBody
from codegraph_bytecode.logging import bind_context, clear_context, get_logger
from codegraph_bytecode.models import BytecodeRecord, ClassResult, ClassStatus, RunMode, VerificationReport
from codegraph_bytecode.ports import ArtifactSource
from codegraph_bytecode.sanity import CrossVersionSanityChecker

logger = get_logger(__name__)


class VerificationOrchestrator:
    """
    Runs one verification.

    Every collaborator is injected; a fresh accumulator is created per run
    unless one is passed in.
    """

    def __init__(
        self,
        namespace_prefix: str = DEFAULT_NAMESPACE_PREFIX,
        builder: BytecodeRecordBuilder | None = None,
        accumulator: ConsistencyAccumulator | None = None,
        sanity_checker: CrossVersionSanityChecker | None = None,
    ):
        self.builder = builder or BytecodeRecordBuilder(namespace_prefix)
        self.accumulator = accumulator or ConsistencyAccumulator()
        self.sanity_checker = sanity_checker or CrossVersionSanityChecker()

    def run(self, source: ArtifactSource) -> VerificationReport:
        """
        Verify every class of `source` across its versions.

        Raises:
            FatalInconsistency: the sanity check disagrees with the Diff Engine
            ArtifactError: one of a pair's two artifacts is missing
        """
        versions = source.versions()
        class_names = source.class_names()
        report = VerificationReport(mode=RunMode.MULTI_CLASS, versions=versions)
        results = {name: ClassResult(class_name=name) for name in class_names}
        report.classes = list(results.values())

        logger.info("comparison_started", versions=versions, classes=len(class_names))
        for version in versions:
            for class_name in class_names:
                result = results[class_name]
                if result.status == ClassStatus.DIVERGED:
                    continue

                bind_context(version=version, class_name=class_name)
                try:
                    record = self._build(source, version, class_name)
                except MissingMethodBody as e:
                    logger.error("missing_method_body", signature=e.signature)
                    result.missing_bodies.append(e)
                    result.status = ClassStatus.BROKEN
                else:
                    if record is not None:
                        self._absorb(result, record)
                finally:
                    clear_context("version", "class_name")

        self._sanity(report.classes)
        logger.info("comparison_finished", succeeded=report.succeeded)
        return report

    def run_legacy(self, disassemblies: Iterable[tuple[str, list[str]]]) -> VerificationReport:
        """
        Single-class mode over one `javap -c` listing per version.

        Args:
            disassemblies: (version, lines) pairs in iteration order
        """
        result = ClassResult(class_name=None)
        report = VerificationReport(mode=RunMode.LEGACY, classes=[result])
        logger.info("legacy_comparison_started")

        for version, lines in disassemblies:
            report.versions.append(version)
            if result.status == ClassStatus.DIVERGED:
                continue
            record = self.builder.build_legacy(version, lines)
            self._absorb(result, record)

        self._sanity(report.classes)
        return report

    def _build(self, source: ArtifactSource, version: str, class_name: str) -> BytecodeRecord | None:
        signature_lines = source.signature_lines(version, class_name)
        disassembly_lines = source.disassembly_lines(version, class_name)

        if signature_lines is None and disassembly_lines is None:
            logger.debug("pair_skipped_no_artifacts")
            return None
        if signature_lines is None or disassembly_lines is None:
            raise ArtifactError(
                "Disassembler output is incomplete",
                {
                    "version": version,
                    "class_name": class_name,
                    "listing": signature_lines is not None,
                    "disassembly": disassembly_lines is not None,
                },
            )

        return self.builder.build(version, class_name, signature_lines, disassembly_lines)

    def _absorb(self, result: ClassResult, record: BytecodeRecord) -> None:
        try:
            self.accumulator.accumulate(record)
        except DivergenceError as e:
            result.status = ClassStatus.DIVERGED
            result.divergence = e
        # the diverging record is kept too, the renderer shows every version seen
        result.records.append(record)

    def _sanity(self, results: list[ClassResult]) -> None:
        records = [record for result in results if result.status != ClassStatus.DIVERGED for record in result.records]
        self.sanity_checker.check(records)
