"""
Consistency Accumulator (Diff Engine)

Keeps one rolling baseline per class and compares every new version's
record against it.

Baseline policy:
    The first record seen for a class becomes its baseline. Each later
    record is compared against the baseline, and the baseline is then
    overwritten with that record at every position, whether or not a
    divergence was found. A new version is therefore always compared with
    the version right before it, never with the first one; a chain of
    small drifts is only caught where each step happens.

Comparison walks the flattened record (see BytecodeRecord.positions):

    baseline  [sig_a, X, Y, sig_b]
    record    [sig_a, X, Z, sig_b]
                         ^ first mismatch

When both records declare the same methods, the first method whose symbol
list differs is blamed, wherever the walk first noticed a difference.
Otherwise the mismatch position decides:
    symbol                            -> the method it sits in
    signature of the previous record  -> that signature
    signature never declared before   -> UnknownDivergence
"""

from dataclasses import dataclass, field

from codegraph_bytecode.errors import DivergenceError, KnownDivergence, UnknownDivergence
from codegraph_bytecode.logging import get_logger
from codegraph_bytecode.models import (
    AccumulateOutcome,
    AccumulateResult,
    BytecodeRecord,
    MethodSignature,
    ReferencedSymbol,
)

logger = get_logger(__name__)


@dataclass
class ClassBaseline:
    """Mutable per-class baseline, updated in place after every comparison."""

    version: str
    record: BytecodeRecord
    positions: list[tuple[MethodSignature, str]] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: BytecodeRecord) -> "ClassBaseline":
        return cls(version=record.version, record=record, positions=record.positions())

    def absorb(self, record: BytecodeRecord, positions: list[tuple[MethodSignature, str]]) -> None:
        for index, value in enumerate(positions):
            if index < len(self.positions):
                self.positions[index] = value
            else:
                self.positions.append(value)
        del self.positions[len(positions) :]
        self.version = record.version
        self.record = record


class ConsistencyAccumulator:
    """
    Per-class rolling baseline and divergence classifier.

    One instance per verification run; nothing is shared between instances.

    Example:
        ```python
        accumulator = ConsistencyAccumulator()
        for record in records:
            result = accumulator.accumulate(record)  # raises DivergenceError
        ```
    """

    def __init__(self) -> None:
        self._baselines: dict[str | None, ClassBaseline] = {}
        self._history: dict[str | None, list[BytecodeRecord]] = {}

    def accumulate(self, record: BytecodeRecord) -> AccumulateResult:
        """
        Absorb one record.

        Returns:
            BASELINE result for the first record of a class, COMPARED otherwise

        Raises:
            KnownDivergence: a method's implementation differs from the previous version
            UnknownDivergence: records differ but no method can be blamed
        """
        class_name = record.class_name
        self._history.setdefault(class_name, []).append(record)

        baseline = self._baselines.get(class_name)
        if baseline is None:
            self._baselines[class_name] = ClassBaseline.from_record(record)
            logger.debug("baseline_established", class_name=class_name, version=record.version)
            return AccumulateResult(AccumulateOutcome.BASELINE, class_name, record.version)

        baseline_version = baseline.version
        positions = record.positions()
        mismatch = _first_mismatch(baseline.positions, positions)

        divergence: DivergenceError | None = None
        if mismatch is not None:
            divergence = self._classify(mismatch, baseline.record, record)

        # Commit every position before surfacing the divergence
        baseline.absorb(record, positions)

        if divergence is not None:
            logger.warning(
                "bytecode_divergence",
                class_name=class_name,
                version=record.version,
                baseline_version=baseline_version,
                signature=divergence.signature,
                known=divergence.method_known,
            )
            raise divergence

        logger.debug(
            "bytecode_consistent",
            class_name=class_name,
            version=record.version,
            baseline_version=baseline_version,
        )
        return AccumulateResult(AccumulateOutcome.COMPARED, class_name, record.version, baseline_version)

    def baseline(self, class_name: str | None) -> BytecodeRecord | None:
        """Record the next version of `class_name` will be compared against."""
        baseline = self._baselines.get(class_name)
        return baseline.record if baseline is not None else None

    def history(self, class_name: str | None) -> list[BytecodeRecord]:
        """Every record accumulated for `class_name`, in iteration order."""
        return list(self._history.get(class_name, []))

    def implementations(
        self, class_name: str | None, signature: MethodSignature
    ) -> list[tuple[str, tuple[ReferencedSymbol, ...]]]:
        return [(record.version, record.implementation(signature)) for record in self._history.get(class_name, [])]

    def reset(self) -> None:
        self._baselines.clear()
        self._history.clear()

    def _classify(
        self,
        position: tuple[MethodSignature, str],
        previous: BytecodeRecord,
        record: BytecodeRecord,
    ) -> DivergenceError:
        class_name = record.class_name

        signature: MethodSignature | None = None
        if previous.methods == record.methods:
            # a shorter or longer body shifts every later position, so ask each method
            signature = next(
                (sig for sig in record.methods if record.implementation(sig) != previous.implementation(sig)),
                None,
            )
        else:
            owner, entity = position
            if entity != owner:
                signature = owner
            elif entity in previous.methods:
                signature = entity

        if signature is None:
            return UnknownDivergence(class_name, record.version, previous.version)

        return KnownDivergence(
            class_name,
            signature,
            record.version,
            previous.version,
            self.implementations(class_name, signature),
        )


def _first_mismatch(
    baseline: list[tuple[MethodSignature, str]],
    current: list[tuple[MethodSignature, str]],
) -> tuple[MethodSignature, str] | None:
    """(owner, entity) at the first position whose entity differs, taken from `current` when it has one."""
    for index in range(max(len(baseline), len(current))):
        old = baseline[index][1] if index < len(baseline) else None
        new = current[index][1] if index < len(current) else None
        if old != new:
            return current[index] if index < len(current) else baseline[index]
    return None
