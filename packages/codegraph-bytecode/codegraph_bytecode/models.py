"""
Bytecode record models.

A BytecodeRecord is the unit of comparison: one (version, class) pair,
its method signatures in a fixed order, and for each signature the
version-specific symbols its body references, in order of appearance.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from codegraph_bytecode.errors import BytecodeError, DivergenceError, MissingMethodBody, RecordInvariantError

# Declaration line exactly as the disassembler prints it, never parsed further
MethodSignature = str
# Text after a `// <Keyword>` comment, e.g. "net/minecraft/Foo.bar:()V"
ReferencedSymbol = str


@dataclass(frozen=True)
class BytecodeRecord:
    """
    Disassembled view of one class built against one target version.

    Attributes:
        version: Target-platform version the class was compiled against
        class_name: Class being verified (None in single-class legacy mode)
        methods: Method signatures in declaration (or lexicographic) order
        method_impls: Signature -> referenced symbols, one entry per method
    """

    version: str
    class_name: str | None
    methods: tuple[MethodSignature, ...]
    method_impls: Mapping[MethodSignature, tuple[ReferencedSymbol, ...]]

    def __post_init__(self) -> None:
        methods = tuple(self.methods)
        impls = {signature: tuple(symbols) for signature, symbols in self.method_impls.items()}

        missing = [signature for signature in methods if signature not in impls]
        if missing:
            raise RecordInvariantError(
                "Every method needs an implementation entry",
                {"version": self.version, "class_name": self.class_name, "missing": missing},
            )
        extra = [signature for signature in impls if signature not in methods]
        if extra:
            raise RecordInvariantError(
                "Implementation entries for undeclared methods",
                {"version": self.version, "class_name": self.class_name, "extra": extra},
            )

        object.__setattr__(self, "methods", methods)
        object.__setattr__(self, "method_impls", MappingProxyType(impls))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BytecodeRecord):
            return NotImplemented
        return (
            self.version == other.version
            and self.class_name == other.class_name
            and self.structurally_equals(other)
        )

    def __hash__(self) -> int:
        return hash((self.version, self.class_name, self.methods))

    def structurally_equals(self, other: "BytecodeRecord") -> bool:
        """Same methods in the same order and the same implementation for each."""
        if self.methods != other.methods:
            return False
        return all(self.method_impls[m] == other.method_impls.get(m) for m in self.methods)

    def implementation(self, signature: MethodSignature) -> tuple[ReferencedSymbol, ...]:
        """Symbols referenced by `signature`, empty when the method is absent."""
        return self.method_impls.get(signature, ())

    def positions(self) -> list[tuple[MethodSignature, str]]:
        """
        Flatten to the sequence the Diff Engine walks, each entry tagged with
        the method it belongs to.

        Each signature is followed by its implementation symbols:
            [(sig_a, sig_a), (sig_a, sym_a1), (sig_a, sym_a2), (sig_b, sig_b), ...]
        """
        flat: list[tuple[MethodSignature, str]] = []
        for signature in self.methods:
            flat.append((signature, signature))
            flat.extend((signature, symbol) for symbol in self.method_impls[signature])
        return flat

    def comparable(self) -> list[str]:
        """Entities of `positions()` without their owners."""
        return [entity for _, entity in self.positions()]

    def __iter__(self) -> Iterator[tuple[MethodSignature, tuple[ReferencedSymbol, ...]]]:
        for signature in self.methods:
            yield signature, self.method_impls[signature]


# ============================================================
# Accumulation Results
# ============================================================


class AccumulateOutcome(str, Enum):
    """How a record was absorbed by the accumulator."""

    BASELINE = "baseline"  # first record for the class, nothing to compare
    COMPARED = "compared"  # matched the previous version's record


@dataclass(frozen=True)
class AccumulateResult:
    """Tagged result of a successful accumulate call."""

    outcome: AccumulateOutcome
    class_name: str | None
    version: str
    baseline_version: str | None = None

    @property
    def is_baseline(self) -> bool:
        return self.outcome == AccumulateOutcome.BASELINE


# ============================================================
# Verification Results
# ============================================================


class ClassStatus(str, Enum):
    PASSED = "passed"
    DIVERGED = "diverged"
    BROKEN = "broken"  # at least one (version, class) pair had no usable disassembly


@dataclass
class ClassResult:
    """Outcome of verifying one class across all versions."""

    class_name: str | None
    status: ClassStatus = ClassStatus.PASSED
    records: list[BytecodeRecord] = field(default_factory=list)
    divergence: DivergenceError | None = None
    missing_bodies: list[MissingMethodBody] = field(default_factory=list)

    @property
    def versions(self) -> list[str]:
        return [record.version for record in self.records]

    @property
    def error(self) -> BytecodeError | None:
        if self.divergence is not None:
            return self.divergence
        if self.missing_bodies:
            return self.missing_bodies[0]
        return None


class RunMode(str, Enum):
    MULTI_CLASS = "multi-class"
    LEGACY = "legacy"


@dataclass
class VerificationReport:
    """Everything the console renderer needs, in iteration order."""

    mode: RunMode
    versions: list[str] = field(default_factory=list)
    classes: list[ClassResult] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return all(result.status == ClassStatus.PASSED for result in self.classes)

    @property
    def diverged(self) -> list[ClassResult]:
        return [result for result in self.classes if result.status == ClassStatus.DIVERGED]

    @property
    def broken(self) -> list[ClassResult]:
        return [result for result in self.classes if result.status == ClassStatus.BROKEN]

    def result_for(self, class_name: str | None) -> ClassResult | None:
        for result in self.classes:
            if result.class_name == class_name:
                return result
        return None
