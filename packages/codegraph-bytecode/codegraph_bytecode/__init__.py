"""
CodeGraph Bytecode

Cross-version bytecode consistency verification for libraries that ship one
implementation class per target platform version.

Pipeline:
    javap listing + javap -c  ->  BytecodeRecordBuilder  ->  BytecodeRecord
    BytecodeRecord (per version)  ->  ConsistencyAccumulator  ->  Known/UnknownDivergence
    all records  ->  sanity_check  ->  FatalInconsistency
"""

__version__ = "0.1.0"

from .accumulator import ConsistencyAccumulator
from .builder import BytecodeRecordBuilder
from .errors import (
    ArtifactError,
    BytecodeError,
    ConfigurationError,
    DivergenceError,
    FatalInconsistency,
    KnownDivergence,
    MissingMethodBody,
    RecordInvariantError,
    UnknownDivergence,
)
from .models import (
    AccumulateOutcome,
    AccumulateResult,
    BytecodeRecord,
    ClassResult,
    ClassStatus,
    RunMode,
    VerificationReport,
)
from .orchestrator import VerificationOrchestrator
from .ports import ArtifactSource, InMemoryArtifactSource
from .sanity import CrossVersionSanityChecker, sanity_check
from .symbols import SymbolExtractor, extract_symbol

__all__ = [
    # Core
    "BytecodeRecord",
    "BytecodeRecordBuilder",
    "ConsistencyAccumulator",
    "CrossVersionSanityChecker",
    "SymbolExtractor",
    "extract_symbol",
    "sanity_check",
    # Results
    "AccumulateOutcome",
    "AccumulateResult",
    "ClassResult",
    "ClassStatus",
    "RunMode",
    "VerificationReport",
    # Orchestration
    "ArtifactSource",
    "InMemoryArtifactSource",
    "VerificationOrchestrator",
    # Errors
    "ArtifactError",
    "BytecodeError",
    "ConfigurationError",
    "DivergenceError",
    "FatalInconsistency",
    "KnownDivergence",
    "MissingMethodBody",
    "RecordInvariantError",
    "UnknownDivergence",
]
