"""
Bytecode Verification Exception Hierarchy

Every failure the verifier can report carries enough structured data to
render a diagnostic without re-reading any artifact.

Recoverability:
    MissingMethodBody   -> skip that (version, class) pair
    DivergenceError     -> stop that class, keep the others going
    FatalInconsistency  -> halt the run
    ArtifactError       -> halt the run (precondition, never retried)
"""

from typing import Any


class BytecodeError(Exception):
    """Base exception for all bytecode verification errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize bytecode error.

        Args:
            message: Human-readable error message
            details: Optional additional details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


# ============================================================
# Record Errors
# ============================================================


class RecordInvariantError(BytecodeError):
    """A BytecodeRecord was constructed with inconsistent methods/impls."""

    pass


class MissingMethodBody(BytecodeError):
    """A declared method signature never occurs in the disassembly."""

    def __init__(self, version: str, class_name: str | None, signature: str):
        super().__init__(
            f"Method '{signature}' is declared but not present in the disassembly",
            {"version": version, "class_name": class_name, "signature": signature},
        )
        self.version = version
        self.class_name = class_name
        self.signature = signature


# ============================================================
# Divergence Errors
# ============================================================


class DivergenceError(BytecodeError):
    """
    Implementation mismatch between consecutive versions of a class.

    Attributes:
        class_name: Class being verified (None in single-class legacy mode)
        signature: Offending method signature (None when unknown)
        version: Version whose record raised the divergence
        baseline_version: Version the record was compared against
        implementations: (version, symbols) for the offending method across
            every version seen for the class, in iteration order
    """

    method_known: bool = False

    def __init__(
        self,
        message: str,
        class_name: str | None,
        signature: str | None,
        version: str,
        baseline_version: str,
        implementations: list[tuple[str, tuple[str, ...]]] | None = None,
    ):
        super().__init__(
            message,
            {
                "class_name": class_name,
                "signature": signature,
                "version": version,
                "baseline_version": baseline_version,
            },
        )
        self.class_name = class_name
        self.signature = signature
        self.version = version
        self.baseline_version = baseline_version
        self.implementations = implementations or []


class KnownDivergence(DivergenceError):
    """A specific method's implementation differs between versions."""

    method_known = True

    def __init__(
        self,
        class_name: str | None,
        signature: str,
        version: str,
        baseline_version: str,
        implementations: list[tuple[str, tuple[str, ...]]] | None = None,
    ):
        super().__init__(
            f"There is a mappings issue with {signature}",
            class_name,
            signature,
            version,
            baseline_version,
            implementations,
        )


class UnknownDivergence(DivergenceError):
    """A mismatch exists but cannot be attributed to a method."""

    def __init__(self, class_name: str | None, version: str, baseline_version: str):
        super().__init__(
            "Bytecodes differ but the offending method could not be resolved, inspect manually",
            class_name,
            None,
            version,
            baseline_version,
        )


class FatalInconsistency(BytecodeError):
    """The incremental checks missed a divergence; the verifier itself is unreliable."""

    MESSAGE = "Bytecodes differ somewhere! The built-in checks did not catch that. Mappings issue will arise."

    def __init__(self):
        super().__init__(self.MESSAGE)


# ============================================================
# Precondition Errors
# ============================================================


class ArtifactError(BytecodeError):
    """External artifact missing or external tool failed."""

    pass


class ConfigurationError(BytecodeError):
    """Invalid configuration."""

    pass
