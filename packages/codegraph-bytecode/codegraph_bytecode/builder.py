"""
Bytecode Record Builder

Turns the two disassembler artifacts of one (version, class) pair into a
BytecodeRecord.

Listing mode (`javap` + `javap -c`):
    - methods: every line of the signature listing indented by exactly two
      spaces, in declaration order
    - bodies: each declaration is located verbatim in the disassembly and
      scanned forward until the next known declaration or end of input

Legacy mode (`javap -c` only, single class):
    - member indentation is stripped, declarations are the lines starting
      with a recognized modifier prefix, methods are sorted
"""

from collections.abc import Iterable, Sequence

from codegraph_bytecode.config import DEFAULT_NAMESPACE_PREFIX
from codegraph_bytecode.errors import MissingMethodBody
from codegraph_bytecode.logging import get_logger
from codegraph_bytecode.models import BytecodeRecord, MethodSignature, ReferencedSymbol
from codegraph_bytecode.symbols import SymbolExtractor

logger = get_logger(__name__)

MEMBER_INDENT = "  "
LEGACY_MODIFIER_PREFIXES = ("public final", "protected abstract")


def is_listing_declaration(line: str) -> bool:
    """Member lines of a `javap` listing are indented by exactly two spaces."""
    return len(line) > len(MEMBER_INDENT) and line.startswith(MEMBER_INDENT) and not line[2].isspace()


def is_legacy_declaration(line: str) -> bool:
    return line.startswith(LEGACY_MODIFIER_PREFIXES)


def strip_member_indent(line: str) -> str:
    """Drop the two-space member indent; lines shorter than three characters are kept."""
    return line[2:] if len(line) >= 3 else line


class BytecodeRecordBuilder:
    """
    Builds BytecodeRecords for one namespace prefix.

    Example:
        ```python
        builder = BytecodeRecordBuilder("net/minecraft/")
        record = builder.build("1.20.4", "NMS_1_20_R3", listing, disassembly)
        ```
    """

    def __init__(self, namespace_prefix: str = DEFAULT_NAMESPACE_PREFIX):
        self.extractor = SymbolExtractor(namespace_prefix)

    def build(
        self,
        version: str,
        class_name: str | None,
        signature_lines: Iterable[str],
        disassembly_lines: Sequence[str],
    ) -> BytecodeRecord:
        """
        Build a record from a signature listing and a full disassembly.

        Raises:
            MissingMethodBody: A declared signature is absent from the disassembly
        """
        methods = _unique([line for line in signature_lines if is_listing_declaration(line)])
        impls = self._scan_bodies(version, class_name, methods, disassembly_lines)

        logger.debug(
            "bytecode_record_built",
            version=version,
            class_name=class_name,
            methods=len(methods),
            symbols=sum(len(symbols) for symbols in impls.values()),
        )
        return BytecodeRecord(version=version, class_name=class_name, methods=tuple(methods), method_impls=impls)

    def build_legacy(
        self,
        version: str,
        disassembly_lines: Iterable[str],
        class_name: str | None = None,
    ) -> BytecodeRecord:
        """Build a record from a single `javap -c` file, ordering methods lexicographically."""
        lines = [strip_member_indent(line) for line in disassembly_lines]
        methods = sorted(_unique([line for line in lines if is_legacy_declaration(line)]))
        impls = self._scan_bodies(version, class_name, methods, lines)

        logger.debug("legacy_bytecode_record_built", version=version, methods=len(methods))
        return BytecodeRecord(version=version, class_name=class_name, methods=tuple(methods), method_impls=impls)

    def _scan_bodies(
        self,
        version: str,
        class_name: str | None,
        methods: Sequence[MethodSignature],
        disassembly_lines: Sequence[str],
    ) -> dict[MethodSignature, list[ReferencedSymbol]]:
        known = set(methods)
        positions = _first_positions(disassembly_lines, known)

        impls: dict[MethodSignature, list[ReferencedSymbol]] = {}
        for signature in methods:
            start = positions.get(signature)
            if start is None:
                raise MissingMethodBody(version, class_name, signature)

            symbols: list[ReferencedSymbol] = []
            for line in disassembly_lines[start + 1 :]:
                # boundary check comes first, never read into the next body
                if line in known:
                    break
                symbol = self.extractor.extract(line, version)
                if symbol is not None:
                    symbols.append(symbol)
            impls[signature] = symbols
        return impls


def _unique(lines: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for line in lines:
        if line not in seen:
            seen.add(line)
            result.append(line)
    return result


def _first_positions(lines: Sequence[str], wanted: set[str]) -> dict[str, int]:
    positions: dict[str, int] = {}
    for index, line in enumerate(lines):
        if line in wanted and line not in positions:
            positions[line] = index
    return positions
