"""
Symbol Extractor

Pulls the version-specific symbol out of one line of `javap -c` output:

    invokevirtual #12  // Method net/minecraft/Foo.bar:()V
                          ^^^^^^ ^^^^^^^^^^^^^^^^^^^^^^^^^
                          keyword          symbol

Symbols outside the namespace prefix reference stable APIs and are dropped.
"""

import re

from codegraph_bytecode.config import DEFAULT_NAMESPACE_PREFIX
from codegraph_bytecode.logging import get_logger
from codegraph_bytecode.models import ReferencedSymbol

logger = get_logger(__name__)

RECOGNIZED_KEYWORDS = frozenset({"Method", "InterfaceMethod", "Field", "class"})

_COMMENT_MARKER = re.compile(r"//\s*(?P<keyword>\w+)\s+(?P<reference>.*)$")


def extract_symbol(
    line: str,
    namespace_prefix: str = DEFAULT_NAMESPACE_PREFIX,
    version: str | None = None,
) -> ReferencedSymbol | None:
    """
    Extract the referenced symbol from a disassembly line.

    Args:
        line: One raw disassembly line
        namespace_prefix: Package root of the version-specific platform code
        version: Only used to give the warning some context

    Returns:
        The trimmed reference when it is annotated with a recognized keyword
        and lives under `namespace_prefix`, otherwise None.
    """
    if namespace_prefix not in line:
        return None

    match = _COMMENT_MARKER.search(line)
    if match is not None and match.group("keyword") in RECOGNIZED_KEYWORDS:
        candidate = match.group("reference").strip()
        if namespace_prefix in candidate:
            return candidate
        # prefix only appeared before the comment (e.g. in a label)
        return None

    logger.warning(
        "unprocessed_mapping_line",
        version=version,
        keyword=match.group("keyword") if match else None,
        line=line.strip(),
    )
    return None


class SymbolExtractor:
    """Extractor bound to one namespace prefix."""

    def __init__(self, namespace_prefix: str = DEFAULT_NAMESPACE_PREFIX):
        self.namespace_prefix = namespace_prefix

    def extract(self, line: str, version: str | None = None) -> ReferencedSymbol | None:
        return extract_symbol(line, self.namespace_prefix, version)
