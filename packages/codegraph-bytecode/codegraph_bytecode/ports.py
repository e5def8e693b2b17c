"""
Ports for the orchestrator.

The orchestrator only needs raw text lines per (version, class); where they
come from (files next to an extracted build, fixtures, memory) is the
adapter's business.
"""

from typing import Protocol


class ArtifactSource(Protocol):
    """Source of disassembler artifacts, one pair per (version, class)."""

    def versions(self) -> list[str]:
        """Version identifiers in iteration order."""
        ...

    def class_names(self) -> list[str]:
        """Class names in iteration order."""
        ...

    def signature_lines(self, version: str, class_name: str) -> list[str] | None:
        """Plain `javap` listing, or None when the pair has no artifacts."""
        ...

    def disassembly_lines(self, version: str, class_name: str) -> list[str] | None:
        """`javap -c` output, or None when the pair has no artifacts."""
        ...


class InMemoryArtifactSource:
    """
    ArtifactSource over prepared text.

    Example:
        ```python
        source = InMemoryArtifactSource()
        source.add("1.20.4", "Widget", listing_text, disassembly_text)
        ```
    """

    def __init__(self) -> None:
        self._versions: list[str] = []
        self._class_names: list[str] = []
        self._artifacts: dict[tuple[str, str], tuple[list[str], list[str]]] = {}

    def add(self, version: str, class_name: str, signature_text: str, disassembly_text: str) -> None:
        if version not in self._versions:
            self._versions.append(version)
        if class_name not in self._class_names:
            self._class_names.append(class_name)
        self._artifacts[(version, class_name)] = (
            signature_text.splitlines(),
            disassembly_text.splitlines(),
        )

    def versions(self) -> list[str]:
        return list(self._versions)

    def class_names(self) -> list[str]:
        return list(self._class_names)

    def signature_lines(self, version: str, class_name: str) -> list[str] | None:
        artifacts = self._artifacts.get((version, class_name))
        return artifacts[0] if artifacts else None

    def disassembly_lines(self, version: str, class_name: str) -> list[str] | None:
        artifacts = self._artifacts.get((version, class_name))
        return artifacts[1] if artifacts else None
