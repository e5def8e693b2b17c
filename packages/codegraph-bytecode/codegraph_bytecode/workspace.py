"""
Workspace collaborators.

Layout under the workspace root:

    <root>/
        1.20.4/
            CommandAPI-9.3.0_01_Jan_2024_(10-00-00am).jar   <- build archive
            dev/jorel/commandapi/nms/*.class                 <- extracted
            META-INF/                                        <- extracted
            bytecode_1.20.4_NMS_1_20_R3.txt                  <- javap -c
            bytecode_1.20.4_NMS_1_20_R3_methods.txt          <- javap
        1.20.5/
            ...

Every external step is synchronous and never retried; a failure surfaces as
ArtifactError.
"""

import re
import shutil
import subprocess
import zipfile
from pathlib import Path

from codegraph_bytecode.config import BytecodeSettings
from codegraph_bytecode.errors import ArtifactError
from codegraph_bytecode.logging import get_logger

logger = get_logger(__name__)

EXTRACTED_TREES = ("dev", "META-INF")


def disassembly_file_name(version: str, class_name: str) -> str:
    return f"bytecode_{version}_{class_name}.txt"


def signature_file_name(version: str, class_name: str) -> str:
    return f"bytecode_{version}_{class_name}_methods.txt"


def read_lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()


class Workspace:
    """Filesystem side of a verification run."""

    def __init__(self, settings: BytecodeSettings):
        self.settings = settings
        self.root = Path(settings.workspace_root)
        self._version_re = re.compile(settings.version_pattern)
        self._archive_re = re.compile(settings.archive_pattern)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover_versions(self) -> list[str]:
        """Version folder names, in lexical order."""
        if not self.root.is_dir():
            raise ArtifactError("Workspace root is not a directory", {"root": str(self.root)})
        versions = sorted(
            entry.name for entry in self.root.iterdir() if entry.is_dir() and self._version_re.fullmatch(entry.name)
        )
        logger.info("versions_discovered", root=str(self.root), versions=versions)
        return versions

    def find_archive(self, version: str) -> Path | None:
        folder = self.root / version
        for entry in sorted(folder.iterdir()):
            if entry.is_file() and self._archive_re.fullmatch(entry.name):
                return entry
        return None

    def collect_class_names(self, versions: list[str]) -> list[str]:
        """
        Class names from the first version folder's class package.

        Every version compiles the same sources, so one folder is enough.
        """
        if not versions:
            return []
        classes_dir = self.root / versions[0] / self.settings.class_package
        if not classes_dir.is_dir():
            logger.warning("class_package_missing", path=str(classes_dir))
            return []
        class_names = sorted(
            entry.name.removesuffix(".class")
            for entry in classes_dir.iterdir()
            if entry.is_file() and entry.suffix == ".class"
        )
        logger.info("class_names_collected", version=versions[0], class_names=class_names)
        return class_names

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------

    def clean(self, versions: list[str]) -> None:
        """Remove trees left behind by a previous extraction."""
        for version in versions:
            for tree in EXTRACTED_TREES:
                path = self.root / version / tree
                if path.exists():
                    shutil.rmtree(path)
                    logger.debug("extracted_tree_removed", version=version, path=str(path))

    def extract_archives(self, versions: list[str]) -> list[str]:
        """
        Extract each version's build archive in place.

        Returns:
            Versions that had an archive
        """
        extracted = []
        for version in versions:
            archive = self.find_archive(version)
            if archive is None:
                logger.info("archive_not_found", version=version)
                continue
            logger.info("archive_extracting", version=version, archive=archive.name)
            try:
                with zipfile.ZipFile(archive) as jar:
                    jar.extractall(self.root / version)
            except zipfile.BadZipFile as e:
                raise ArtifactError("Build archive is not a valid jar", {"archive": str(archive)}) from e
            extracted.append(version)
        return extracted

    def disassemble(self, versions: list[str], class_names: list[str]) -> None:
        """Write the javap listing and the javap -c disassembly for every pair."""
        javap = self.settings.javap_executable
        if shutil.which(javap) is None:
            raise ArtifactError(f"Disassembler '{javap}' not found on PATH", {"executable": javap})

        for version in versions:
            folder = self.root / version
            for class_name in class_names:
                class_file = f"{self.settings.class_package}/{class_name}.class"
                if not (folder / class_file).is_file():
                    logger.info("class_file_missing", version=version, class_name=class_name)
                    continue

                disassembly = self._run(folder, [javap, "-c", class_file])
                listing = self._run(folder, [javap, class_file])
                (folder / disassembly_file_name(version, class_name)).write_text(disassembly, encoding="utf-8")
                (folder / signature_file_name(version, class_name)).write_text(listing, encoding="utf-8")
                logger.info("bytecode_files_created", version=version, class_name=class_name)

    def _run(self, cwd: Path, command: list[str]) -> str:
        try:
            proc = subprocess.run(command, cwd=cwd, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as e:
            raise ArtifactError(
                f"{' '.join(command)} exited with {e.returncode}",
                {"cwd": str(cwd), "stderr": (e.stderr or "").strip()},
            ) from e
        return proc.stdout


class FileArtifactSource:
    """ArtifactSource reading the files Workspace.disassemble wrote."""

    def __init__(self, root: Path, versions: list[str], class_names: list[str]):
        self.root = Path(root)
        self._versions = list(versions)
        self._class_names = list(class_names)

    @classmethod
    def from_workspace(cls, workspace: Workspace) -> "FileArtifactSource":
        versions = workspace.discover_versions()
        return cls(workspace.root, versions, workspace.collect_class_names(versions))

    def versions(self) -> list[str]:
        return list(self._versions)

    def class_names(self) -> list[str]:
        return list(self._class_names)

    def signature_lines(self, version: str, class_name: str) -> list[str] | None:
        return self._read(version, signature_file_name(version, class_name))

    def disassembly_lines(self, version: str, class_name: str) -> list[str] | None:
        return self._read(version, disassembly_file_name(version, class_name))

    def _read(self, version: str, name: str) -> list[str] | None:
        path = self.root / version / name
        if not path.is_file():
            return None
        return read_lines(path)
