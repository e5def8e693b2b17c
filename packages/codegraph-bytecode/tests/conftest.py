"""
Shared fixtures for bytecode verification tests.
"""

from collections.abc import Callable

import pytest

from codegraph_bytecode import BytecodeRecord, BytecodeRecordBuilder, InMemoryArtifactSource
from tests.samples import (
    CHAT,
    CTOR,
    DESCRIBE,
    DO_THING,
    LEVEL,
    OBJECT_INIT,
    SERVER,
    TO_STRING,
    Instruction,
    render_disassembly,
    render_listing,
)


@pytest.fixture
def listing() -> Callable[..., str]:
    return render_listing


@pytest.fixture
def disassembly() -> Callable[..., str]:
    return render_disassembly


@pytest.fixture
def builder() -> BytecodeRecordBuilder:
    return BytecodeRecordBuilder("net/minecraft/")


@pytest.fixture
def widget_bodies() -> dict[str, list[Instruction] | None]:
    return {
        CTOR: [OBJECT_INIT],
        DO_THING: [SERVER, LEVEL],
        DESCRIBE: [TO_STRING, CHAT],
    }


@pytest.fixture
def make_record(builder) -> Callable[..., BytecodeRecord]:
    def _make(version: str, bodies: dict[str, list[Instruction] | None], class_name: str = "Widget") -> BytecodeRecord:
        return builder.build(
            version,
            class_name,
            render_listing(class_name, list(bodies)).splitlines(),
            render_disassembly(class_name, bodies).splitlines(),
        )

    return _make


@pytest.fixture
def make_source() -> Callable[..., InMemoryArtifactSource]:
    def _make(per_version: dict[str, dict[str, dict[str, list[Instruction] | None]]]) -> InMemoryArtifactSource:
        """per_version: version -> class name -> bodies"""
        source = InMemoryArtifactSource()
        for version, classes in per_version.items():
            for class_name, bodies in classes.items():
                source.add(
                    version,
                    class_name,
                    render_listing(class_name, list(bodies)),
                    render_disassembly(class_name, bodies),
                )
        return source

    return _make
