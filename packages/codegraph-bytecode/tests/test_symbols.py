"""
Symbol Extractor tests.
"""

import pytest
from structlog.testing import capture_logs

from codegraph_bytecode import SymbolExtractor, extract_symbol


class TestExtractSymbol:
    """extract_symbol over single javap -c lines."""

    def test_method_reference(self):
        line = "invokevirtual #12 // Method net/minecraft/Foo.bar:()V"
        assert extract_symbol(line) == "net/minecraft/Foo.bar:()V"

    def test_stable_api_is_dropped(self):
        line = "invokevirtual #12 // Method java/lang/Object.toString:()Ljava/lang/String;"
        assert extract_symbol(line) is None

    @pytest.mark.parametrize(
        "line, expected",
        [
            (
                "       5: invokeinterface #33,  1          // InterfaceMethod net/minecraft/world/Container.getItem:(I)V",
                "net/minecraft/world/Container.getItem:(I)V",
            ),
            (
                "       9: getstatic     #40                 // Field net/minecraft/core/Registries.ITEM:Lnet/minecraft/core/Registry;",
                "net/minecraft/core/Registries.ITEM:Lnet/minecraft/core/Registry;",
            ),
            (
                "      14: checkcast     #47                 // class net/minecraft/server/level/ServerPlayer",
                "net/minecraft/server/level/ServerPlayer",
            ),
        ],
    )
    def test_recognized_keywords(self, line, expected):
        assert extract_symbol(line) == expected

    def test_surrounding_whitespace_trimmed(self):
        assert extract_symbol("x // Method   net/minecraft/A.b:()V   ") == "net/minecraft/A.b:()V"

    def test_stable_field_type_with_platform_owner_only_in_descriptor(self):
        """The candidate itself carries the prefix, so it counts."""
        line = "getfield #2 // Field java/util/Map.value:Lnet/minecraft/X;"
        assert extract_symbol(line) == "java/util/Map.value:Lnet/minecraft/X;"

    def test_line_without_comment(self):
        assert extract_symbol("       0: aload_0") is None

    def test_empty_and_garbage_never_raise(self):
        assert extract_symbol("") is None
        assert extract_symbol("//") is None
        assert extract_symbol("// Method") is None
        assert extract_symbol("\x00\x01 net/minecraft/") is None

    def test_custom_prefix(self):
        line = "invokestatic #3 // Method org/bukkit/craftbukkit/v1_20_R3/CraftServer.get:()V"
        assert extract_symbol(line, "org/bukkit/craftbukkit/") == "org/bukkit/craftbukkit/v1_20_R3/CraftServer.get:()V"
        assert extract_symbol(line) is None


class TestUnrecognizedKeywords:
    """Platform references the extractor cannot classify are warned about, never fatal."""

    def test_unknown_keyword_warns(self):
        line = '      3: ldc           #9                  // String net/minecraft/hidden'
        with capture_logs() as logs:
            assert extract_symbol(line, version="1.20.4") is None

        warnings = [entry for entry in logs if entry["log_level"] == "warning"]
        assert len(warnings) == 1
        assert warnings[0]["event"] == "unprocessed_mapping_line"
        assert warnings[0]["keyword"] == "String"
        assert warnings[0]["version"] == "1.20.4"

    def test_prefix_without_marker_warns(self):
        with capture_logs() as logs:
            assert extract_symbol("  Signature: net/minecraft/Foo") is None
        assert [entry["event"] for entry in logs] == ["unprocessed_mapping_line"]

    def test_stable_lines_are_silent(self):
        with capture_logs() as logs:
            extract_symbol("invokevirtual #12 // Method java/lang/Object.toString:()Ljava/lang/String;")
            extract_symbol("ldc #4 // String hello")
        assert logs == []


class TestSymbolExtractor:
    def test_bound_prefix(self):
        extractor = SymbolExtractor("net/minecraft/")
        assert extractor.extract("x // class net/minecraft/A") == "net/minecraft/A"
        assert extractor.namespace_prefix == "net/minecraft/"
