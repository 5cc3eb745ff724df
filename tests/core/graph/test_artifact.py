"""Tests for artifact descriptors, exclusions, and declarations."""

from __future__ import annotations

import pytest

from artifactgraph.core.graph import (
    DEFAULT_SCOPE,
    ArtifactDescriptor,
    DependencyDeclaration,
    Exclusion,
    format_id,
    parse_identity,
)


class TestArtifactDescriptorParse:
    """Tests for parsing coordinates."""

    def test_three_part_coordinate(self) -> None:
        a = ArtifactDescriptor.parse("org.example:core:1.0")
        assert (a.group, a.name, a.version) == ("org.example", "core", "1.0")
        assert a.type == "jar"
        assert a.classifier is None

    def test_type_and_classifier(self) -> None:
        a = ArtifactDescriptor.parse("org.example:core:1.0:test-jar:tests")
        assert a.type == "test-jar"
        assert a.classifier == "tests"

    def test_keyword_arguments_are_passed_through(self) -> None:
        a = ArtifactDescriptor.parse("g:a:1", scope="runtime", optional=True)
        assert a.scope == "runtime"
        assert a.optional is True

    @pytest.mark.parametrize("text", ["g:a", "g::1", "g:a:1:jar:c:extra", ""])
    def test_malformed_coordinates_raise(self, text: str) -> None:
        with pytest.raises(ValueError):
            ArtifactDescriptor.parse(text)


class TestArtifactDescriptorIdentity:
    """Identity ignores version and type."""

    def test_identity_triple(self) -> None:
        a = ArtifactDescriptor("g", "a", "1", classifier="sources")
        assert a.identity == ("g", "a", "sources")

    def test_versions_share_identity(self) -> None:
        assert ArtifactDescriptor("g", "a", "1").identity == ArtifactDescriptor("g", "a", "2").identity

    def test_id_renders_empty_classifier(self) -> None:
        assert ArtifactDescriptor("g", "a", "1").id == "g:a:"

    def test_coordinate_omits_default_type(self) -> None:
        assert ArtifactDescriptor("g", "a", "1").coordinate == "g:a:1"
        assert ArtifactDescriptor("g", "a", "1", "war").coordinate == "g:a:1:war"
        assert str(ArtifactDescriptor("g", "a", "1", classifier="c")) == "g:a:1:jar:c"

    def test_system_scope(self) -> None:
        assert ArtifactDescriptor("g", "a", "1", scope="system").is_system
        assert not ArtifactDescriptor("g", "a", "1").is_system


class TestIdentityHelpers:
    def test_parse_identity_without_classifier(self) -> None:
        assert parse_identity("g:a") == ("g", "a", None)

    def test_parse_identity_with_classifier(self) -> None:
        assert parse_identity("g:a:tests") == ("g", "a", "tests")

    def test_parse_identity_empty_classifier(self) -> None:
        assert parse_identity("g:a:") == ("g", "a", None)

    def test_parse_identity_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_identity("just-a-name")

    def test_format_id(self) -> None:
        assert format_id("g", "a", None) == "g:a:"
        assert format_id("g", "a", "c") == "g:a:c"


class TestExclusion:
    """Tests for exclusion parsing and matching."""

    def test_exact_match(self) -> None:
        exclusion = Exclusion.parse("x:log")
        assert exclusion.matches("x", "log")
        assert not exclusion.matches("x", "other")
        assert not exclusion.matches("y", "log")

    def test_wildcard_name(self) -> None:
        exclusion = Exclusion("x", "*")
        assert exclusion.matches("x", "anything")
        assert not exclusion.matches("y", "anything")

    def test_full_wildcard(self) -> None:
        assert Exclusion("*", "*").matches("any", "thing")

    def test_str(self) -> None:
        assert str(Exclusion("x", "log")) == "x:log"

    def test_malformed(self) -> None:
        with pytest.raises(ValueError):
            Exclusion.parse("x:log:1")


class TestDependencyDeclaration:
    def test_to_descriptor_defaults_scope(self) -> None:
        decl = DependencyDeclaration("g", "a", "1")
        assert decl.to_descriptor().scope == DEFAULT_SCOPE

    def test_to_descriptor_keeps_fields(self) -> None:
        decl = DependencyDeclaration(
            "g", "a", "1", "war", "c", scope="runtime", optional=True, system_path="/x"
        )
        a = decl.to_descriptor()
        assert (a.type, a.classifier, a.scope, a.optional, a.system_path) == (
            "war", "c", "runtime", True, "/x",
        )
