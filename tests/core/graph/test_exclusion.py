"""Tests for path-scoped dependency exclusion."""

from __future__ import annotations

from artifactgraph.core.graph import (
    Exclusion,
    ExclusionResolver,
    apply_exclusions,
    contributed_exclusions,
)
from tests.helpers import FakeRepository, dep, edge_labels, labels, make_graph


class TestContributedExclusions:
    def test_union_of_declared_exclusions(self, repo: FakeRepository) -> None:
        repo.add(
            "g:a:1",
            dep("g:b:1", exclusions=["x:log"]),
            dep("g:c:1", exclusions=["x:log", "y:*"]),
            "g:d:1",
        )
        repo.add("g:b:1")
        repo.add("g:c:1")
        repo.add("g:d:1")
        graph = repo.build("g:a:1")
        assert contributed_exclusions(graph.root) == {
            Exclusion("x", "log"),
            Exclusion("y", "*"),
        }

    def test_node_without_metadata(self) -> None:
        graph = make_graph("g:a", [("g:a", "g:b")])
        assert contributed_exclusions(graph.root) == frozenset()


class TestExclusionBasics:
    def test_no_exclusions_keeps_everything_but_optional(
        self, webapp_repo: FakeRepository
    ) -> None:
        graph = webapp_repo.build("g:app:1:war")
        result = apply_exclusions(graph)
        assert labels(result) == labels(graph) - {"x:cache"}

    def test_excluded_artifact_and_its_subtree_removed(self, repo: FakeRepository) -> None:
        repo.add("g:a:1", dep("g:b:1", exclusions=["x:log"]))
        repo.add("g:b:1", "x:log:1")
        repo.add("x:log:1", "x:api:1")
        repo.add("x:api:1")
        result = apply_exclusions(repo.build("g:a:1"))
        assert labels(result) == {"g:a", "g:b"}

    def test_exclusion_applies_transitively_below_the_node(
        self, repo: FakeRepository
    ) -> None:
        repo.add("g:a:1", dep("g:b:1", exclusions=["x:log"]))
        repo.add("g:b:1", "g:c:1")
        repo.add("g:c:1", "x:log:1")
        repo.add("x:log:1")
        assert labels(apply_exclusions(repo.build("g:a:1"))) == {"g:a", "g:b", "g:c"}

    def test_exclusion_covers_sibling_dependencies(self, repo: FakeRepository) -> None:
        """Exclusions a module declares apply to all of its dependencies."""
        repo.add("g:a:1", dep("g:b:1", exclusions=["g:c"]), "g:c:1")
        repo.add("g:b:1")
        repo.add("g:c:1")
        assert labels(apply_exclusions(repo.build("g:a:1"))) == {"g:a", "g:b"}

    def test_wildcard_exclusion(self, repo: FakeRepository) -> None:
        repo.add("g:a:1", "g:b:1")
        repo.add("g:b:1", dep("g:c:1", exclusions=["*:*"]))
        repo.add("g:c:1", "x:log:1")
        repo.add("x:log:1")
        assert labels(apply_exclusions(repo.build("g:a:1"))) == {"g:a", "g:b"}

    def test_group_wildcard(self, repo: FakeRepository) -> None:
        repo.add("g:a:1", dep("g:b:1", exclusions=["x:*"]))
        repo.add("g:b:1", "x:log:1", "y:other:1")
        repo.add("x:log:1")
        repo.add("y:other:1")
        assert labels(apply_exclusions(repo.build("g:a:1"))) == {"g:a", "g:b", "y:other"}

    def test_root_is_never_excluded(self, repo: FakeRepository) -> None:
        repo.add("g:a:1", dep("g:b:1", exclusions=["g:a"]))
        repo.add("g:b:1", "g:a:1")
        graph = repo.build("g:a:1")
        result = apply_exclusions(graph)
        assert result.root == graph.root
        assert labels(result) == {"g:a", "g:b"}


class TestPathScoping:
    """An exclusion only affects the paths through the module declaring it."""

    def test_diamond_keeps_artifact_reachable_elsewhere(self, repo: FakeRepository) -> None:
        #  A -+-> B[exclude=X] -+
        #     |                 |
        #     +-> C ------------+-> D ---> X
        repo.add("g:a:1", "g:b:1", "g:c:1")
        repo.add("g:b:1", dep("g:d:1", exclusions=["g:x"]))
        repo.add("g:c:1", "g:d:1")
        repo.add("g:d:1", "g:x:1")
        repo.add("g:x:1")
        result = apply_exclusions(repo.build("g:a:1"))
        assert "g:x" in labels(result)
        assert ("g:d", "g:x") in edge_labels(result)

    def test_excluded_below_declaring_module(self, repo: FakeRepository) -> None:
        repo.add("g:a:1", dep("g:b:1", exclusions=["g:x"]))
        repo.add("g:b:1", "g:x:1")
        repo.add("g:x:1")
        assert labels(apply_exclusions(repo.build("g:a:1"))) == {"g:a", "g:b"}

    def test_exclusion_covers_every_path_below_declaring_module(
        self, repo: FakeRepository
    ) -> None:
        # B excludes X on its dependency on D, which also hides X below E.
        repo.add("g:a:1", "g:b:1")
        repo.add("g:b:1", dep("g:d:1", exclusions=["g:x"]), "g:e:1")
        repo.add("g:d:1")
        repo.add("g:e:1", "g:x:1")
        repo.add("g:x:1")
        assert labels(apply_exclusions(repo.build("g:a:1"))) == {"g:a", "g:b", "g:d", "g:e"}

    def test_excluded_on_every_path(self, repo: FakeRepository) -> None:
        repo.add("g:a:1", "g:b:1", "g:c:1")
        repo.add("g:b:1", dep("g:e:1", exclusions=["g:x"]))
        repo.add("g:c:1", dep("g:f:1", exclusions=["g:x"]))
        repo.add("g:e:1", "g:x:1")
        repo.add("g:f:1", "g:x:1")
        repo.add("g:x:1")
        assert labels(apply_exclusions(repo.build("g:a:1"))) == {
            "g:a", "g:b", "g:c", "g:e", "g:f",
        }

    def test_exclusions_accumulate_down_the_path(self, repo: FakeRepository) -> None:
        repo.add("g:a:1", dep("g:b:1", exclusions=["g:x"]))
        repo.add("g:b:1", dep("g:c:1", exclusions=["g:y"]))
        repo.add("g:c:1", "g:x:1", "g:y:1", "g:z:1")
        repo.add("g:x:1")
        repo.add("g:y:1")
        repo.add("g:z:1")
        assert labels(apply_exclusions(repo.build("g:a:1"))) == {"g:a", "g:b", "g:c", "g:z"}

    def test_node_reached_first_under_exclusion_is_expanded_again(
        self, repo: FakeRepository
    ) -> None:
        # D is first visited through B, where X is excluded, then through C
        # where it is not; the second visit must still reach X.
        repo.add("g:a:1", "g:b:1", "g:c:1")
        repo.add("g:b:1", dep("g:d:1", exclusions=["g:x"]))
        repo.add("g:c:1", "g:e:1")
        repo.add("g:e:1", "g:d:1")
        repo.add("g:d:1", "g:x:1")
        repo.add("g:x:1")
        assert "g:x" in labels(apply_exclusions(repo.build("g:a:1")))

    def test_declaration_of_broken_dependency_still_excludes(
        self, repo: FakeRepository
    ) -> None:
        repo.add("g:a:1", "g:b:1")
        repo.add("g:b:1", dep("g:missing:1", exclusions=["g:x"]), "g:e:1")
        repo.add("g:e:1", "g:x:1")
        repo.add("g:x:1")
        graph = repo.build("g:a:1", tolerate_broken_metadata=True)
        assert "g:x" in labels(graph)
        assert labels(apply_exclusions(graph)) == {"g:a", "g:b", "g:e"}


class TestOptionalAndCycles:
    def test_optional_dependencies_are_not_traversed(self, repo: FakeRepository) -> None:
        repo.add("g:a:1", dep("g:b:1", optional=True))
        repo.add("g:b:1", "g:c:1")
        repo.add("g:c:1")
        assert labels(apply_exclusions(repo.build("g:a:1"))) == {"g:a"}

    def test_optional_reached_otherwise_is_kept(self, repo: FakeRepository) -> None:
        repo.add("g:a:1", dep("g:b:1", optional=True), "g:c:1")
        repo.add("g:c:1", "g:b:1")
        repo.add("g:b:1")
        result = apply_exclusions(repo.build("g:a:1"))
        assert labels(result) == {"g:a", "g:b", "g:c"}
        assert ("g:a", "g:b") in edge_labels(result)

    def test_cycles_terminate(self, repo: FakeRepository) -> None:
        repo.add("g:a:1", "g:b:1")
        repo.add("g:b:1", "g:c:1")
        repo.add("g:c:1", "g:b:1")
        result = ExclusionResolver().resolve(repo.build("g:a:1"))
        assert labels(result) == {"g:a", "g:b", "g:c"}

    def test_deep_chain(self, repo: FakeRepository) -> None:
        """Chains deeper than the interpreter's recursion limit resolve."""
        depth = 3000
        for i in range(depth):
            repo.add(f"g:m{i}:1", f"g:m{i + 1}:1")
        repo.add(f"g:m{depth}:1", dep("g:tail:1", exclusions=["g:x"]))
        repo.add("g:tail:1", "g:x:1")
        repo.add("g:x:1")
        graph = repo.build("g:m0:1")
        result = apply_exclusions(graph)
        assert len(result) == depth + 2
        assert "g:x" not in labels(result)
