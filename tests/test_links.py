"""Tests for links.py — seeding, fixed-point expansion and the dependency graph."""

from __future__ import annotations

import networkx as nx
import pytest

from blueprint_layout.api import analyze
from blueprint_layout.builder import build_tree, random_tree
from blueprint_layout.errors import InvalidModeError, InvalidTreeError
from blueprint_layout.links import (
    dependency_graph,
    entry_points,
    exit_points,
    expand_links,
    resolve_links,
    seed_links,
)
from blueprint_layout.tree import Tree
from blueprint_layout.types import Link, NodeKind

# ─── Helpers ──────────────────────────────────────────────────────────────────


def job() -> dict:
    return {"kind": "job"}


def seq(*children: dict) -> dict:
    return {"kind": "task", "mode": "sequential", "children": list(children)}


def par(*children: dict) -> dict:
    return {"kind": "task", "mode": "parallel", "children": list(children)}


def flattened(plan: dict) -> Tree:
    tree = build_tree(plan)
    tree.flatten()
    return tree


def label_pairs(links: list[Link]) -> list[tuple[str, str]]:
    """Links as (src label, dst label) pairs; barriers show as 'barrier'."""
    return [(link.src.label, link.dst.label) for link in links]


# ─── Seeding ──────────────────────────────────────────────────────────────────


class TestSeedLinks:
    def test_sequential_pair(self):
        """Seq root with two leaves seeds child0 → child1."""
        tree = flattened(seq(job(), job()))
        assert label_pairs(seed_links(tree.nodes)) == [("2", "3")]

    def test_sequential_chain(self):
        tree = flattened(seq(job(), job(), job()))
        assert label_pairs(seed_links(tree.nodes)) == [("2", "3"), ("3", "4")]

    def test_parallel_seeds_nothing(self):
        tree = flattened(par(job(), job(), job()))
        assert seed_links(tree.nodes) == []

    def test_single_child_seeds_nothing(self):
        tree = flattened(seq(job()))
        assert seed_links(tree.nodes) == []

    def test_seeds_follow_pre_order(self):
        """Seeds of the root come before seeds of nested composites."""
        tree = flattened(seq(seq(job(), job()), job()))
        assert label_pairs(seed_links(tree.nodes)) == [("2", "5"), ("3", "4")]

    def test_modeless_composite(self):
        tree = Tree()
        root = tree.create_root(NodeKind.Composite)
        root.append_child(NodeKind.Leaf)
        tree.flatten()
        with pytest.raises(InvalidModeError):
            seed_links(tree.nodes)


# ─── Entry / Exit Points ──────────────────────────────────────────────────────


class TestEntryExitPoints:
    def test_sequential(self):
        tree = flattened(seq(job(), job(), job()))
        first, _, last = tree.root.children
        assert entry_points(tree.root) == [first]
        assert exit_points(tree.root) == [last]

    def test_parallel(self):
        tree = flattened(par(job(), job()))
        assert entry_points(tree.root) == tree.root.children
        assert exit_points(tree.root) == tree.root.children

    def test_childless_composite(self):
        tree = flattened(par())
        with pytest.raises(InvalidTreeError):
            entry_points(tree.root)


# ─── Expansion ────────────────────────────────────────────────────────────────


class TestExpandLinks:
    def test_leaf_links_unchanged(self):
        """Links between leaves need no expansion: one pass, same list."""
        tree = flattened(seq(job(), job()))
        seeds = seed_links(tree.nodes)
        links, passes = expand_links(seeds)
        assert links == seeds
        assert passes == 1

    def test_sequential_destination_uses_first_child(self):
        tree = flattened(seq(job(), seq(job(), job())))
        links, _ = expand_links(seed_links(tree.nodes))
        assert label_pairs(links) == [("2", "4"), ("4", "5")]

    def test_parallel_destination_uses_every_child(self):
        tree = flattened(seq(job(), par(job(), job())))
        links, _ = expand_links(seed_links(tree.nodes))
        assert label_pairs(links) == [("2", "4"), ("2", "5")]

    def test_sequential_source_uses_last_child(self):
        tree = flattened(seq(seq(job(), job()), job()))
        links, _ = expand_links(seed_links(tree.nodes))
        assert label_pairs(links) == [("4", "5"), ("3", "4")]

    def test_parallel_source_uses_every_child(self):
        tree = flattened(seq(par(job(), job()), job()))
        links, _ = expand_links(seed_links(tree.nodes))
        assert label_pairs(links) == [("3", "5"), ("4", "5")]

    def test_parallel_pair_without_barrier_is_cartesian(self):
        """Without barrier insertion two 2-wide parallels produce 2 × 2 links."""
        tree = flattened(seq(par(job(), job()), par(job(), job())))
        links = resolve_links(tree)
        assert sorted(label_pairs(links)) == [("3", "6"), ("3", "7"), ("4", "6"), ("4", "7")]

    def test_input_not_mutated(self):
        tree = flattened(seq(job(), par(job(), job())))
        seeds = seed_links(tree.nodes)
        before = list(seeds)
        expand_links(seeds)
        assert seeds == before

    def test_deep_destination_counts_passes(self):
        """A destination two composites deep needs two rewriting passes plus a final check."""
        tree = flattened(seq(job(), seq(seq(job(), job()), job())))
        links, passes = expand_links(seed_links(tree.nodes))
        assert label_pairs(links) == [("2", "5"), ("6", "7"), ("5", "6")]
        assert passes == 3

    def test_pass_bound_exceeded(self):
        tree = flattened(seq(job(), seq(seq(job(), job()), job())))
        with pytest.raises(InvalidTreeError):
            expand_links(seed_links(tree.nodes), max_passes=1)

    def test_duplicates_collapsed(self):
        tree = flattened(seq(job(), job()))
        a, b = tree.root.children
        links, _ = expand_links([Link(a, b), Link(a, b)])
        assert links == [Link(a, b)]

    def test_childless_composite_endpoint(self):
        """A zero-child composite reached during expansion is an InvalidTreeError."""
        tree = flattened(seq(job(), {"kind": "task", "mode": "parallel"}))
        with pytest.raises(InvalidTreeError):
            resolve_links(tree)


class TestResolveLinks:
    def test_stores_links_on_tree(self):
        tree = flattened(seq(job(), job()))
        links = resolve_links(tree)
        assert tree.links is links

    def test_barrier_join_and_fork(self):
        """Seq[Par(A,B), Par(C,D)] resolves through the barrier."""
        tree = build_tree(seq(par(job(), job()), par(job(), job())))
        analyze(tree)
        assert label_pairs(tree.links) == [
            ("3", "barrier"),
            ("4", "barrier"),
            ("barrier", "6"),
            ("barrier", "7"),
        ]
        barrier = tree.barriers[0]
        assert all(barrier in (link.src, link.dst) for link in tree.links)

    def test_nested_sequential_in_parallel(self):
        tree = flattened(par(seq(job(), job()), job()))
        assert label_pairs(resolve_links(tree)) == [("3", "4")]


# ─── Dependency Graph ─────────────────────────────────────────────────────────


class TestDependencyGraph:
    def test_barrier_graph(self):
        tree = build_tree(seq(par(job(), job()), par(job(), job())))
        analyze(tree)
        g = dependency_graph(tree)
        barrier = tree.barriers[0]
        assert g.number_of_nodes() == 5
        assert g.number_of_edges() == 4
        assert g.in_degree(barrier) == 2 and g.out_degree(barrier) == 2
        assert g.nodes[barrier]["id"] is None
        assert g.nodes[barrier]["kind"] is NodeKind.Barrier

    def test_unlinked_leaves_present(self):
        tree = build_tree(par(job(), job(), job()))
        analyze(tree)
        g = dependency_graph(tree)
        assert g.number_of_nodes() == 3
        assert g.number_of_edges() == 0


# ─── Link Properties ──────────────────────────────────────────────────────────


@pytest.mark.parametrize("seed", range(25))
def test_resolved_links_join_childless_nodes(seed: int) -> None:
    """Endpoints are leaves/barriers, expansion is idempotent, and the result is acyclic."""
    tree = random_tree(seed=seed)
    analyze(tree)

    for link in tree.links:
        assert not link.src.children
        assert not link.dst.children
        assert link.src.kind is not NodeKind.Composite
        assert link.dst.kind is not NodeKind.Composite

    again, passes = expand_links(tree.links)
    assert again == tree.links
    assert passes == 1

    _, seed_passes = expand_links(seed_links(tree.nodes))
    assert seed_passes <= tree.depth + 2

    assert nx.is_directed_acyclic_graph(dependency_graph(tree))
