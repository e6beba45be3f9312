"""Tests for the core Graph value: adjacency, queries, attributes and mutations."""

import types

import pytest

from mixgraph import (
    Graph,
    InvalidEdgeDescriptor,
    InvalidEntityDescriptor,
    digraph,
    graph,
    is_directed_edge,
    is_undirected_edge,
    multidigraph,
    multigraph,
    other_direction,
    structurally_equal,
)
from mixgraph.engine.core import NodeInfo, parse_edge_description


def assert_consistent(g: Graph) -> None:
    """Degree counters match the stored edge sets and validate() passes."""
    for node, info in g.node_map.items():
        assert info.out_degree == sum(len(s) for s in info.out_edges.values()), node
        assert info.in_degree == sum(len(s) for s in info.in_edges.values()), node
    result = g.validate()
    assert result.valid, result.errors


class TestNodes:
    def test_add_nodes_is_idempotent(self, empty):
        g = empty.add_nodes("a", "b", "a")
        assert g.count_nodes() == 2
        assert g.add_nodes("a") == g

    def test_source_graph_is_untouched(self, empty):
        empty.add_nodes("a")
        assert empty.count_nodes() == 0

    def test_add_nodes_with_attrs_merges(self, empty):
        g = empty.add_nodes_with_attrs(("a", {"x": 1}))
        g = g.add_nodes_with_attrs(("a", {"y": 2}), ("b", {}))
        assert g.attrs_of("a") == {"x": 1, "y": 2}
        assert g.attrs_of("b") == {}
        assert "b" not in g.attrs

    def test_remove_node_removes_incident_edges(self, road_map):
        g = road_map.remove_nodes("rotterdam")
        assert set(g.nodes()) == {"amsterdam", "utrecht", "den_haag", "groningen"}
        assert g.count_unique_edges() == 1
        assert g.out_degree("utrecht") == 1
        assert g.in_degree("den_haag") == 0
        assert g.attrs_of("den_haag") == {"capital": False}
        assert_consistent(g)

    def test_remove_node_drops_its_attributes(self, road_map):
        g = road_map.remove_nodes("den_haag")
        assert "den_haag" not in g.attrs
        assert not g.has_node("den_haag")

    def test_remove_missing_node_is_noop(self, road_map):
        assert road_map.remove_nodes("lelystad") == road_map

    def test_remove_directed_hub(self, pipeline):
        g = pipeline.remove_nodes("compile")
        assert g.count_unique_edges() == 2
        assert g.out_degree("fetch") == 0
        assert g.in_degree("test") == 0
        assert_consistent(g)

    def test_successors_and_predecessors(self, pipeline, road_map):
        assert set(pipeline.successors("compile")) == {"test", "lint"}
        assert set(pipeline.predecessors("package")) == {"test", "lint"}
        assert set(pipeline.predecessors("fetch")) == set()
        expected = {"amsterdam", "utrecht", "den_haag"}
        assert set(road_map.successors("rotterdam")) == expected
        assert set(road_map.predecessors("rotterdam")) == expected

    def test_unknown_node_queries(self, pipeline):
        assert pipeline.out_degree("nope") == 0
        assert pipeline.in_degree("nope") == 0
        assert list(pipeline.successors("nope")) == []
        assert list(pipeline.out_edges("nope")) == []

    def test_container_protocol(self, pipeline):
        assert "fetch" in pipeline
        assert "deploy" not in pipeline
        assert len(pipeline) == 5
        assert set(pipeline) == {"fetch", "compile", "test", "lint", "package"}

    def test_unhashable_is_not_a_node(self, pipeline):
        assert not pipeline.has_node(["fetch"])


class TestEdges:
    def test_build_example(self):
        g = graph(["a", "b"], ["a", "c"], ["b", "d"])
        assert set(g.nodes()) == {"a", "b", "c", "d"}
        assert g.count_unique_edges() == 3
        assert g.count_edges() == 6
        assert len(list(g.find_edges("a", "b"))) == 1
        assert_consistent(g)

    def test_multigraph_example(self):
        g = multigraph(["a", "b"], ["a", "b"], ["a", "b", {"color": "red"}])
        assert g.count_unique_edges() == 3
        assert len({e.id for e in g.edges()}) == 3
        assert len(list(g.find_edges("a", "b"))) == 3
        assert len(list(g.find_edges(color="red"))) == 2
        assert_consistent(g)

    def test_identical_parallel_edges_stay_distinct(self):
        g = multigraph(("a", "b", {"w": 1}), ("a", "b", {"w": 1}))
        assert g.count_unique_edges() == 2

    def test_parallel_suppression_merges_attributes(self, empty):
        g = empty.add_edges(("a", "b", {"x": 1})).add_edges(("a", "b", {"y": 2}))
        assert g.count_unique_edges() == 1
        assert g.attrs_of(("a", "b")) == {"x": 1, "y": 2}

    def test_reverse_description_merges_in_undirected_graph(self):
        g = graph(("a", "b", {"x": 1}), ("b", "a", {"y": 2}))
        assert g.count_unique_edges() == 1
        assert g.attrs_of(("b", "a")) == {"x": 1, "y": 2}

    def test_directed_graph_keeps_both_directions(self):
        g = digraph(("a", "b"), ("b", "a"))
        assert g.count_unique_edges() == 2
        assert_consistent(g)

    def test_duplicate_without_attributes_is_noop(self):
        g = graph(("a", "b", {"x": 1}))
        assert g.add_edges(("a", "b")) == g

    def test_parallel_edges_in_multidigraph(self):
        g = multidigraph(("a", "b"), ("a", "b"))
        assert g.count_edges() == 2
        assert g.out_degree("a") == 2
        assert g.in_degree("b") == 2
        assert_consistent(g)

    def test_weight_shorthand(self):
        g = graph(("a", "b", 5), ("b", "c"))
        assert g.weight("a", "b") == 5
        assert g.weight(("b", "a")) == 5
        assert g.weight("b", "c") == 1

    def test_weight_of_edge_values(self, road_map):
        edge = road_map.find_edge("amsterdam", "utrecht")
        assert road_map.weight(edge) == 45
        assert road_map.weight(other_direction(edge)) == 45

    def test_undirected_edge_degrees(self):
        g = graph(("a", "b"))
        for node in ("a", "b"):
            assert g.out_degree(node) == 1
            assert g.in_degree(node) == 1

    def test_undirected_edge_storage(self):
        g = graph(("a", "b"))
        primary = next(iter(g.node_map["a"].out_edges["b"]))
        assert not primary.mirror
        assert g.node_map["b"].in_edges["a"] == {primary}
        mirror = other_direction(primary)
        assert g.node_map["b"].out_edges["a"] == {mirror}
        assert g.node_map["a"].in_edges["b"] == {mirror}
        assert len(g.attrs) == 0

    def test_directed_self_loop(self):
        g = digraph(("a", "a", {"k": 1}))
        assert g.out_degree("a") == 1
        assert g.in_degree("a") == 1
        assert len(list(g.find_edges("a", "a"))) == 1
        assert_consistent(g)
        g = g.remove_edges(("a", "a"))
        assert g.out_degree("a") == 0
        assert g.in_degree("a") == 0
        assert g.count_edges() == 0
        assert_consistent(g)

    def test_undirected_self_loop(self):
        g = graph(("a", "a", {"k": 1}))
        assert g.count_edges() == 1
        assert g.count_unique_edges() == 1
        assert g.out_degree("a") == 1
        assert g.in_degree("a") == 1
        assert g.attrs_of(("a", "a")) == {"k": 1}
        assert_consistent(g)
        g = g.remove_edges(("a", "a"))
        assert g.count_edges() == 0
        assert g.out_degree("a") == 0
        assert_consistent(g)

    def test_self_loop_next_to_other_edges(self):
        g = digraph(("a", "a"), ("a", "b"), ("c", "a"))
        assert g.out_degree("a") == 2
        assert g.in_degree("a") == 2
        assert_consistent(g)

    def test_mixed_graph(self):
        g = graph(("a", "b")).add_directed_edges(("b", "c"))
        assert is_directed_edge(g.find_edge("b", "c"))
        assert g.find_edge("c", "b") is None
        assert is_undirected_edge(g.find_edge("b", "a"))
        assert g.stats().directed_edge_count == 1
        assert g.stats().undirected_edge_count == 1
        assert_consistent(g)

    def test_forced_directed_merges_into_undirected(self):
        g = graph(("a", "b", {"x": 1})).add_directed_edges(("a", "b", {"y": 2}))
        assert g.count_unique_edges() == 1
        assert is_undirected_edge(g.find_edge("a", "b"))
        assert g.attrs_of(("a", "b")) == {"x": 1, "y": 2}

    def test_default_edge_merges_into_opposite_directed_edge(self):
        g = graph().add_directed_edges(("b", "a", {"x": 1})).add_edges(("a", "b", {"y": 2}))
        assert g.count_unique_edges() == 1
        assert is_directed_edge(g.find_edge("b", "a"))
        assert g.attrs_of(("b", "a")) == {"x": 1, "y": 2}

    def test_directed_to_undirected_upgrade(self):
        g = digraph(("a", "b", {"c": 1})).add_undirected_edges(("a", "b", {"d": 2}))
        assert g.count_unique_edges() == 1
        edge = g.find_edge("a", "b")
        assert is_undirected_edge(edge)
        assert g.attrs_of(edge) == {"c": 1, "d": 2}
        assert not any(is_directed_edge(e) for e in g.edges())
        assert_consistent(g)

    def test_upgrade_merges_both_directions(self):
        g = digraph(("a", "b", {"x": 1, "k": "fwd"}), ("b", "a", {"y": 2, "k": "bwd"}))
        g = g.add_undirected_edges(("a", "b", {"z": 3}))
        assert g.count_unique_edges() == 1
        assert g.attrs_of(("a", "b")) == {"x": 1, "y": 2, "k": "bwd", "z": 3}
        assert_consistent(g)

    def test_upgrade_from_reverse_direction_only(self):
        g = digraph(("b", "a", {"x": 1})).add_undirected_edges(("a", "b"))
        assert g.count_unique_edges() == 1
        assert is_undirected_edge(g.find_edge("a", "b"))
        assert g.attrs_of(("a", "b")) == {"x": 1}

    def test_forced_undirected_onto_undirected_merges(self):
        g = graph(("a", "b", {"x": 1}))
        edge_id = g.find_edge("a", "b").id
        g = g.add_undirected_edges(("b", "a", {"y": 2}))
        assert g.count_unique_edges() == 1
        assert g.find_edge("a", "b").id == edge_id
        assert g.attrs_of(("a", "b")) == {"x": 1, "y": 2}

    def test_multigraph_never_upgrades(self):
        g = multidigraph(("a", "b")).add_undirected_edges(("a", "b"))
        assert g.count_unique_edges() == 2
        assert_consistent(g)

    def test_mirror_symmetry(self, road_map):
        stored = set(road_map.edges())
        for edge in stored:
            twin = other_direction(edge)
            assert other_direction(twin) == edge
            assert twin in stored
            assert [edge.mirror, twin.mirror].count(False) == 1

    def test_has_edge(self, pipeline):
        edge = pipeline.find_edge("fetch", "compile")
        assert pipeline.has_edge(edge)
        assert pipeline.has_edge("fetch", "compile")
        assert pipeline.has_edge(("fetch", "compile"))
        assert not pipeline.has_edge("compile", "fetch")
        assert not pipeline.remove_edges(edge).has_edge(edge)

    def test_has_edge_filters_by_attributes(self):
        g = graph(("a", "b", {"color": "blue"}))
        assert g.has_edge(("a", "b", {"color": "blue"}))
        assert g.has_edge(("b", "a", {"color": "blue"}))
        assert not g.has_edge(("a", "b", {"color": "red"}))
        assert not g.has_edge(("a", "b", 3))

    def test_invalid_descriptions(self, empty):
        with pytest.raises(InvalidEdgeDescriptor):
            empty.add_edges(("a",))
        with pytest.raises(InvalidEdgeDescriptor):
            empty.add_edges(("a", "b", "c", "d"))
        with pytest.raises(InvalidEdgeDescriptor):
            empty.add_edges(("a", "b", "heavy"))
        with pytest.raises(InvalidEdgeDescriptor):
            empty.add_edges(("a", "b", True))
        with pytest.raises(InvalidEdgeDescriptor):
            empty.add_edges("ab")


class TestParseEdgeDescription:
    def test_forms(self):
        assert parse_edge_description(("a", "b")) == ("a", "b", None)
        assert parse_edge_description(["a", "b", 2.5]) == ("a", "b", {"weight": 2.5})
        assert parse_edge_description(("a", "b", {"c": 1})) == ("a", "b", {"c": 1})

    def test_invalid_edge_descriptor_is_value_error(self):
        with pytest.raises(ValueError):
            parse_edge_description(("a", "b", object()))


class TestFindEdges:
    def test_both_endpoints(self, pipeline):
        edges = list(pipeline.find_edges("compile", "test"))
        assert [(e.src, e.dest) for e in edges] == [("compile", "test")]

    def test_src_only(self, pipeline):
        assert {e.dest for e in pipeline.find_edges(src="compile")} == {"test", "lint"}

    def test_dest_only(self, pipeline):
        edges = list(pipeline.find_edges({"dest": "package"}))
        assert {e.src for e in edges} == {"test", "lint"}
        assert all(e.dest == "package" for e in edges)

    def test_attribute_only(self, pipeline):
        assert {e.dest for e in pipeline.find_edges(stage="verify")} == {"test", "lint"}

    def test_src_and_attribute(self, pipeline):
        assert len(list(pipeline.find_edges({"src": "compile", "stage": "verify"}))) == 2
        assert list(pipeline.find_edges({"src": "fetch", "stage": "verify"})) == []

    def test_positional_endpoints_with_filter(self, pipeline):
        assert len(list(pipeline.find_edges("compile", "test", stage="verify"))) == 1
        assert list(pipeline.find_edges("compile", "test", stage="ship")) == []

    def test_submap_match(self, road_map):
        edges = list(road_map.find_edges(weight=78))
        assert len(edges) == 2  # both instances of the undirected edge
        assert len({e.id for e in edges}) == 1
        assert road_map.attrs_of(edges[0]) == {"weight": 78, "toll": True}

    def test_missing_key_does_not_match_none(self, pipeline):
        assert list(pipeline.find_edges(stage=None)) == []

    def test_no_matches(self, pipeline):
        assert list(pipeline.find_edges(src="nope")) == []
        assert list(pipeline.find_edges("fetch", "package")) == []
        assert pipeline.find_edge(stage="ship") is None

    def test_all_edges(self, pipeline):
        assert len(list(pipeline.find_edges())) == 5

    def test_results_are_lazy(self, pipeline):
        result = pipeline.find_edges(src="compile")
        assert isinstance(result, types.GeneratorType)
        assert next(result).src == "compile"

    def test_find_edge_first_match(self, pipeline):
        edge = pipeline.find_edge("fetch", "compile")
        assert (edge.src, edge.dest) == ("fetch", "compile")

    def test_bad_arguments(self, pipeline):
        with pytest.raises(TypeError):
            pipeline.find_edges("fetch")
        with pytest.raises(TypeError):
            pipeline.find_edges("a", "b", "c")

    def test_edge_description_to_edge(self, pipeline):
        edge = pipeline.edge_description_to_edge(("compile", "lint", {"stage": "verify"}))
        assert (edge.src, edge.dest) == ("compile", "lint")
        assert pipeline.edge_description_to_edge(edge) is edge
        assert pipeline.edge_description_to_edge(("lint", "compile")) is None


class TestAttributes:
    def test_missing_attributes_are_empty(self, pipeline):
        assert pipeline.attrs_of("fetch") == {}
        assert pipeline.attr("fetch", "color") is None
        assert pipeline.attr("fetch", "color", "grey") == "grey"

    def test_unknown_entity(self, pipeline):
        with pytest.raises(InvalidEntityDescriptor):
            pipeline.attrs_of("deploy")
        with pytest.raises(InvalidEntityDescriptor):
            pipeline.attrs_of(("package", "fetch"))
        with pytest.raises(KeyError):
            pipeline.set_attrs("deploy", {"x": 1})

    def test_malformed_description(self, pipeline):
        with pytest.raises(InvalidEdgeDescriptor):
            pipeline.attrs_of(("fetch", "compile", "oops"))

    def test_set_attrs_replaces(self, road_map):
        g = road_map.set_attrs(("amsterdam", "rotterdam"), {"lanes": 4})
        assert g.attrs_of(("rotterdam", "amsterdam")) == {"lanes": 4}
        assert road_map.attrs_of(("amsterdam", "rotterdam")) == {"weight": 78, "toll": True}

    def test_add_attrs_merges(self, road_map):
        g = road_map.add_attrs("den_haag", {"capital": True, "province": "ZH"})
        assert g.attrs_of("den_haag") == {"capital": True, "province": "ZH"}
        g = g.add_attr("groningen", "province", "GR")
        assert g.attr("groningen", "province") == "GR"

    def test_remove_attrs(self, road_map):
        edge = road_map.find_edge("amsterdam", "rotterdam")
        g = road_map.remove_attrs(edge, ["toll", "unknown"])
        assert g.attrs_of(edge) == {"weight": 78}
        g = g.remove_attr(edge, "weight")
        assert g.attrs_of(edge) == {}
        assert edge.id not in g.attrs

    def test_empty_set_attrs_deletes_entry(self, road_map):
        g = road_map.set_attrs("den_haag", {})
        assert "den_haag" not in g.attrs

    def test_mirrors_share_attributes(self, road_map):
        edge = road_map.find_edge("utrecht", "rotterdam")
        g = road_map.add_attrs(edge, {"scenic": True})
        assert g.attr(other_direction(edge), "scenic") is True

    def test_attribute_changes_share_adjacency(self, road_map):
        g = road_map.add_attr("groningen", "x", 1)
        assert g.node_map is road_map.node_map

    def test_resolve(self, road_map):
        edge = road_map.find_edge("amsterdam", "utrecht")
        assert road_map.resolve(edge) == edge.id
        assert road_map.resolve("groningen") == "groningen"
        assert road_map.resolve(("amsterdam", "utrecht", 45)) == edge.id
        with pytest.raises(InvalidEntityDescriptor):
            road_map.resolve(("amsterdam", "utrecht", 46))

    def test_tuple_node_ids_resolve_as_nodes(self, empty):
        g = empty.add_nodes_with_attrs((("x", "y"), {"pos": 1}))
        assert g.attrs_of(("x", "y")) == {"pos": 1}

    def test_removed_edge_value_is_rejected(self):
        g = graph(("a", "b"))
        edge = g.find_edge("a", "b")
        g = g.remove_edges(edge)
        with pytest.raises(InvalidEntityDescriptor):
            g.set_attrs(edge, {"x": 1})
        with pytest.raises(InvalidEntityDescriptor):
            g.attrs_of(edge)
        with pytest.raises(InvalidEntityDescriptor):
            g.remove_attrs(other_direction(edge), ["x"])
        assert g.validate().valid

    def test_edge_value_from_before_transpose_is_rejected(self):
        g = digraph(("a", "b", {"w": 1}))
        old = g.find_edge("a", "b")
        flipped = g.transpose()
        with pytest.raises(InvalidEntityDescriptor):
            flipped.add_attrs(old, {"y": 2})
        new = flipped.find_edge("b", "a")
        assert flipped.add_attrs(new, {"y": 2}).attrs_of(new) == {"w": 1, "y": 2}

    def test_undirected_edge_value_survives_transpose(self, road_map):
        edge = road_map.find_edge("amsterdam", "rotterdam")
        assert road_map.transpose().attr(edge, "toll") is True

    def test_undirected_self_loop_mirror_resolves(self):
        g = graph(("a", "a", {"k": 1}))
        edge = g.find_edge("a", "a")
        assert g.attrs_of(other_direction(edge)) == {"k": 1}


class TestRemoveEdges:
    def test_remove_undirected_edge(self):
        g = graph(("a", "b", {"x": 1})).remove_edges(("a", "b"))
        assert g.count_edges() == 0
        assert set(g.nodes()) == {"a", "b"}
        assert g.attrs == {}
        for node in ("a", "b"):
            assert g.out_degree(node) == 0
            assert g.in_degree(node) == 0
        assert_consistent(g)

    def test_remove_via_mirror(self):
        g = graph(("a", "b")).remove_edges(("b", "a"))
        assert g.count_edges() == 0
        assert_consistent(g)

    def test_remove_edge_value(self, road_map):
        edge = road_map.find_edge("rotterdam", "den_haag")
        g = road_map.remove_edges(edge)
        assert not g.has_edge("den_haag", "rotterdam")
        assert g.count_unique_edges() == 3
        assert_consistent(g)

    def test_remove_missing_description_is_noop(self, road_map):
        g = road_map.remove_edges(("groningen", "amsterdam"), ("nowhere", "else"))
        assert g == road_map
        assert structurally_equal(g, road_map)

    def test_remove_stale_edge_value_is_noop(self, road_map):
        stale = graph(("amsterdam", "utrecht")).find_edge("amsterdam", "utrecht")
        assert road_map.remove_edges(stale) == road_map

    def test_remove_by_attributes(self):
        g = multigraph(("a", "b", {"c": "red"}), ("a", "b", {"c": "blue"}))
        g = g.remove_edges(("a", "b", {"c": "red"}))
        assert g.count_unique_edges() == 1
        assert g.find_edge("a", "b", c="blue") is not None
        assert_consistent(g)

    def test_remove_directed_edge_in_mixed_graph(self):
        g = graph(("a", "b")).add_directed_edges(("a", "c"))
        g = g.remove_edges(("a", "c"))
        assert g.out_degree("a") == 1
        assert g.in_degree("c") == 0
        assert_consistent(g)

    def test_remove_all(self, road_map):
        g = road_map.remove_all()
        assert g.count_nodes() == 0
        assert (g.undirected, g.allow_parallel) == (True, False)


class TestTranspose:
    def test_reverses_directed_edges(self, pipeline):
        g = pipeline.transpose()
        assert set(g.successors("compile")) == {"fetch"}
        assert g.find_edge("compile", "test") is None
        assert g.attrs_of(("test", "compile")) == {"stage": "verify"}
        assert g.out_degree("package") == 2
        assert g.in_degree("package") == 0
        assert_consistent(g)

    def test_involution(self, pipeline):
        twice = pipeline.transpose().transpose()
        assert structurally_equal(twice, pipeline)
        assert twice == pipeline

    def test_undirected_edges_unaffected(self, road_map):
        g = road_map.add_edges(("groningen", "groningen", {"ring": True}))
        assert g.transpose() == g

    def test_mixed_graph(self):
        g = graph(("a", "b", {"u": 1})).add_directed_edges(("b", "c", {"w": 1})).transpose()
        assert g.attrs_of(("c", "b")) == {"w": 1}
        assert g.find_edge("b", "c") is None
        assert g.attrs_of(("a", "b")) == {"u": 1}
        assert_consistent(g)

    def test_source_untouched(self, pipeline):
        pipeline.transpose()
        assert set(pipeline.successors("fetch")) == {"compile"}


class TestValidate:
    def test_fixtures_are_valid(self, road_map, pipeline):
        assert road_map.validate().valid
        assert pipeline.validate().valid

    def test_detects_bad_degree(self):
        g = Graph(node_map={"a": NodeInfo(out_degree=1)})
        result = g.validate()
        assert not result.valid
        assert any("out_degree" in err for err in result.errors)

    def test_detects_orphaned_attributes(self):
        g = Graph(node_map={"a": NodeInfo()}, attrs={"b": {"x": 1}})
        result = g.validate()
        assert not result.valid
        assert any("non-existent node" in err for err in result.errors)

    def test_detects_missing_mirror(self):
        g = graph(("a", "b"))
        primary = next(iter(g.node_map["a"].out_edges["b"]))
        broken = Graph(
            node_map={
                "a": NodeInfo(out_edges={"b": frozenset({primary})}, out_degree=1),
                "b": NodeInfo(in_edges={"a": frozenset({primary})}, in_degree=1),
            }
        )
        result = broken.validate()
        assert not result.valid
        assert any("mirror" in err for err in result.errors)


class TestConsistencyAcrossOperations:
    def test_degree_consistency_after_mixed_operations(self):
        g = multigraph(("a", "b"), ("b", "c", 2), ("c", "c"))
        steps = [
            lambda g: g.add_directed_edges(("a", "c"), ("c", "a"), ("a", "a")),
            lambda g: g.add_undirected_edges(("d", "a", {"x": 1})),
            lambda g: g.add_edges(("a", "b")),
            lambda g: g.remove_edges(("a", "b")),
            lambda g: g.remove_nodes("c"),
            lambda g: g.transpose(),
            lambda g: g.add_edges(("e", "e"), ("e", "a")),
            lambda g: g.remove_edges(("a", "a"), ("e", "e")),
            lambda g: g.remove_nodes("a"),
        ]
        for step in steps:
            g = step(g)
            assert_consistent(g)
        assert set(g.nodes()) == {"b", "d", "e"}
        assert g.count_edges() == 0

    def test_derivations_do_not_interfere(self):
        base = graph(("a", "b"))
        left = base.add_edges(("b", "c"))
        right = base.remove_nodes("b")
        assert base.count_unique_edges() == 1
        assert base.out_degree("b") == 1
        assert left.count_unique_edges() == 2
        assert right.count_unique_edges() == 0
        assert base.validate().valid


class TestStatsAndEquality:
    def test_stats(self, road_map):
        s = road_map.stats()
        assert s.node_count == 5
        assert s.edge_count == 4
        assert s.undirected_edge_count == 4
        assert s.directed_edge_count == 0
        assert s.self_loop_count == 0

    def test_graphs_are_not_hashable(self, road_map):
        with pytest.raises(TypeError):
            hash(road_map)
        with pytest.raises(TypeError):
            hash(road_map.node_map["amsterdam"])

    def test_repr(self, road_map):
        assert repr(road_map) == "Graph(nodes=5, edges=4, undirected=True, allow_parallel=False)"

    def test_structural_equality_ignores_edge_ids(self):
        a = graph(("x", "y", {"w": 1}))
        b = graph(("y", "x", {"w": 1}))
        assert a != b
        assert structurally_equal(a, b)

    def test_structural_inequality(self):
        base = graph(("x", "y", {"w": 1}))
        assert not structurally_equal(base, graph(("x", "y", {"w": 2})))
        assert not structurally_equal(base, digraph(("x", "y", {"w": 1})))
        assert not structurally_equal(base, base.add_nodes("z"))
        assert not structurally_equal(multigraph(("x", "y")), multigraph(("x", "y"), ("x", "y")))
        assert not structurally_equal(base, base.add_attr("x", "k", 1))
