"""
Closure query tests: dependency order and cost aggregation.
"""

import itertools

from closure_service import Closure, closure_payload, dependency_order, sum_costs
from graph_service import build_graph
from normalize_service import extract_research_records
from research_model import Cost, ResearchNode


def _node(key, requires=(), costs=()):
    return ResearchNode(key=key, requires=list(requires), costs=[Cost(r, c) for r, c in costs])


class TestDependencyOrder:
    def test_simple_chain(self):
        graph = build_graph([_node("X", ["Y"], [("wood", 5)]), _node("Y", [], [("wood", 10)])])
        closure = dependency_order(graph, "X")
        assert closure.order == ["Y", "X"]
        assert closure.keys == {"X", "Y"}
        assert sum_costs(graph, closure.order) == {"wood": 15}

    def test_diamond_visits_shared_prerequisite_once(self):
        graph = build_graph(
            [_node("root"), _node("left", ["root"]), _node("right", ["root"]), _node("top", ["left", "right"])]
        )
        order = dependency_order(graph, "top").order
        assert order == ["root", "left", "right", "top"]

    def test_every_prerequisite_precedes_its_dependents(self):
        graph = build_graph(
            [
                _node("a"),
                _node("b", ["a"]),
                _node("c", ["a", "b"]),
                _node("d", ["c", "b"]),
                _node("e", ["d", "a"]),
                _node("unrelated"),
            ]
        )
        order = dependency_order(graph, "e").order
        assert order[-1] == "e"
        assert len(order) == len(set(order)) == 5
        position = {key: i for i, key in enumerate(order)}
        for key in order:
            for required_key in graph[key].requires:
                assert position[required_key] < position[key]

    def test_cycle_terminates(self):
        graph = build_graph([_node("A", ["C"]), _node("B", ["A"]), _node("C", ["B"])])
        closure = dependency_order(graph, "A")
        assert sorted(closure.order) == ["A", "B", "C"]
        assert closure.order[-1] == "A"
        assert closure.keys == {"A", "B", "C"}

    def test_self_loop(self):
        graph = build_graph([_node("A", ["A"])])
        assert dependency_order(graph, "A").order == ["A"]

    def test_unknown_target(self):
        graph = build_graph([_node("A")])
        assert dependency_order(graph, "missing") == Closure()
        assert dependency_order({}, "A").order == []

    def test_missing_prerequisites_skipped(self):
        graph = build_graph([_node("A", ["ghost", "B"]), _node("B")])
        assert dependency_order(graph, "A").order == ["B", "A"]

    def test_deep_chain_does_not_recurse(self):
        depth = 5000
        nodes = [_node("n0")] + [_node(f"n{i}", [f"n{i - 1}"]) for i in range(1, depth)]
        graph = build_graph(nodes)
        order = dependency_order(graph, f"n{depth - 1}").order
        assert len(order) == depth
        assert order[0] == "n0"

    def test_graph_not_mutated(self):
        graph = build_graph([_node("X", ["Y"]), _node("Y")])
        before = {k: (list(n.requires), list(n.unlocks)) for k, n in graph.items()}
        dependency_order(graph, "X")
        assert {k: (list(n.requires), list(n.unlocks)) for k, n in graph.items()} == before


class TestSumCosts:
    def test_order_independent(self):
        graph = build_graph(
            [
                _node("a", [], [("wood", 1), ("stone", 2)]),
                _node("b", ["a"], [("stone", 3)]),
                _node("c", ["b"], [("iron", 4.5), ("wood", 1)]),
            ]
        )
        order = dependency_order(graph, "c").order
        expected = {"wood": 2.0, "stone": 5.0, "iron": 4.5}
        for permutation in itertools.permutations(order):
            assert sum_costs(graph, permutation) == expected

    def test_first_appearance_order(self):
        graph = build_graph([_node("a", [], [("stone", 1)]), _node("b", ["a"], [("wood", 1), ("stone", 1)])])
        assert list(sum_costs(graph, ["a", "b"])) == ["stone", "wood"]

    def test_skips_unknown_keys_and_bad_amounts(self):
        node = _node("a", [], [("wood", 2)])
        node.costs.append(Cost("stone", "lots"))
        node.costs.append(Cost("", 3))
        graph = {"a": node}
        assert sum_costs(graph, ["ghost", "a"]) == {"wood": 2.0}

    def test_reward_nodes_contribute_nothing(self):
        owner = _node("a", [], [("wood", 2)])
        owner.rewards.append("buildings/furnace")
        graph = build_graph([owner])
        reward_key = "award:buildings/furnace"
        closure = dependency_order(graph, reward_key)
        assert closure.order == ["a", reward_key]
        assert sum_costs(graph, closure.order) == {"wood": 2.0}

    def test_empty(self):
        assert sum_costs({}, []) == {}


class TestClosurePayload:
    def test_document_closure(self, research_document, lookup):
        graph = build_graph(extract_research_records(research_document), lookup)
        payload = closure_payload(graph, "gui/research/name/flamers")
        assert payload["order"] == [
            "gui/research/name/mining",
            "gui/research/name/smelting",
            "gui/research/name/flamers",
        ]
        assert payload["costs"] == {"carbonium": 150.0, "ironium": 25.0}
        assert payload["keys"] == sorted(payload["order"])

    def test_unknown_target_payload(self):
        payload = closure_payload({}, "nope")
        assert payload == {"target": "nope", "order": [], "keys": [], "costs": {}}
