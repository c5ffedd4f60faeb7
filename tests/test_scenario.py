import json

import pytest

from mtreex import MTree, SplitPolicy
from mtreex.scenario import (
    Action,
    ReplayMismatch,
    Scenario,
    check_range_query,
    generate_scenario,
    linear_limit,
    linear_range,
    load_scenario,
    replay_scenario,
    save_scenario,
)
from mtreex.metrics import euclidean_distance


def test_generated_scenario_is_reproducible():
    first = generate_scenario(3, 50, seed=4)
    second = generate_scenario(3, 50, seed=4)
    assert first == second
    assert len(first) == 50
    assert first.actions[0].cmd == "A"

    present = set()
    for action in first.actions:
        assert len(action.data) == 3
        if action.cmd == "A":
            assert action.data not in present
            present.add(action.data)
        else:
            assert action.data in present
            present.remove(action.data)


def test_generate_rejects_bad_arguments():
    with pytest.raises(ValueError):
        generate_scenario(0, 10)
    with pytest.raises(ValueError):
        generate_scenario(2, 10, remove_probability=1.0)
    with pytest.raises(ValueError):
        generate_scenario(1, 20, span=5)


def test_save_and_load(tmp_path):
    scenario = generate_scenario(2, 20, seed=1)
    path = save_scenario(scenario, tmp_path / "fixture.json")
    assert load_scenario(path) == scenario


def test_load_rejects_malformed_actions(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(
        json.dumps(
            {
                "dimensions": 2,
                "actions": [{"cmd": "X", "data": [1, 2], "query": [0, 0], "radius": 1.0, "limit": 1}],
            }
        ),
        encoding="utf-8",
    )
    with pytest.raises(ValueError, match="unknown command"):
        load_scenario(path)

    path.write_text(json.dumps({"dimensions": 2, "actions": [{"cmd": "A"}]}), encoding="utf-8")
    with pytest.raises(ValueError, match="Malformed"):
        load_scenario(path)

    path.write_text(json.dumps({"actions": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_scenario(path)


def test_linear_scans():
    objects = [(0, 0), (3, 4), (1, 0), (6, 8)]
    near = linear_range(objects, (0, 0), 5.0, euclidean_distance)
    assert [item.data for item in near] == [(0, 0), (1, 0), (3, 4)]
    nearest = linear_limit(objects, (0, 0), 2, euclidean_distance)
    assert [item.data for item in nearest] == [(0, 0), (1, 0)]


def test_replay_reports_counts():
    scenario = generate_scenario(2, 120, seed=9)
    tree = MTree(2, split_policy=SplitPolicy.from_names("sorted"), check_invariants=True)
    report = replay_scenario(tree, scenario)

    assert report.actions == 120
    assert report.additions + report.removals == 120
    assert report.final_size == report.additions - report.removals == len(tree)
    assert report.distance_computations > 0


def test_replay_detects_a_lying_tree():
    class ForgetfulTree(MTree):
        def remove(self, data):
            super().remove(data)
            return False

    scenario = Scenario(
        dimensions=2,
        actions=(
            Action("A", (1, 1), (0, 0), 2.0, 1),
            Action("R", (1, 1), (0, 0), 2.0, 1),
        ),
    )
    with pytest.raises(ReplayMismatch, match="Action #1"):
        replay_scenario(ForgetfulTree(4), scenario)


def test_range_check_detects_missing_objects():
    tree = MTree(4)
    tree.add((1, 1))
    with pytest.raises(ReplayMismatch, match="missing"):
        check_range_query(tree, [(1, 1), (0, 1)], (0, 0), 2.0)
