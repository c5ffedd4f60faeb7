import pytest

from mtreex import MTree, SplitPolicy
from mtreex.scenario import generate_scenario, load_scenario, replay_scenario, save_scenario


@pytest.mark.parametrize(
    "capacity, min_capacity, promotion, partition",
    [
        (2, -1, "sorted", "balanced"),
        (3, 1, "random", "hyperplane"),
        (6, 3, "max-spread", "balanced"),
        (9, 2, "random", "balanced"),
    ],
)
def test_replay_generated_fixture(tmp_path, capacity, min_capacity, promotion, partition):
    path = save_scenario(
        generate_scenario(2, 300, seed=capacity, remove_probability=0.3), tmp_path / "fixture.json"
    )
    tree = MTree(
        capacity,
        min_capacity,
        split_policy=SplitPolicy.from_names(promotion, partition, seed=17),
        check_invariants=True,
    )
    report = replay_scenario(tree, load_scenario(path))
    assert report.actions == 300
    assert tree.stats.splits > 0


def test_replay_high_dimensional_fixture():
    scenario = generate_scenario(6, 200, seed=21, span=20, remove_probability=0.25)
    tree = MTree(4, check_invariants=True, split_policy=SplitPolicy.default(seed=5))
    report = replay_scenario(tree, scenario)
    assert report.final_size == len(tree)
