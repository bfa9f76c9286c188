from qlab.__main__ import parse_args
from qlab.domain.types import LabConfig


def test_defaults() -> None:
    assert parse_args([]) == LabConfig()


def test_overrides() -> None:
    config = parse_args([
        "--rows", "6", "--cols", "3", "--alpha", "0.25", "--gamma", "0.5",
        "--goal-reward", "10", "--trap-reward", "-1", "--seed", "4",
    ])
    assert (config.rows, config.cols) == (6, 3)
    assert config.learning_rate == 0.25
    assert config.discount_factor == 0.5
    assert config.goal_reward == 10.0
    assert config.trap_reward == -1.0
    assert config.seed == 4
    assert config.tolerance == 0.01
