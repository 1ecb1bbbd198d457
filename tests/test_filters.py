from fleet_trajectory.optimization.filters import (
    filter_by_accuracy,
    filter_by_speed,
    filter_by_time_interval,
)

from conftest import make_position


def test_accuracy_filter_drops_only_worse_than_threshold() -> None:
    positions = [
        make_position(0, accuracy=5.0),
        make_position(10, accuracy=100.0),
        make_position(20, accuracy=150.0),
        make_position(30),
    ]
    outcome = filter_by_accuracy(positions, min_accuracy=100.0)
    assert outcome.positions == [positions[0], positions[1], positions[3]]
    assert outcome.removed == 1


def test_speed_filter_keeps_threshold_and_exempt_positions() -> None:
    positions = [
        make_position(0, speed=0.0),
        make_position(10, speed=5.0),
        make_position(20, speed=4.9),
        make_position(30, speed=60.0),
    ]
    outcome = filter_by_speed(positions, min_speed=5.0, exempt=[positions[0]])
    assert outcome.positions == [positions[0], positions[1], positions[3]]
    assert outcome.removed == 1


def test_speed_filter_exemption_is_by_identity() -> None:
    slow = make_position(0, speed=0.0)
    twin = make_position(0, speed=0.0)
    outcome = filter_by_speed([slow], min_speed=5.0, exempt=[twin])
    assert outcome.positions == []
    assert outcome.removed == 1


def test_time_filter_compares_against_last_kept_position() -> None:
    positions = [make_position(s) for s in (0, 5, 40, 50, 80, 85)]
    outcome = filter_by_time_interval(positions, min_time_interval_ms=30_000)
    # 5 s and 50 s are too close to the previously kept 0 s and 40 s; the
    # final position is always kept.
    assert [p.timestamp for p in outcome.positions] == [
        positions[0].timestamp,
        positions[2].timestamp,
        positions[4].timestamp,
        positions[5].timestamp,
    ]
    assert outcome.removed == 2


def test_time_filter_never_drops_endpoints() -> None:
    positions = [make_position(s) for s in (0, 1, 2)]
    outcome = filter_by_time_interval(positions, min_time_interval_ms=30_000)
    assert outcome.positions == [positions[0], positions[2]]


def test_filters_accept_empty_input() -> None:
    assert filter_by_accuracy([]).positions == []
    assert filter_by_speed([]).removed == 0
    assert filter_by_time_interval([]).positions == []
