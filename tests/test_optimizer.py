import logging

import pytest

from fleet_trajectory.optimization import (
    OptimizationSettings,
    aggressive_optimize,
    get_preset,
    optimization_potential,
    optimize_coordinates,
    quick_optimize,
)

from conftest import make_position

NO_FILTERS = OptimizationSettings(
    enable_accuracy_filter=False,
    enable_speed_filter=False,
    enable_time_filter=False,
)


def _is_subsequence(result, source) -> bool:
    it = iter(source)
    return all(any(item is candidate for candidate in it) for item in result)


def test_empty_input_returns_zeroed_result() -> None:
    result = optimize_coordinates([])
    assert result.original_count == 0
    assert result.optimized_count == 0
    assert result.reduction_percentage == 0.0
    assert result.optimized_positions == []


def test_single_position_is_returned_unchanged() -> None:
    pos = make_position(0, 1.0, 1.0, speed=0.0, accuracy=900.0)
    result = optimize_coordinates([pos])
    assert result.optimized_positions == [pos]
    assert result.optimized_count == 1
    assert result.reduction_percentage == 0.0


def test_collinear_track_reduces_to_endpoints(collinear_track) -> None:
    result = optimize_coordinates(collinear_track, NO_FILTERS.updated(tolerance=1_000_000.0))
    assert result.optimized_positions == [collinear_track[0], collinear_track[4]]
    assert result.optimized_count == 2
    assert result.reduction_percentage == 60.0
    assert result.statistics.douglas_peucker_reduced == 3
    assert result.statistics.accuracy_filtered == 0
    assert result.statistics.speed_filtered == 0
    assert result.statistics.time_filtered == 0


def test_time_filter_example_counts_removed_positions() -> None:
    positions = [make_position(s) for s in (0.0, 5.0, 40.0)]
    settings = NO_FILTERS.updated(enable_time_filter=True, min_time_interval=30_000)
    result = optimize_coordinates(positions, settings)
    assert result.optimized_positions == [positions[0], positions[2]]
    assert result.statistics.time_filtered == 1


def test_filtered_endpoints_are_reinstated() -> None:
    positions = [
        make_position(0, 0.0, 0.0, accuracy=500.0),
        make_position(60, 0.0, 0.01, accuracy=5.0),
        make_position(120, 0.01, 0.02, accuracy=5.0),
        make_position(180, 0.0, 0.03, speed=0.0, accuracy=5.0),
    ]
    result = optimize_coordinates(positions, OptimizationSettings(tolerance=1.0))
    assert result.statistics.accuracy_filtered == 1
    assert result.statistics.speed_filtered == 1
    assert result.optimized_positions[0] is positions[0]
    assert result.optimized_positions[-1] is positions[-1]


def test_stop_boundaries_and_harsh_events_survive_defaults(city_trip) -> None:
    result = optimize_coordinates(city_trip, get_preset("balanced"))
    kept = result.optimized_positions
    assert any(p is city_trip[10] for p in kept)
    assert any(p is city_trip[20] for p in kept)
    assert any(p is city_trip[25] for p in kept)
    assert result.statistics.speed_filtered == 9


@pytest.mark.parametrize("preset", ["conservative", "balanced", "aggressive"])
def test_presets_yield_ordered_subsequence_with_endpoints(city_trip, preset) -> None:
    result = optimize_coordinates(city_trip, get_preset(preset))
    kept = result.optimized_positions
    assert _is_subsequence(kept, city_trip)
    assert kept[0] is city_trip[0]
    assert kept[-1] is city_trip[-1]
    assert result.optimized_count == len(kept) <= result.original_count
    assert 0.0 <= result.reduction_percentage <= 100.0


def test_tolerance_monotonicity(city_trip) -> None:
    base = get_preset("balanced")
    counts = [
        optimize_coordinates(city_trip, base.updated(tolerance=tol)).optimized_count
        for tol in (0.0, 1.0, 10.0, 50.0, 500.0, 5_000.0)
    ]
    assert counts == sorted(counts, reverse=True)


def test_invalid_coordinates_do_not_crash() -> None:
    positions = [
        make_position(0, 0.0, 0.0),
        make_position(60, float("nan"), 0.01),
        make_position(120, 0.0, 0.02),
        make_position(180, 0.0, 0.03),
    ]
    result = optimize_coordinates(positions, NO_FILTERS)
    assert result.optimized_positions[0] is positions[0]
    assert result.optimized_positions[-1] is positions[-1]


def test_convenience_wrappers_use_presets(city_trip) -> None:
    assert quick_optimize(city_trip).optimized_count == (
        optimize_coordinates(city_trip, get_preset("balanced")).optimized_count
    )
    aggressive = aggressive_optimize(city_trip)
    assert aggressive.optimized_count <= quick_optimize(city_trip).optimized_count


def test_summary_is_logged(collinear_track, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="fleet_trajectory.optimization.optimizer"):
        optimize_coordinates(collinear_track, NO_FILTERS.updated(tolerance=1_000_000.0))
    assert "Optimized 5 -> 2 positions" in caplog.text


def test_fast_positions_are_not_filtered_by_max_speed() -> None:
    positions = [
        make_position(0, 0.0, 0.0, speed=50.0),
        make_position(60, 0.01, 0.01, speed=300.0),
        make_position(120, 0.0, 0.02, speed=50.0),
    ]
    settings = OptimizationSettings(tolerance=0.0, enable_time_filter=False)
    assert settings.max_speed < 300.0
    result = optimize_coordinates(positions, settings)
    assert result.optimized_positions == positions
    assert result.statistics.speed_filtered == 0


def test_potential_of_empty_track_is_zero() -> None:
    potential = optimization_potential([])
    assert potential.total_positions == 0
    assert potential.reductions == {10.0: 0.0, 25.0: 0.0, 50.0: 0.0}
    assert potential.recommended_tolerance == 10.0
    assert potential.estimated_bandwidth_savings == 0
    assert potential.estimated_storage_savings == 0


def test_potential_recommends_25_for_compressible_track() -> None:
    positions = [make_position(60 * idx, 0.0, 0.001 * idx) for idx in range(20)]
    potential = optimization_potential(positions)
    assert potential.total_positions == 20
    assert potential.reductions == {10.0: 90.0, 25.0: 90.0, 50.0: 90.0}
    assert potential.recommended_tolerance == 25.0
    assert potential.estimated_bandwidth_savings == 90
    assert potential.estimated_storage_savings == 90


def test_potential_falls_back_to_10_for_winding_track(zigzag_track) -> None:
    potential = optimization_potential(zigzag_track, tolerances=(5, 50))
    assert potential.reductions == {5.0: 0.0, 50.0: 0.0}
    assert potential.recommended_tolerance == 10.0
    assert potential.estimated_bandwidth_savings == 0
