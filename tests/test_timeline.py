import pytest

from legged_wbtraj.timeline import PhaseTimeline


def test_phase_lookup_ties_go_to_later_phase():
    timeline = PhaseTimeline([1.0, 1.0])

    assert timeline.phase_id(0.0) == 0
    assert timeline.phase_id(0.5) == 0
    assert timeline.phase_id(1.0) == 1
    assert timeline.local_time(1.0) == 0.0
    assert timeline.percent_of_phase(1.25) == pytest.approx(0.25)


def test_lookup_past_end_clamps_to_last_phase():
    timeline = PhaseTimeline([1.0, 0.5])

    assert timeline.phase_id(1.5) == 1
    assert timeline.phase_id(4.0) == 1
    assert timeline.local_time(4.0) == pytest.approx(0.5)


def test_lookup_before_start_rejected():
    timeline = PhaseTimeline([1.0], t_start=2.0)

    assert timeline.phase_start(0) == 2.0
    assert timeline.t_end == 3.0
    with pytest.raises(ValueError):
        timeline.phase_id(1.5)


def test_sample_times_include_final_instant():
    timeline = PhaseTimeline([1.0, 1.0])
    times = timeline.sample_times(0.1)

    assert len(times) == 21
    assert times[0] == 0.0
    assert times[-1] == 2.0

    times = PhaseTimeline([1.0]).sample_times(0.3)
    assert len(times) == 5
    assert times[-1] == 1.0


def test_invalid_durations_and_period():
    with pytest.raises(ValueError):
        PhaseTimeline([])
    with pytest.raises(ValueError):
        PhaseTimeline([1.0, 0.0])
    with pytest.raises(ValueError):
        PhaseTimeline([1.0]).sample_times(0.0)
