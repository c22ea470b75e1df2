import numpy as np
import pytest

from massflow.noise import SimplexNoise
from massflow.policy import DynamicFlow, StaticFlow
from massflow.simulation import MassFlowSimulation

METRIC_KEYS = {"frame", "noise_ms", "flow_ms", "advect_ms", "render_ms",
               "total_ms", "density_total", "density_max"}


def _blob_simulation(policy=None, simulation_factor=1, width=48, height=32):
    sim = MassFlowSimulation(width, height, flow_field_scale=10.0,
                             policy=policy, simulation_factor=simulation_factor)
    initial = np.zeros((height, width), dtype=np.float32)
    initial[height // 2 - 4:height // 2 + 4, width // 2 - 4:width // 2 + 4] = 1.0
    sim.seed_density(initial)
    return sim, initial


def test_static_flow_is_generated_once():
    sim, _ = _blob_simulation(StaticFlow(), simulation_factor=3)
    sim.run(4)
    assert sim.flow_generations == 1
    assert sim.frame == 4


def test_dynamic_flow_is_generated_every_sub_step():
    sim, _ = _blob_simulation(DynamicFlow(), simulation_factor=3)
    sim.run(4)
    assert sim.flow_generations == 12


def test_dynamic_flow_changes_between_sub_steps():
    sim, _ = _blob_simulation(DynamicFlow(step_scale=0.5))
    sim.step_frame()
    first = sim.grid.flow_field.copy()
    sim.step_frame()
    assert not np.array_equal(first, sim.grid.flow_field)


def test_static_flow_field_is_reused():
    sim, _ = _blob_simulation(StaticFlow())
    sim.step_frame()
    first = sim.grid.flow_field.copy()
    sim.step_frame()
    assert np.array_equal(first, sim.grid.flow_field)


def test_density_moves():
    sim, initial = _blob_simulation(StaticFlow(), simulation_factor=2)
    sim.run(3)
    assert not np.array_equal(sim.grid.density, initial)
    assert np.all(np.isfinite(sim.grid.density))


def test_runs_are_deterministic():
    a, _ = _blob_simulation(DynamicFlow(offsets=(1.0, 2.0, 3.0)), simulation_factor=2)
    b, _ = _blob_simulation(DynamicFlow(offsets=(1.0, 2.0, 3.0)), simulation_factor=2)
    a.run(3)
    b.run(3)
    assert np.array_equal(a.grid.density, b.grid.density)


def test_noise_seed_changes_the_run():
    a = MassFlowSimulation(32, 32, 8.0, noise=SimplexNoise(seed=1))
    b = MassFlowSimulation(32, 32, 8.0, noise=SimplexNoise(seed=2))
    a.prepare_flow()
    b.prepare_flow()
    assert not np.array_equal(a.grid.flow_field, b.grid.flow_field)


def test_frame_sink_sees_every_frame_in_order():
    sim, _ = _blob_simulation(StaticFlow())
    seen = []

    def sink(frame, density):
        assert density is sim.grid.density
        seen.append((frame, density.copy()))

    sim.run(3, frame_sink=sink)

    assert [frame for frame, _ in seen] == [0, 1, 2]
    # frame i is finished before frame i+1 starts
    assert not np.array_equal(seen[0][1], seen[1][1])


def test_sink_errors_abort_the_run():
    sim, _ = _blob_simulation(StaticFlow())

    def sink(frame, density):
        if frame == 1:
            raise OSError("disk full")

    with pytest.raises(OSError):
        sim.run(5, frame_sink=sink)
    assert sim.frame == 2


def test_progress_callback_gets_metrics():
    sim, _ = _blob_simulation(DynamicFlow(), simulation_factor=2)
    reports = []

    logs = sim.run(3, on_frame=reports.append)

    assert reports == logs == sim.perf_log
    assert [m["frame"] for m in reports] == [0, 1, 2]
    for metrics in reports:
        assert set(metrics) == METRIC_KEYS
        assert metrics["total_ms"] >= metrics["advect_ms"] >= 0.0


def test_render_time_is_measured_only_with_a_sink():
    sim, _ = _blob_simulation(StaticFlow())
    assert sim.run(1)[0]["render_ms"] == 0.0


def test_prepare_flow_does_not_advect():
    sim, initial = _blob_simulation(StaticFlow())
    sim.prepare_flow()
    sim.prepare_flow()
    assert sim.flow_generations == 1
    assert sim.frame == 0
    assert np.array_equal(sim.grid.density, initial)


def test_print_status_reports_grid_state(capsys):
    sim, _ = _blob_simulation(StaticFlow(), width=20, height=10)
    sim.run(2)
    sim.print_status()

    out = capsys.readouterr().out
    assert "Frame: 2  |  Policy: StaticFlow" in out
    assert "SimulationGrid(20x10)" in out
    assert "max_magnitude=1.0000" in out
    assert "Flow generated 1x" in out
    assert "ms/frame" in out


def test_grid_repr_summarizes_fields():
    sim = MassFlowSimulation(8, 6, 5.0)
    sim.grid.add_mass(4, 3, 0.5, radius=0)
    text = repr(sim.grid)
    assert text.startswith("SimulationGrid(8x6)")
    assert "max=0.5000, sum=0.50" in text
    assert "max_magnitude=0.0000" in text


def test_flat_seed_is_accepted():
    sim = MassFlowSimulation(6, 4, 5.0)
    sim.seed_density(np.arange(24, dtype=np.float32))
    assert sim.grid.density[1, 0] == 6.0


def test_wrong_seed_shape_is_rejected():
    sim = MassFlowSimulation(6, 4, 5.0)
    with pytest.raises(ValueError):
        sim.seed_density(np.zeros((4, 5)))


def test_add_mass_writes_both_buffers():
    sim = MassFlowSimulation(10, 10, 5.0)
    sim.grid.add_mass(0, 0, 1.0, radius=1)
    assert sim.grid.density[0:2, 0:2].sum() == 4.0
    assert np.array_equal(sim.grid.density, sim.grid.density_scratch)
