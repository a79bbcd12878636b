import json

import numpy as np
import pytest

from gasket_cli import load_config, main, parse_args, resolve_seed
from gasket_display import GasketPlotter
from gasket_store import GasketDataManager
from sierpinski_gasket import InvalidArgument, edge_midpoint_seed, generate, random_interior_seed


def test_parse_args():
    options = parse_args(["--count=10", "--random-state=3", "--seed=0.1,0.2",
                          "--vertices=0,0,1,0,0,1", "--mode=buffered", "--save"])

    assert options == {
        'count': 10,
        'random_state': 3,
        'seed': "0.1,0.2",
        'vertices': [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]],
        'mode': "buffered",
        'save': "gasket_data",
    }


@pytest.mark.parametrize("argv", [["--count=abc"], ["--mode=wireframe"], ["--frobnicate"], ["stray"]])
def test_parse_args_rejects(argv):
    with pytest.raises(ValueError):
        parse_args(argv)


def test_parse_args_rejects_short_vertex_list():
    with pytest.raises(InvalidArgument):
        parse_args(["--vertices=0,0,1,0"])


def test_resolve_seed(vertices):
    assert resolve_seed(None, vertices) == edge_midpoint_seed(vertices)
    assert resolve_seed("edge", vertices) == (-0.25, -0.5)
    assert resolve_seed("0,-0.5", vertices) == (0.0, -0.5)
    assert resolve_seed([0.5, 0.25], vertices) == (0.5, 0.25)

    x, y = resolve_seed("random", [(0, 0), (1, 0), (0, 1)], random_state=4)
    assert x >= 0 and y >= 0 and x + y <= 1


def test_help_exits_cleanly(capsys):
    assert main(["--help"]) == 0
    assert "USAGE" in capsys.readouterr().out


def test_bad_option_exits_with_error():
    assert main(["--unknown"]) == 1


def test_negative_count_exits_with_error():
    assert main(["--count=-1"]) == 1


def test_missing_config_exits_with_error(tmp_path):
    assert main([f"--config={tmp_path / 'missing.json'}"]) == 1


def test_generate_and_save(tmp_path):
    data_dir = tmp_path / "runs"
    assert main(["--count=50", "--random-state=1", f"--save={data_dir}"]) == 0

    points, metadata = GasketDataManager(data_dir).load_run()
    assert points.shape == (51, 2)
    assert metadata['count'] == 50
    assert metadata['seed'] == [-0.25, -0.5]


def test_config_file_with_command_line_override(tmp_path):
    config = tmp_path / "gasket.json"
    config.write_text(json.dumps({'count': 500, 'seed': [0, 0], 'vertices': [[0, 0], [1, 0], [0, 1]]}))
    data_dir = tmp_path / "runs"

    assert main([f"--config={config}", "--count=20", f"--save={data_dir}"]) == 0

    points, metadata = GasketDataManager(data_dir).load_run()
    assert points.shape == (21, 2)
    assert metadata['vertices'] == [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]


def test_plot_option(tmp_path):
    plot = tmp_path / "gasket.png"
    assert main(["--count=100", "--mode=immediate", f"--plot={plot}"]) == 0
    assert plot.exists()


def test_batch_option(tmp_path):
    data_dir = tmp_path / "runs"
    assert main(["--batch=2", "--count=30", "--seed=random", "--random-state=5", f"--save={data_dir}"]) == 0
    assert len(list(data_dir.glob("run_*"))) == 2


def test_zero_batch_exits_with_error():
    assert main(["--batch=0"]) == 1


def test_config_only_applies_generation_keys(tmp_path):
    config = tmp_path / "gasket.json"
    stray_plot = tmp_path / "stray.png"
    config.write_text(json.dumps({'count': 10, 'plot': str(stray_plot), 'save': str(tmp_path / "runs")}))

    assert load_config(config) == {'count': 10}
    assert main([f"--config={config}"]) == 0
    assert not stray_plot.exists()
    assert not (tmp_path / "runs").exists()


@pytest.mark.parametrize("state", ["7", 2.5, -1])
def test_bad_config_random_state_exits_with_error(tmp_path, state):
    config = tmp_path / "gasket.json"
    config.write_text(json.dumps({'count': 10, 'random_state': state}))
    assert main([f"--config={config}"]) == 1


def test_collinear_vertices_can_be_saved(tmp_path):
    data_dir = tmp_path / "runs"
    assert main(["--vertices=0,0,1,0,2,0", "--count=10", f"--save={data_dir}"]) == 0

    points, _ = GasketDataManager(data_dir).load_run()
    assert points.shape == (11, 2)


def test_random_seed_and_walk_share_one_stream(tmp_path, vertices):
    data_dir = tmp_path / "runs"
    assert main(["--seed=random", "--random-state=5", "--count=30", f"--save={data_dir}"]) == 0

    rng = np.random.default_rng(5)
    seed_point = random_interior_seed(vertices, rng)
    expected = generate(vertices, 30, seed_point, random_state=rng)

    points, _ = GasketDataManager(data_dir).load_run()
    assert np.array_equal(points, np.array(expected))


def test_immediate_plot_streams_points(tmp_path, monkeypatch):
    calls = []
    original_stream = GasketPlotter.stream

    def recording_stream(self, *args, **kwargs):
        calls.append(args)
        return original_stream(self, *args, **kwargs)

    monkeypatch.setattr(GasketPlotter, "stream", recording_stream)
    monkeypatch.setattr(GasketPlotter, "show", lambda self, points: pytest.fail("show() used in immediate mode"))

    plot = tmp_path / "gasket.png"
    assert main(["--count=40", "--random-state=3", "--mode=immediate", f"--plot={plot}"]) == 0
    assert len(calls) == 1
    assert plot.exists()
