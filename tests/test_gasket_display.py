import numpy as np
import pytest

from gasket_display import DisplayMode, GasketPlotter, plot_density, rotation
from sierpinski_gasket import generate


@pytest.fixture
def points(vertices):
    return generate(vertices, 300, (0, -0.5), random_state=12)


def test_stream_draws_without_retaining(vertices):
    plotter = GasketPlotter(mode=DisplayMode.IMMEDIATE)
    drawn = plotter.stream(vertices, 25, (0, 0), random_state=1)

    assert drawn == 26
    assert plotter.draw_calls == 26
    assert not plotter.retained
    with pytest.raises(RuntimeError):
        plotter.redraw()


def test_immediate_show_keeps_nothing(points):
    plotter = GasketPlotter(mode=DisplayMode.IMMEDIATE)
    plotter.show(points)

    assert plotter.draw_calls == 1
    assert not plotter.retained
    with pytest.raises(RuntimeError):
        plotter.redraw()


def test_retained_mode_rebuilds_arrays_each_redraw(points):
    plotter = GasketPlotter(mode=DisplayMode.RETAINED)
    plotter.show(points)
    plotter.redraw()
    plotter.redraw(matrix=rotation(np.pi / 4))

    assert plotter.draw_calls == 3
    assert plotter.uploads == 3


def test_buffered_mode_uploads_once(points):
    plotter = GasketPlotter(mode=DisplayMode.BUFFERED)
    plotter.show(points)
    for angle in np.linspace(0, np.pi, 5):
        plotter.redraw(matrix=rotation(angle))

    assert plotter.draw_calls == 6
    assert plotter.uploads == 1


def test_redraw_applies_transform(points):
    plotter = GasketPlotter(mode=DisplayMode.BUFFERED)
    plotter.show(points)

    moved = plotter.redraw(matrix=[[2, 0], [0, 2]], offset=(1, -1))
    original = np.array(points)
    assert np.allclose(moved, original * 2 + np.array([1, -1]))

    # the retained buffer itself is untouched
    assert np.allclose(plotter.redraw(), original)


def test_redraw_rejects_bad_matrix(points):
    plotter = GasketPlotter()
    plotter.show(points)
    with pytest.raises(ValueError):
        plotter.redraw(matrix=np.eye(3))


def test_redraw_before_show_fails():
    with pytest.raises(RuntimeError):
        GasketPlotter(mode=DisplayMode.RETAINED).redraw()


def test_rotation_quarter_turn():
    assert np.allclose(rotation(np.pi / 2) @ np.array([1.0, 0.0]), [0.0, 1.0])


def test_save_writes_png(points, tmp_path):
    plotter = GasketPlotter()
    plotter.show(points)
    path = tmp_path / "gasket.png"
    plotter.save(path, dpi=50)
    assert path.exists() and path.stat().st_size > 0


def test_plot_density(points):
    ax = plot_density(points, bins=16)
    assert ax.get_title() == 'Sierpinski Gasket: Visit Density'
