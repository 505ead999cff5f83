"""Tests for controller/camera.py and model/transform.py."""

import pytest

from studymap.config import CameraConfig
from studymap.controller.camera import CameraController
from studymap.model.transform import Transform


@pytest.fixture
def camera():
    cam = CameraController()
    cam.set_viewport(800, 600)
    return cam


class TestTransform:
    def test_round_trip(self):
        t = Transform(2.0, 30.0, -40.0)

        assert t.to_screen(*t.to_model(123.0, 45.0)) == pytest.approx((123.0, 45.0))

    def test_visible_rect(self):
        t = Transform(2.0, -100.0, -50.0)

        assert t.visible_rect(800, 600) == (50.0, 25.0, 400.0, 300.0)


class TestZoom:
    @pytest.mark.parametrize("factor", [0.5, 1.12, 1.7, 40.0, 0.01])
    def test_point_under_cursor_stays_fixed(self, camera, factor):
        camera.transform = Transform(1.3, 40.0, -20.0)
        before = camera.transform.to_model(200.0, 150.0)

        camera.zoom_at(200.0, 150.0, factor)

        assert camera.transform.to_model(200.0, 150.0) == pytest.approx(before)

    def test_scale_clamped(self, camera):
        camera.zoom_at(0.0, 0.0, 100.0)
        assert camera.transform.k == 5.0

        camera.zoom_at(0.0, 0.0, 0.0001)
        assert camera.transform.k == 0.2

    def test_non_positive_factor_rejected(self, camera):
        with pytest.raises(ValueError):
            camera.zoom_at(0.0, 0.0, 0.0)
        with pytest.raises(ValueError):
            camera.zoom_by(-1.0)

    def test_zoom_by_animates_about_center(self, camera):
        camera.zoom_by(1.3)

        assert camera.animating
        assert camera.target.k == pytest.approx(1.3)
        assert camera.target.to_model(400.0, 300.0) == pytest.approx((400.0, 300.0))

    def test_live_zoom_cancels_animation(self, camera):
        camera.animate_to(2.0, 10.0, 10.0)

        camera.zoom_at(10.0, 10.0, 1.1)

        assert not camera.animating


class TestAnimation:
    def test_eases_to_target_without_overshoot(self, camera):
        camera.animate_to(2.0, 100.0, 50.0)
        xs = []

        for _ in range(300):
            if not camera.tick():
                break
            xs.append(camera.transform.x)

        assert not camera.animating
        assert camera.transform.as_tuple() == (2.0, 100.0, 50.0)
        assert all(a <= b for a, b in zip(xs, xs[1:]))
        assert max(xs) <= 100.0

    def test_tick_without_target_is_idle(self, camera):
        assert camera.tick() is False
        assert camera.transform.as_tuple() == (1.0, 0.0, 0.0)

    def test_pan_cancels_animation(self, camera):
        camera.animate_to(2.0, 100.0, 50.0)
        camera.tick()

        camera.pan_by(5.0, -5.0)

        assert not camera.animating
        assert camera.tick() is False

    def test_target_scale_clamped(self, camera):
        camera.animate_to(50.0, 0.0, 0.0)

        assert camera.target.k == 5.0


class TestFit:
    def test_fit_centres_bounds(self, camera):
        camera.fit_to_bounds((0.0, 0.0, 1000.0, 500.0))

        target = camera.target
        assert target.k == pytest.approx(800.0 / 1100.0)
        assert target.to_screen(500.0, 250.0) == pytest.approx((400.0, 300.0))

    def test_fit_never_zooms_past_limit(self, camera):
        camera.fit_to_bounds((10.0, 10.0, 12.0, 12.0))

        assert camera.target.k == 1.5

    def test_fit_without_bounds_targets_identity(self, camera):
        camera.transform = Transform(2.0, 5.0, 5.0)

        camera.fit_to_bounds(None)

        assert camera.target.as_tuple() == (1.0, 0.0, 0.0)


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        CameraConfig(k_min=2.0)
    with pytest.raises(ValueError):
        CameraConfig(zoom_step=1.0)
