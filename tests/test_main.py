"""
Tests for the command-line entry point
=======================================
"""

import pytest
from unittest.mock import patch, MagicMock

from gesture_light import main as cli
from gesture_light.control.govee_client import GoveeCapability, GoveeDevice
from gesture_light.utils.config import DEFAULTS, create_app_config


@pytest.fixture
def no_config(tmp_path):
    return ["--config", str(tmp_path / "missing.yaml")]


class TestListDevices:

    def test_without_api_key(self, no_config, monkeypatch, capsys):
        monkeypatch.delenv("GOVEE_API_KEY", raising=False)

        assert cli.main(no_config + ["--list-devices"]) == 1
        assert "No Govee API key" in capsys.readouterr().out

    def test_prints_devices(self, no_config, monkeypatch, capsys):
        monkeypatch.setenv("GOVEE_API_KEY", "k")
        device = GoveeDevice(
            device="AA:BB", sku="H6008", device_name="Desk Lamp", type="devices.types.light",
            capabilities=[GoveeCapability("devices.capabilities.on_off", "powerSwitch")],
        )
        with patch.object(cli, "GoveeClient") as client_cls:
            client = client_cls.return_value
            client.config.api_key = "k"
            client.get_devices.return_value = [device]

            assert cli.main(no_config + ["--list-devices"]) == 0

        out = capsys.readouterr().out
        assert "Desk Lamp" in out
        assert "powerSwitch" in out


class TestRunOptions:

    def test_overrides_applied(self, no_config):
        with patch.object(cli, "GestureLightApp") as app_cls:
            assert cli.main(no_config + ["--camera", "3", "--no-gestures"]) == 0

        app_config = app_cls.call_args.args[0]
        assert app_config.camera.device_id == 3
        assert app_config.gestures_enabled is False
        app_cls.return_value.run.assert_called_once()

    def test_defaults(self, no_config):
        with patch.object(cli, "GestureLightApp") as app_cls:
            cli.main(no_config)

        app_config = app_cls.call_args.args[0]
        assert app_config.camera.device_id == 0
        assert app_config.gestures_enabled is True


@pytest.fixture
def app():
    app = cli.GestureLightApp(create_app_config(DEFAULTS))
    app.pipeline = MagicMock()
    app.camera = MagicMock()
    app.detector = MagicMock()
    app.light = MagicMock()
    return app


class TestShutdown:

    def test_detector_closed_when_idle(self, app):
        app.pipeline.is_busy = False

        app.stop()

        app.pipeline.stop.assert_called_once()
        app.detector.stop.assert_called_once()

    def test_detector_left_open_while_classifying(self, app):
        app.pipeline.is_busy = True

        app.stop()

        app.pipeline.stop.assert_called_once()
        app.detector.stop.assert_not_called()


class TestMainLoop:

    def test_backs_off_without_new_frames(self, app):
        frame = MagicMock(frame_number=1)
        reads = iter([None, frame, frame, None])

        def read():
            value = next(reads, None)
            if value is None and app.camera.read.call_count >= 4:
                app._running = False
            return value

        app.camera.read.side_effect = read
        app._running = True

        with patch.object(cli.time, "sleep") as sleep:
            app._main_loop()

        app.pipeline.submit_frame.assert_called_once_with(frame)
        assert sleep.call_count == 3
