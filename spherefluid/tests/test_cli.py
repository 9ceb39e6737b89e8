"""
Test the headless command line runner.
"""

import json
import logging

import pytest

from spherefluid.main import build_parser, config_from_args, main


class TestArguments:

    def test_overrides(self):
        args = build_parser().parse_args(["--particles", "8", "--dt", "0.02", "--seed", "3"])
        config = config_from_args(args)
        assert config.num_particles == 8
        assert config.time_step == 0.02
        assert config.seed == 3
        assert config.backend == "cpu"

    def test_config_file_then_overrides(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps({"Configuration": {"num_particles": 5, "gas_constant": 10.0}}))
        args = build_parser().parse_args(["--config", str(path), "--particles", "6"])
        config = config_from_args(args)
        assert config.num_particles == 6
        assert config.gas_constant == 10.0


class TestMain:

    def test_runs(self, caplog):
        with caplog.at_level(logging.INFO, logger="spherefluid"):
            code = main(["--particles", "10", "--steps", "3", "--seed", "1",
                         "--report-every", "1"])
        assert code == 0
        assert "Done: 3 steps" in caplog.text

    def test_missing_config_file(self, tmp_path):
        assert main(["--config", str(tmp_path / "missing.json"), "--steps", "1"]) == 2

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        assert main(["--config", str(path), "--steps", "1"]) == 2

    @pytest.mark.parametrize("payload", [
        {"sample_radius": "12"},
        {"Configuration": {"num_particles": 2.5}},
        {"external_acceleration": "down"},
        [1, 2, 3],
    ])
    def test_wrongly_typed_config(self, tmp_path, payload):
        path = tmp_path / "typed.json"
        path.write_text(json.dumps(payload))
        assert main(["--config", str(path), "--steps", "1"]) == 2

    def test_invalid_parameters(self):
        assert main(["--particles", "0", "--steps", "1"]) == 2

    def test_unknown_backend_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            main(["--backend", "gpu"])
