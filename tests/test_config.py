import importlib
import os
import unittest
from unittest.mock import patch

import config


class FieldConfigTests(unittest.TestCase):
    def tearDown(self) -> None:
        importlib.reload(config)

    def test_defaults_without_environment(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            importlib.reload(config)
            assert config.API_BASE_URL == "http://localhost:5000"
            assert config.CONNECTIVITY_CHECK_URL == "http://localhost:5000/api/health"
            assert config.CONNECTIVITY_POLL_INTERVAL == 15.0
            assert config.MONGODB_DATABASE == "calygo_field"

    def test_health_url_follows_api_base(self) -> None:
        env = {"CALYGO_API_BASE_URL": "https://calygo.example/"}
        with patch.dict(os.environ, env, clear=True):
            importlib.reload(config)
            assert config.API_BASE_URL == "https://calygo.example"
            assert config.CONNECTIVITY_CHECK_URL == "https://calygo.example/api/health"

    def test_invalid_float_falls_back_to_default(self) -> None:
        env = {"CONNECTIVITY_POLL_INTERVAL": "soon", "REPLAY_REQUEST_TIMEOUT": " "}
        with patch.dict(os.environ, env, clear=True):
            importlib.reload(config)
            assert config.CONNECTIVITY_POLL_INTERVAL == 15.0
            assert config.REPLAY_REQUEST_TIMEOUT == 30.0

    def test_log_level_is_uppercased(self) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True):
            importlib.reload(config)
            assert config.LOG_LEVEL == "DEBUG"
