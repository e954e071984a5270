# tests/infrastructure/test_config_logging.py
import dataclasses
import logging
import os
import unittest
from unittest import mock

import numpy as np

from statgraph import EngineConfig, Tensor, get_config, get_logger, set_config


class TestEngineConfig(unittest.TestCase):
    def setUp(self):
        self._previous = get_config()

    def tearDown(self):
        set_config(self._previous)

    def test_defaults(self):
        cfg = EngineConfig().normalized()
        self.assertEqual(cfg.dtype, "float32")
        self.assertEqual(cfg.tolerance, 1e-6)
        self.assertIsNone(cfg.seed)
        self.assertEqual(cfg.log_epsilon, 1e-12)
        self.assertEqual(cfg.np_dtype, np.float32)

    def test_set_config_returns_previous(self):
        before = get_config()
        previous = set_config(dtype="float64")
        self.assertEqual(previous, before)
        self.assertEqual(get_config().dtype, "float64")
        self.assertEqual(Tensor.zeros((1, 1, 1, 1, 1)).dtype, np.float64)

    def test_dtype_names_are_canonical(self):
        set_config(dtype=np.float64)
        self.assertEqual(get_config().dtype, "float64")

    def test_config_is_immutable(self):
        with self.assertRaises(dataclasses.FrozenInstanceError):
            get_config().dtype = "float64"

    def test_invalid_values(self):
        for changes in (
            {"dtype": "int32"},
            {"tolerance": -1.0},
            {"seed": -5},
            {"log_epsilon": 0.5},
        ):
            with self.assertRaises(ValueError, msg=str(changes)):
                set_config(**changes)

    def test_failed_update_keeps_active_config(self):
        before = get_config()
        with self.assertRaises(ValueError):
            set_config(dtype="int8")
        self.assertEqual(get_config(), before)

    def test_tolerance_drives_equality(self):
        a = Tensor.zeros((1, 1, 1, 1, 1))
        b = a + 1e-3
        self.assertFalse(a == b)
        set_config(tolerance=1e-2)
        self.assertTrue(a == b)


class TestLogging(unittest.TestCase):
    def test_loggers_live_under_package(self):
        logger = get_logger("statgraph.infrastructure.graph._session")
        self.assertEqual(logger.name, "statgraph.infrastructure.graph._session")
        self.assertIs(logger, logging.getLogger("statgraph.infrastructure.graph._session"))

    def test_package_handler_is_installed_once(self):
        root = logging.getLogger("statgraph")
        before = len(root.handlers)
        get_logger("statgraph.other")
        get_logger()
        self.assertEqual(len(root.handlers), before)

        # test runners may attach capture handlers; only exact StreamHandlers count
        streams = [h for h in root.handlers if type(h) is logging.StreamHandler]
        self.assertEqual(len(streams), 1)
        self.assertEqual(
            streams[0].formatter._fmt,
            "[%(asctime)s][%(levelname)s][%(name)s] %(message)s",
        )

    def test_level_from_environment(self):
        root = logging.getLogger("statgraph")
        previous = root.level
        try:
            with mock.patch.dict(os.environ, {"STATGRAPH_LOG_LEVEL": "debug"}):
                get_logger()
                self.assertEqual(root.level, logging.DEBUG)
            with mock.patch.dict(os.environ, {"STATGRAPH_LOG_LEVEL": "nonsense"}):
                get_logger()
                self.assertEqual(root.level, logging.WARNING)
        finally:
            root.setLevel(previous)

    def test_debug_records_are_emitted_by_the_runtime(self):
        from statgraph import Placeholder, Session, layers

        x = Placeholder((1, 1, 2, 2, 1), name="x")
        root = logging.getLogger("statgraph")
        previous = root.level
        root.setLevel(logging.DEBUG)
        try:
            with self.assertLogs("statgraph", level="DEBUG") as cm:
                session = Session(layers.max_pooling(x, 2))
                session.run({x: np.ones((2, 2))})
        finally:
            root.setLevel(previous)
        text = "\n".join(cm.output)
        self.assertIn("collected", text)
        self.assertIn("forward pass", text)


if __name__ == "__main__":
    unittest.main()
