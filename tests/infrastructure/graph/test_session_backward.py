# tests/infrastructure/graph/test_session_backward.py
import unittest

import numpy as np

from statgraph import (
    NotEvaluatedError,
    Placeholder,
    Session,
    Variable,
    get_config,
    layers,
    set_config,
)


class TestBackwardContract(unittest.TestCase):
    def setUp(self):
        self._previous = set_config(dtype="float64", seed=0)

    def tearDown(self):
        set_config(self._previous)

    def test_add_into_mse_gives_prediction_minus_target(self):
        x = Placeholder((1, 1, 1, 1, 3), name="x")
        y = Placeholder((1, 1, 1, 1, 3), name="y")
        t = Placeholder((1, 1, 1, 1, 3), name="t")
        pred = layers.add(x, y)
        session = Session(layers.mse(pred, t))

        xv, yv, tv = np.array([1.0, 2.0, 3.0]), np.array([0.5, -1.0, 2.0]), np.array([1.0, 1.0, 1.0])
        session.run({x: xv, y: yv, t: tv})
        session.backward()

        expected = (xv + yv - tv).reshape(1, 1, 1, 1, 3)
        np.testing.assert_allclose(session.gradient(x).to_numpy(), expected)
        np.testing.assert_allclose(session.gradient(y).to_numpy(), expected)
        np.testing.assert_allclose(session.gradient(t).to_numpy(), -expected)

    def test_root_is_seeded_with_ones(self):
        x = Placeholder((1, 1, 2, 2, 1))
        root = layers.sigmoid(x)
        session = Session(root)
        session.run({x: np.zeros((2, 2))})
        session.backward()
        np.testing.assert_allclose(session.gradient(root).to_numpy(), 1.0)
        np.testing.assert_allclose(session.gradient(x).to_numpy(), 0.25)

    def test_diamond_contributions_are_summed_once(self):
        x = Placeholder((1, 1, 1, 1, 4), name="x")
        a = layers.sigmoid(x)
        b = layers.tanh(x)
        s = layers.add(a, b)
        session = Session(s)
        xv = np.array([-1.0, 0.0, 0.5, 2.0])
        session.run({x: xv})
        session.backward()

        sig = 1.0 / (1.0 + np.exp(-xv))
        expected = sig * (1.0 - sig) + (1.0 - np.tanh(xv) ** 2)
        np.testing.assert_allclose(session.gradient(x).data, expected, rtol=1e-12)

    def test_same_input_in_two_slots(self):
        x = Placeholder((1, 1, 1, 1, 2))
        session = Session(layers.add(x, x))
        session.run({x: [1.0, 2.0]})
        session.backward()
        np.testing.assert_allclose(session.gradient(x).data, [2.0, 2.0])

    def test_consumers_outside_the_graph_do_not_contribute(self):
        x = Placeholder((1, 1, 1, 1, 2))
        inside = layers.sigmoid(x)
        layers.tanh(x)
        layers.add(x, x)
        session = Session(inside)
        session.run({x: [0.0, 0.0]})
        session.backward()
        np.testing.assert_allclose(session.gradient(x).data, [0.25, 0.25])

    def test_rerun_discards_gradients(self):
        x = Placeholder((1, 1, 1, 1, 1))
        session = Session(layers.sigmoid(x))
        session.run({x: [0.0]})
        session.backward()
        session.gradient(x)
        session.run({x: [1.0]})
        with self.assertRaises(NotEvaluatedError):
            session.gradient(x)


class TestVariableAccumulation(unittest.TestCase):
    def setUp(self):
        self._previous = set_config(dtype="float64", seed=0)

    def tearDown(self):
        set_config(self._previous)

    def _graph(self, trainable=True):
        x = Placeholder((1, 1, 1, 1, 2), name="x")
        v = Variable("v", (1, 1, 1, 1, 2), trainable=trainable, initializer="zeros")
        return x, v, Session(layers.add(x, v))

    def test_gradients_accumulate_across_passes(self):
        x, v, session = self._graph()
        for expected in (1.0, 2.0, 3.0):
            session.run({x: [1.0, 2.0]})
            session.backward()
            np.testing.assert_allclose(v.grad.data, [expected, expected])
        np.testing.assert_allclose(session.gradient(v).data, [1.0, 1.0])

    def test_zero_grad_resets_every_variable(self):
        x, v, session = self._graph()
        session.run({x: [1.0, 2.0]})
        session.backward()
        session.zero_grad()
        np.testing.assert_allclose(v.grad.data, [0.0, 0.0])

    def test_frozen_variable_still_has_a_gradient(self):
        x, v, session = self._graph(trainable=False)
        session.run({x: [1.0, 2.0]})
        session.backward()
        np.testing.assert_allclose(v.grad.data, [0.0, 0.0])
        np.testing.assert_allclose(session.gradient(v).data, [1.0, 1.0])
        self.assertEqual(session.trainable_variables, ())
        self.assertEqual(session.variables, (v,))

    def test_shared_weight_gets_summed_gradient(self):
        x = Placeholder((1, 1, 1, 1, 2))
        w = Variable("w", (1, 1, 1, 2, 2), initializer="ones")
        h = layers.matmul(x, w)
        root = layers.add(layers.matmul(h, w), h)
        session = Session(root)
        session.run({x: [1.0, 2.0]})
        session.backward()

        xv = np.array([[1.0, 2.0]])
        g = np.ones((1, 2))
        # root = x.w.w + x.w
        expected = xv.T @ (g @ np.ones((2, 2)).T) + (xv @ np.ones((2, 2))).T @ g + xv.T @ g
        np.testing.assert_allclose(w.grad.to_numpy()[0, 0, 0], expected)


class TestDefaultPrecision(unittest.TestCase):
    def test_float32_gradients(self):
        self.assertEqual(get_config().dtype, "float32")
        x = Placeholder((1, 1, 1, 1, 2))
        t = Placeholder((1, 1, 1, 1, 2))
        session = Session(layers.mse(layers.sigmoid(x), t))
        session.run({x: [0.0, 0.0], t: [1.0, 0.0]})
        session.backward()
        grad = session.gradient(x)
        self.assertEqual(grad.dtype, np.float32)
        np.testing.assert_allclose(grad.data, [-0.125, 0.125], rtol=1e-6)


if __name__ == "__main__":
    unittest.main()
