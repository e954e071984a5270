# tests/infrastructure/graph/test_nodes.py
import unittest

import numpy as np

from statgraph import (
    NodeKind,
    OpKind,
    Operation,
    Placeholder,
    ShapeError,
    Tensor,
    Variable,
    layers,
    set_config,
)


class TestVariable(unittest.TestCase):
    def setUp(self):
        set_config(seed=0)

    def tearDown(self):
        set_config(seed=None)

    def test_value_from_initializer_and_zero_grad(self):
        v = Variable("w", (1, 1, 1, 2, 3), initializer="ones")
        self.assertIs(v.kind, NodeKind.VARIABLE)
        self.assertEqual(v.shape, (1, 1, 1, 2, 3))
        self.assertEqual(v.value.find_min(), 1.0)
        self.assertEqual(v.grad.find_max(), 0.0)
        self.assertEqual(v.grad.find_min(), 0.0)

    def test_default_initializer_is_uniform(self):
        v = Variable("w", (1, 1, 4, 4, 2))
        self.assertGreaterEqual(v.value.find_min(), 0.0)
        self.assertLess(v.value.find_max(), 1.0)
        self.assertGreater(v.value.find_max(), 0.0)

    def test_accumulate_and_zero_grad(self):
        v = Variable("w", (1, 1, 1, 1, 2), initializer="zeros")
        v.accumulate_grad(Tensor.ones((1, 1, 1, 1, 2)))
        v.accumulate_grad(Tensor.full((1, 1, 1, 1, 2), 2.0))
        np.testing.assert_allclose(v.grad.data, [3.0, 3.0])
        v.zero_grad()
        np.testing.assert_allclose(v.grad.data, [0.0, 0.0])

    def test_frozen_variable_ignores_gradients(self):
        v = Variable("w", (1, 1, 1, 1, 2), trainable=False)
        v.accumulate_grad(Tensor.ones((1, 1, 1, 1, 2)))
        self.assertEqual(v.grad.find_max(), 0.0)

    def test_accumulate_shape_mismatch(self):
        v = Variable("w", (1, 1, 1, 1, 2))
        with self.assertRaises(ShapeError):
            v.accumulate_grad(Tensor.ones((1, 1, 1, 2, 1)))

    def test_assign_copies_tensor(self):
        v = Variable("w", (1, 1, 1, 1, 2))
        new = Tensor.full((1, 1, 1, 1, 2), 5.0)
        v.assign(new)
        new.fill(0.0)
        self.assertEqual(v.value.find_min(), 5.0)

    def test_assign_array_and_mismatch(self):
        v = Variable("w", (1, 1, 1, 2, 2))
        v.assign(np.array([[1.0, 2.0], [3.0, 4.0]]))
        self.assertEqual(v.value.at(0, 0, 0, 1, 0), 3.0)
        self.assertEqual(v.value.dtype, v.grad.dtype)
        with self.assertRaises(ShapeError):
            v.assign(np.zeros((3, 2)))

    def test_unknown_initializer(self):
        with self.assertRaises(ValueError):
            Variable("w", (1, 1, 1, 1, 1), initializer="nope")


class TestPlaceholder(unittest.TestCase):
    def test_low_rank_feed_takes_declared_layout(self):
        p = Placeholder((1, 1, 2, 2, 1), name="x")
        t = p.check_feed([[1, 2], [3, 4]])
        self.assertEqual(t.shape, (1, 1, 2, 2, 1))
        self.assertEqual(t.at(0, 0, 1, 0, 0), 3.0)

    def test_sample_axis_may_differ(self):
        p = Placeholder((1, 1, 1, 1, 3))
        self.assertEqual(p.check_feed(np.zeros((4, 1, 1, 1, 3))).shape, (4, 1, 1, 1, 3))
        self.assertEqual(p.check_feed(Tensor.zeros((2, 1, 1, 1, 3))).shape, (2, 1, 1, 1, 3))

    def test_other_axes_must_match(self):
        p = Placeholder((1, 1, 1, 1, 3), name="x")
        with self.assertRaises(ShapeError) as ctx:
            p.check_feed(np.zeros((1, 1, 1, 2, 3)))
        self.assertIn("'x'", str(ctx.exception))
        with self.assertRaises(ShapeError):
            p.check_feed(np.zeros(4))


class TestOperation(unittest.TestCase):
    def test_registers_as_consumer_of_every_input(self):
        x = Placeholder((1, 1, 1, 1, 2))
        y = Placeholder((1, 1, 1, 1, 2))
        op = layers.add(x, y)
        self.assertEqual(op.inputs, (x, y))
        self.assertEqual(x.consumers, (op,))
        self.assertEqual(y.consumers, (op,))
        self.assertIs(op.kind, NodeKind.OPERATION)
        self.assertIs(op.op_kind, OpKind.ADD)

    def test_default_names(self):
        op = layers.sigmoid(Placeholder((1, 1, 1, 1, 1)))
        self.assertEqual(op.name, f"sigmoid_{op.uid}")
        self.assertEqual(layers.tanh(op, name="act").name, "act")

    def test_uids_are_unique(self):
        nodes = [Placeholder((1, 1, 1, 1, 1)) for _ in range(10)]
        self.assertEqual(len({n.uid for n in nodes}), 10)

    def test_attrs_are_read_only(self):
        op = layers.max_pooling(Placeholder((1, 1, 4, 4, 1)), 2)
        self.assertEqual(op.attrs["width"], 2)
        with self.assertRaises(TypeError):
            op.attrs["width"] = 3

    def test_build_creates_weights_once(self):
        x = Placeholder((1, 1, 5, 5, 3))
        op = layers.conv2d(x, width=3, n_filters=4, name="conv")
        self.assertFalse(op.built)
        op.build(x.shape)
        self.assertTrue(op.built)
        weights = op.weights
        self.assertEqual(set(weights), {"kernel", "bias"})
        self.assertEqual(weights["kernel"].shape, (4, 1, 3, 3, 3))
        self.assertEqual(weights["bias"].shape, (1, 1, 1, 1, 4))
        self.assertEqual(weights["kernel"].name, "conv/kernel")
        self.assertEqual(op.inputs, (x, weights["kernel"], weights["bias"]))
        self.assertEqual(weights["kernel"].consumers, (op,))

        op.build(x.shape)
        self.assertEqual(len(op.inputs), 3)
        self.assertIs(op.weights["kernel"], weights["kernel"])

    def test_built_weights_carry_their_layout(self):
        x = Placeholder((1, 1, 2, 2, 3))
        conv = layers.conv2d(x, width=1, n_filters=1)
        conv.build(x.shape)
        self.assertEqual(conv.weights["kernel"].layout, "conv")
        self.assertEqual(conv.weights["bias"].layout, "dense")

        fc = layers.full_connected(x, 2)
        fc.build(x.shape)
        self.assertEqual(fc.weights["weight"].layout, "dense")
        self.assertIsNone(Variable("v", (1, 1, 1, 1, 1)).layout)
        with self.assertRaises(ValueError):
            Variable("v", (1, 1, 1, 1, 1), layout="sparse")

    def test_single_filter_pointwise_kernel_uses_conv_fans(self):
        previous = set_config(dtype="float64", seed=11)
        try:
            channels = 4096
            x = Placeholder((1, 1, 2, 2, channels))
            conv = layers.conv2d(x, width=1, n_filters=1, kernel_initializer="kaiming")
            conv.build(x.shape)
            kernel = conv.weights["kernel"].value
            self.assertEqual(kernel.shape, (1, 1, 1, 1, channels))
            self.assertAlmostEqual(
                float(np.std(kernel.data)), np.sqrt(2.0 / channels), delta=0.003
            )
        finally:
            set_config(previous)

    def test_operations_without_weights_are_built(self):
        self.assertTrue(layers.relu(Placeholder((1, 1, 1, 1, 1))).built)

    def test_add_weight_rejects_duplicates(self):
        op = layers.full_connected(Placeholder((1, 1, 1, 1, 3)), 2)
        op.add_weight("extra", (1, 1, 1, 1, 1), trainable=False, initializer="zeros")
        with self.assertRaises(ValueError):
            op.add_weight("extra", (1, 1, 1, 1, 1))

    def test_describe(self):
        op = layers.relu(Placeholder((1, 1, 1, 1, 1)), name="r")
        self.assertEqual(op.describe(), "Operation[relu](r)")
        self.assertIn("uid=", repr(op))


if __name__ == "__main__":
    unittest.main()
