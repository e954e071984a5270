# tests/infrastructure/layers/test_builders.py
import unittest

from statgraph import Axis, OpKind, Placeholder, UnsupportedAxisError, layers


class TestBuilderKinds(unittest.TestCase):
    def setUp(self):
        self.x = Placeholder((1, 1, 4, 4, 2))
        self.y = Placeholder((1, 1, 4, 4, 2))

    def test_each_builder_creates_its_kind(self):
        x, y = self.x, self.y
        cases = [
            (layers.add(x, y), OpKind.ADD),
            (layers.matmul(x, y), OpKind.MATMUL),
            (layers.conv2d(x, 3, 2), OpKind.CONV2D),
            (layers.conv3d(x, 1, 2), OpKind.CONV3D),
            (layers.max_pooling(x, 2), OpKind.MAX_POOLING),
            (layers.min_pooling(x, 2), OpKind.MIN_POOLING),
            (layers.avg_pooling(x, 2), OpKind.AVG_POOLING),
            (layers.reshape(x, (1, 1, 1, 1, 32)), OpKind.RESHAPE),
            (layers.flatten(x), OpKind.FLATTEN),
            (layers.full_connected(x, 3), OpKind.FULL_CONNECTED),
            (layers.sigmoid(x), OpKind.SIGMOID),
            (layers.tanh(x), OpKind.TANH),
            (layers.relu(x), OpKind.RELU),
            (layers.leaky_relu(x), OpKind.LEAKY_RELU),
            (layers.softmax(x), OpKind.SOFTMAX),
            (layers.mse(x, y), OpKind.MSE),
            (layers.cross_entropy(x, y), OpKind.CROSS_ENTROPY),
        ]
        self.assertEqual({kind for _, kind in cases}, set(OpKind))
        for op, kind in cases:
            self.assertIs(op.op_kind, kind)


class TestBuilderAttributes(unittest.TestCase):
    def setUp(self):
        self.x = Placeholder((1, 1, 4, 4, 2))

    def test_conv_defaults(self):
        op = layers.conv2d(self.x, width=3, n_filters=8)
        self.assertEqual(op.attrs["padding"], 0)
        self.assertEqual(op.attrs["stride"], 1)
        self.assertEqual(op.attrs["kernel_initializer"], "uniform")
        self.assertEqual(op.attrs["bias_initializer"], "uniform")

    def test_conv_rejects_bad_integers(self):
        for kwargs in (
            {"width": 0, "n_filters": 1},
            {"width": 2, "n_filters": 0},
            {"width": 2, "n_filters": 1, "padding": -1},
            {"width": 2, "n_filters": 1, "stride": 0},
            {"width": 2.0, "n_filters": 1},
        ):
            with self.assertRaises(ValueError, msg=str(kwargs)):
                layers.conv2d(self.x, **kwargs)

    def test_pooling_rejects_bad_width(self):
        with self.assertRaises(ValueError):
            layers.max_pooling(self.x, 0)

    def test_full_connected_rejects_bad_outputs(self):
        with self.assertRaises(ValueError):
            layers.full_connected(self.x, 0)

    def test_activation_attributes(self):
        self.assertEqual(layers.relu(self.x).attrs["negative_slope"], 0.0)
        leaky = layers.leaky_relu(self.x)
        self.assertEqual(leaky.attrs["negative_slope"], 0.01)
        self.assertIsNone(leaky.attrs["max_value"])
        self.assertEqual(layers.relu(self.x, max_value=6.0).attrs["max_value"], 6.0)

    def test_axis_defaults_and_validation(self):
        self.assertEqual(layers.softmax(self.x).attrs["axis"], Axis.FRAME)
        self.assertEqual(layers.flatten(self.x).attrs["axis"], Axis.WIDTH)
        with self.assertRaises(UnsupportedAxisError):
            layers.softmax(self.x, axis=5)
        with self.assertRaises(UnsupportedAxisError):
            layers.flatten(self.x, axis=-1)

    def test_reshape_stores_a_shape(self):
        op = layers.reshape(self.x, (1, 1, 1, 1, 32))
        self.assertEqual(op.attrs["shape"], (1, 1, 1, 1, 32))

    def test_names(self):
        self.assertEqual(layers.sigmoid(self.x, name="act").name, "act")
        self.assertEqual(layers.conv2d(self.x, 3, 2, name="c1").name, "c1")


if __name__ == "__main__":
    unittest.main()
