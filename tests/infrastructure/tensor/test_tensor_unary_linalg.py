# tests/infrastructure/tensor/test_tensor_unary_linalg.py
import unittest

import numpy as np

from statgraph import Axis, ShapeError, Tensor, UnsupportedAxisError


def _tensor_from_np(arr: np.ndarray) -> Tensor:
    return Tensor.from_numpy(np.asarray(arr, dtype=np.float64))


class TestElementwiseMath(unittest.TestCase):
    def setUp(self):
        self.a = np.linspace(-4.0, 4.0, 12).reshape(1, 1, 2, 2, 3)
        self.t = _tensor_from_np(self.a)

    def test_exp_log(self):
        np.testing.assert_allclose(self.t.exp().to_numpy(), np.exp(self.a))
        np.testing.assert_allclose(self.t.exp().log().to_numpy(), self.a, atol=1e-12)

    def test_log_of_zero_is_minus_inf(self):
        out = Tensor.zeros((1, 1, 1, 1, 1)).log()
        self.assertEqual(out.item(), float("-inf"))

    def test_sigmoid_and_tanh(self):
        np.testing.assert_allclose(
            self.t.sigmoid().to_numpy(), 1.0 / (1.0 + np.exp(-self.a)), rtol=1e-12
        )
        np.testing.assert_allclose(self.t.tanh().to_numpy(), np.tanh(self.a))

    def test_sigmoid_large_negative_input(self):
        out = _tensor_from_np(np.array([-1000.0, 1000.0])).sigmoid()
        np.testing.assert_allclose(out.data, [0.0, 1.0])

    def test_clamp(self):
        out = self.t.clamp(-1.0, 2.0)
        self.assertEqual(out.find_min(), -1.0)
        self.assertEqual(out.find_max(), 2.0)


class TestRelu(unittest.TestCase):
    def setUp(self):
        self.x = _tensor_from_np(np.array([-2.0, -0.5, 0.0, 0.5, 1.0, 3.0]))

    def test_standard_relu(self):
        np.testing.assert_allclose(self.x.relu().data, [0, 0, 0, 0.5, 1, 3])
        np.testing.assert_allclose(self.x.relu_grad().data, [0, 0, 1, 1, 1, 1])

    def test_saturating_threshold_and_slope(self):
        out = self.x.relu(max_value=1.0, threshold=0.0, negative_slope=0.1)
        np.testing.assert_allclose(out.data, [-0.2, -0.05, 0.0, 0.5, 1.0, 1.0])
        mask = self.x.relu_grad(max_value=1.0, threshold=0.0, negative_slope=0.1)
        np.testing.assert_allclose(mask.data, [0.1, 0.1, 1.0, 1.0, 0.0, 0.0])

    def test_shifted_threshold(self):
        out = self.x.relu(threshold=1.0, negative_slope=0.5)
        np.testing.assert_allclose(out.data, [-1.5, -0.75, -0.5, -0.25, 1.0, 3.0])


class TestHinge(unittest.TestCase):
    def setUp(self):
        self.x = _tensor_from_np(np.array([-2.0, -0.5, 0.0, 0.5, 1.0, 3.0]))

    def test_positive_label(self):
        np.testing.assert_allclose(self.x.hinge(1.0).data, [3.0, 1.5, 1.0, 0.5, 0.0, 0.0])

    def test_negative_label(self):
        np.testing.assert_allclose(self.x.hinge(-1.0).data, [0.0, 0.5, 1.0, 1.5, 2.0, 4.0])

    def test_keeps_shape_dtype_and_input(self):
        x = Tensor.full((2, 1, 1, 3, 1), 0.25, dtype="float32")
        out = x.hinge(2.0)
        self.assertEqual(out.shape, x.shape)
        self.assertEqual(out.dtype, np.float32)
        np.testing.assert_allclose(out.data, 0.5)
        np.testing.assert_allclose(x.data, 0.25)


class TestSoftmax(unittest.TestCase):
    def test_default_axis_is_frame(self):
        a = np.random.default_rng(0).standard_normal((2, 4, 1, 1, 3))
        out = _tensor_from_np(a).softmax().to_numpy()
        np.testing.assert_allclose(out.sum(axis=Axis.FRAME), 1.0)
        e = np.exp(a)
        np.testing.assert_allclose(out, e / e.sum(axis=1, keepdims=True))

    def test_channel_axis_and_large_values(self):
        a = np.array([1000.0, 1001.0, 1002.0]).reshape(1, 1, 1, 1, 3)
        out = _tensor_from_np(a).softmax(Axis.CHANNEL).to_numpy()
        self.assertTrue(np.all(np.isfinite(out)))
        e = np.exp(a - 1002.0)
        np.testing.assert_allclose(out, e / e.sum())

    def test_invalid_axis(self):
        with self.assertRaises(UnsupportedAxisError):
            Tensor.zeros((1, 1, 1, 1, 3)).softmax(5)


class TestMatmul(unittest.TestCase):
    def setUp(self):
        self.rng = np.random.default_rng(5)

    def test_batched_product(self):
        a = self.rng.standard_normal((2, 3, 1, 4, 5))
        b = self.rng.standard_normal((2, 3, 1, 5, 2))
        out = _tensor_from_np(a) @ _tensor_from_np(b)
        self.assertEqual(out.shape, (2, 3, 1, 4, 2))
        np.testing.assert_allclose(out.to_numpy(), np.matmul(a, b))

    def test_weight_sharing_across_batch(self):
        a = self.rng.standard_normal((4, 1, 2, 3, 5))
        w = self.rng.standard_normal((1, 1, 1, 5, 2))
        out = _tensor_from_np(a).matmul(_tensor_from_np(w)).to_numpy()
        for n in range(4):
            for i in range(2):
                np.testing.assert_allclose(out[n, 0, i], a[n, 0, i] @ w[0, 0, 0])

    def test_inner_dimension_mismatch(self):
        with self.assertRaises(ShapeError):
            Tensor.zeros((1, 1, 1, 2, 3)).matmul(Tensor.zeros((1, 1, 1, 4, 2)))

    def test_batch_mismatch(self):
        with self.assertRaises(ShapeError):
            Tensor.zeros((2, 1, 1, 2, 3)).matmul(Tensor.zeros((3, 1, 1, 3, 2)))

    def test_identity_is_neutral(self):
        a = self.rng.standard_normal((1, 1, 1, 3, 3))
        t = _tensor_from_np(a)
        self.assertTrue(t.matmul(Tensor.identity(3, dtype="float64")) == t)

    def test_kronecker(self):
        a = np.array([[1.0, 2.0], [3.0, 4.0]]).reshape(1, 1, 1, 2, 2)
        b = np.ones((1, 1, 1, 2, 2))
        out = _tensor_from_np(a).kronecker(_tensor_from_np(b))
        self.assertEqual(out.shape, (1, 1, 1, 4, 4))
        np.testing.assert_allclose(out.to_numpy()[0, 0, 0], np.kron(a[0, 0, 0], b[0, 0, 0]))


if __name__ == "__main__":
    unittest.main()
