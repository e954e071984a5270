# tests/infrastructure/graph/test_catalog.py
import unittest

from statgraph import OpKind, Operation, OperationCatalog, Placeholder, UnknownOperationError
from statgraph.infrastructure.graph import OperationRule


class TestOperationCatalog(unittest.TestCase):
    def test_every_kind_has_a_rule(self):
        self.assertEqual(set(OperationCatalog.kinds()), set(OpKind))
        self.assertEqual(OperationCatalog.kinds(), tuple(OpKind))

    def test_rules_are_consistent_records(self):
        for kind in OpKind:
            rule = OperationCatalog.get(kind)
            self.assertIsInstance(rule, OperationRule)
            self.assertIs(rule.kind, kind)
            self.assertIn(rule.arity, (1, 2))
            for fn in (rule.infer_shape, rule.compute, rule.gradient):
                self.assertTrue(callable(fn))

    def test_only_layers_with_weights_have_build(self):
        with_build = {k for k in OpKind if OperationCatalog.get(k).build is not None}
        self.assertEqual(
            with_build, {OpKind.CONV2D, OpKind.CONV3D, OpKind.FULL_CONNECTED}
        )

    def test_binary_kinds(self):
        binary = {k for k in OpKind if OperationCatalog.get(k).arity == 2}
        self.assertEqual(
            binary, {OpKind.ADD, OpKind.MATMUL, OpKind.MSE, OpKind.CROSS_ENTROPY}
        )

    def test_unknown_kind_raises_key_error(self):
        with self.assertRaises(UnknownOperationError) as ctx:
            OperationCatalog.get("add")
        self.assertIsInstance(ctx.exception, KeyError)
        self.assertEqual(ctx.exception.kind, "add")

    def test_double_registration_raises(self):
        class AnotherAdd:
            arity = 2

            @staticmethod
            def infer_shape(input_shapes, attrs):
                return input_shapes[0]

            @staticmethod
            def compute(inputs, attrs):
                return inputs[0]

            @staticmethod
            def gradient(grad_out, inputs, output, attrs):
                return grad_out, grad_out

        with self.assertRaises(ValueError):
            OperationCatalog.register(OpKind.ADD)(AnotherAdd)
        self.assertIsNot(OperationCatalog.get(OpKind.ADD).compute, AnotherAdd.compute)

    def test_register_requires_op_kind(self):
        with self.assertRaises(TypeError):
            OperationCatalog.register("add")

    def test_rule_records_are_frozen(self):
        rule = OperationCatalog.get(OpKind.ADD)
        with self.assertRaises(AttributeError):
            rule.arity = 3


class TestOperationArity(unittest.TestCase):
    def test_wrong_number_of_inputs(self):
        x = Placeholder((1, 1, 1, 1, 1))
        with self.assertRaises(ValueError):
            Operation(OpKind.ADD, [x])
        with self.assertRaises(ValueError):
            Operation(OpKind.SIGMOID, [x, x])


if __name__ == "__main__":
    unittest.main()
