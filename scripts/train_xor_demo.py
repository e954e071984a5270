"""
scripts/train_xor_demo.py

Train a tiny two-layer network on XOR with statgraph.

The network is built only through the public graph API; parameter updates
are plain SGD applied from the script with `Variable.assign`, since the
engine itself computes gradients only.

Usage
-----
python scripts/train_xor_demo.py
python scripts/train_xor_demo.py --epochs 3000 --lr 0.5 --hidden 8 --seed 0
"""

from __future__ import annotations

import argparse
import os
import sys

import numpy as np

# -------------------------
# Make repo_root/src importable
# -------------------------
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from statgraph import Placeholder, Session, layers, set_config  # noqa: E402

X = np.array([[0, 0], [0, 1], [1, 0], [1, 1]], dtype=np.float64).reshape(4, 1, 1, 1, 2)
Y = np.array([0, 1, 1, 0], dtype=np.float64).reshape(4, 1, 1, 1, 1)


def build(hidden: int):
    x = Placeholder((4, 1, 1, 1, 2), name="x")
    t = Placeholder((4, 1, 1, 1, 1), name="t")
    init = {"kernel_initializer": "xavier", "bias_initializer": "zeros"}
    h = layers.tanh(layers.full_connected(x, hidden, **init))
    y = layers.sigmoid(layers.full_connected(h, 1, **init))
    return x, t, y, layers.mse(y, t)


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--epochs", type=int, default=2000)
    ap.add_argument("--lr", type=float, default=0.5)
    ap.add_argument("--hidden", type=int, default=8)
    ap.add_argument("--seed", type=int, default=0)
    args = ap.parse_args()

    set_config(dtype="float64", seed=args.seed)
    x, t, y, loss = build(args.hidden)
    session = Session(loss)
    feed = {x: X, t: Y}

    for epoch in range(args.epochs):
        value = session.run(feed).item()
        session.zero_grad()
        session.backward()
        for v in session.trainable_variables:
            v.assign(v.value - v.grad * args.lr)
        if epoch % max(1, args.epochs // 10) == 0:
            print(f"epoch {epoch:5d}  loss {value:.6f}")

    session.run(feed)
    pred = session.output(y).to_numpy().reshape(-1)
    print("predictions:", np.round(pred, 3).tolist())
    print("targets:    ", Y.reshape(-1).tolist())


if __name__ == "__main__":
    main()
