"""
Benchmark scene graph world-matrix evaluation (cached local matrices).
"""

import math
import time

import numpy as np

from vectormaths import Mat4, Quaternion, SceneGraph, Vec3

DEPTH = 32
NUM_ITERATIONS = 200

print("=" * 80)
print("SCENE GRAPH WORLD MATRIX BENCHMARK")
print(f"Testing a chain of {DEPTH} nodes, {NUM_ITERATIONS} iterations")
print("=" * 80)

# Setup
graph = SceneGraph()
step = Quaternion.from_axis_angle(Vec3(0, 1, 1), math.pi / DEPTH)
nodes = [graph.create_node(position=Vec3(1, 0, 0), rotation=step)]
for i in range(1, DEPTH):
    node = graph.create_node(position=Vec3(1, 0, 0), rotation=step, name=f"n{i}")
    nodes[-1].add_child(node)
    nodes.append(node)
leaf = nodes[-1]

# Warmup (JIT-compiles the determinant/inverse kernels)
print("\nWarming up...")
for _ in range(5):
    leaf.get_world_matrix().inverse()


def run(label, mutate):
    times = []
    for _ in range(NUM_ITERATIONS):
        mutate()
        start = time.perf_counter()
        leaf.get_world_matrix()
        times.append((time.perf_counter() - start) * 1000)

    print(f"\n{label}:")
    print(f"  Time: {np.mean(times):.3f} ms +/- {np.std(times):.3f} ms")


run("Clean chain (all local matrices cached)", lambda: None)
run("Root moved (whole chain dirty)", lambda: nodes[0].translate(Vec3(0.001, 0, 0)))
run("Leaf moved (one node dirty)", lambda: leaf.translate(Vec3(0.001, 0, 0)))

# Kernel throughput
print("\n" + "=" * 80)
print("MAT4 INVERSE")
print("=" * 80)

m = Mat4.from_numpy(np.random.randn(4, 4) + 4 * np.eye(4))
start = time.perf_counter()
for _ in range(10_000):
    m.inverse()
elapsed = time.perf_counter() - start
print(f"  {10_000 / elapsed / 1e3:.1f}K inverses/sec")
