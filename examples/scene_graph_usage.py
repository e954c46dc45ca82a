"""
Example: Scene graph usage.

Demonstrates how to use vectormaths for:
- Building a node hierarchy and reading world positions
- Dirty-flag propagation when a parent moves
- Orienting a camera node with look_at
- Picking objects with ray queries
"""

import logging
import math

from vectormaths import (
    AABB,
    Mat4,
    Quaternion,
    Ray,
    SceneGraph,
    Sphere,
    Vec3,
    ray_intersects_aabb,
    ray_intersects_sphere,
)

# Configure logging to see graph structure changes
logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")


def example_1_hierarchy():
    """Example 1: Parent/child transforms."""
    print("\n" + "=" * 70)
    print("EXAMPLE 1: Hierarchy")
    print("=" * 70)

    graph = SceneGraph()
    car = graph.create_node(position=Vec3(10, 0, 0), name="car")
    wheel = graph.create_node(position=Vec3(5, 0, 0), name="wheel")
    car.add_child(wheel)

    print(f"Wheel world position: {wheel.world_position()}")

    # Turn the car 90 degrees; the wheel follows
    car.rotate(Quaternion.from_axis_angle(Vec3.unit_z(), math.pi / 2))
    print(f"Wheel dirty after car rotation: {wheel.is_dirty}")
    print(f"Wheel world position: {wheel.world_position()}")

    return graph


def example_2_camera(graph: SceneGraph):
    """Example 2: Camera with look_at and projection."""
    print("\n" + "=" * 70)
    print("EXAMPLE 2: Camera")
    print("=" * 70)

    camera = graph.create_node(position=Vec3(0, 5, 20), name="camera")
    camera.look_at(Vec3(10, 0, 0))

    print(f"Camera forward: {camera.forward()}")
    print(f"Camera up:      {camera.up()}")

    view = camera.get_world_matrix().inverse()
    projection = Mat4.perspective(math.radians(60.0), 16.0 / 9.0, 0.1, 100.0)
    view_projection = projection * view
    print(f"View-projection:\n{view_projection.to_numpy().round(3)}")


def example_3_picking():
    """Example 3: Ray picking against bounding volumes."""
    print("\n" + "=" * 70)
    print("EXAMPLE 3: Picking")
    print("=" * 70)

    ray = Ray(Vec3(0, 0, -10), Vec3(0, 0, 1))
    targets = {
        "ball": Sphere(Vec3(0, 0, 0), 2.0),
        "crate": AABB(Vec3(-1, -1, 3), Vec3(1, 1, 5)),
    }

    for name, shape in targets.items():
        if isinstance(shape, Sphere):
            distance = ray_intersects_sphere(ray, shape)
        else:
            distance = ray_intersects_aabb(ray, shape)
        hit = f"hit at t={distance:.2f}" if distance is not None else "miss"
        print(f"  {name}: {hit}")


if __name__ == "__main__":
    graph = example_1_hierarchy()
    example_2_camera(graph)
    example_3_picking()
