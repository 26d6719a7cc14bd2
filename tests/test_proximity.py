from __future__ import annotations

from backyard.geom import Vec3
from dogchase.actors import Collectible, CollectibleKind, build_dogs
from dogchase.sim.proximity import all_within, collect_in_range, find_catcher, within_range


def test_within_range_is_strict_and_three_dimensional() -> None:
    assert within_range(Vec3(), Vec3(1.0, 0.0, 0.0), 1.5) is True
    assert within_range(Vec3(), Vec3(1.5, 0.0, 0.0), 1.5) is False
    assert within_range(Vec3(), Vec3(1.0, 1.2, 0.0), 1.5) is False


def test_find_catcher_returns_closest_dog_in_radius() -> None:
    dogs = build_dogs()
    dogs[0].pos = Vec3(1.2, 0.0, 0.0)
    dogs[1].pos = Vec3(0.0, 0.0, 0.5)
    dogs[2].pos = Vec3(40.0, 0.0, 0.0)
    assert find_catcher(Vec3(), dogs) is dogs[1]

    for dog in dogs:
        dog.pos = Vec3(10.0, 0.0, 10.0)
    assert find_catcher(Vec3(), dogs) is None


def test_collect_in_range_skips_hidden_items_and_does_not_mutate() -> None:
    items = [
        Collectible(pos=Vec3(0.5, 0.0, 0.0), kind=CollectibleKind.SAUSAGE),
        Collectible(pos=Vec3(0.0, 0.0, 1.0), kind=CollectibleKind.SAUSAGE, visible=False),
        Collectible(pos=Vec3(5.0, 0.0, 0.0), kind=CollectibleKind.SAUSAGE),
        Collectible(pos=Vec3(-1.0, 0.0, 0.0), kind=CollectibleKind.SAUSAGE),
    ]
    assert collect_in_range(Vec3(), items) == [0, 3]
    assert [item.visible for item in items] == [True, False, True, True]


def test_all_within_requires_every_point_and_a_non_empty_list() -> None:
    points = [Vec3(1.0, 0.0, 0.0), Vec3(0.0, 0.0, -1.9)]
    assert all_within(Vec3(), points, 2.0) is True
    assert all_within(Vec3(), [*points, Vec3(3.0, 0.0, 0.0)], 2.0) is False
    assert all_within(Vec3(), [], 2.0) is False
