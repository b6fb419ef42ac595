import pytest

from acquire import NUM_TILES, SnapshotError, TileBag


def test_seeded_shuffle_is_reproducible():
    a = TileBag.build(seed=7)
    b = TileBag.build(seed=7)
    assert a.order == b.order
    assert sorted(a.order) == list(range(NUM_TILES))


def test_partial_bag_is_completed_in_ascending_order():
    bag = TileBag.build([5, 3, 100])
    assert bag.order[:3] == [5, 3, 100]
    rest = bag.order[3:]
    assert rest == sorted(rest)
    assert len(bag.order) == NUM_TILES


@pytest.mark.parametrize("tiles", [[1, 2, 1], [NUM_TILES], [-1], ["1A"]])
def test_invalid_bags_are_rejected(tiles):
    with pytest.raises(SnapshotError) as ei:
        TileBag.build(tiles)
    assert ei.value.code == "INVALID_TILE_BAG"


def test_draw_until_empty():
    bag = TileBag.build(list(range(NUM_TILES)))
    drawn = [bag.draw() for _ in range(NUM_TILES)]
    assert drawn == list(range(NUM_TILES))
    assert bag.is_empty()
    assert bag.remaining() == 0
    assert bag.draw() is None


def test_undrawn_follows_the_draw_position():
    bag = TileBag.build([7, 3])
    assert bag.draw() == 7
    assert bag.undrawn()[0] == 3
    assert len(bag.undrawn()) == bag.remaining() == NUM_TILES - 1
