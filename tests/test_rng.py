from drinkjoy.core.rng import PythonRandomSource, chance, shuffled, uniform


class FixedRandom:
    def __init__(self, value: float):
        self.value = value

    def next(self) -> float:
        return self.value


def test_seeded_source_is_reproducible():
    a = PythonRandomSource(42)
    b = PythonRandomSource(42)
    assert [a.next() for _ in range(5)] == [b.next() for _ in range(5)]


def test_uniform_and_chance_follow_the_source():
    assert uniform(FixedRandom(0.0), -3, 3) == -3
    assert uniform(FixedRandom(0.5), -3, 3) == 0
    assert chance(FixedRandom(0.09), 0.10)
    assert not chance(FixedRandom(0.10), 0.10)


def test_shuffle_is_a_permutation_and_leaves_input_alone():
    items = list(range(10))
    out = shuffled(items, PythonRandomSource(7))
    assert sorted(out) == items
    assert items == list(range(10))


def test_shuffle_tolerates_a_source_returning_one():
    assert sorted(shuffled([1, 2, 3], FixedRandom(1.0))) == [1, 2, 3]
