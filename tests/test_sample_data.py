from datetime import date

from vizengine.charting import SampleDataGenerator


def test_same_seed_same_data():
    a, b = SampleDataGenerator(seed=42), SampleDataGenerator(seed=42)
    assert a.time_series() == b.time_series()
    assert a.flow_links() == b.flow_links()
    assert SampleDataGenerator(seed=1).shares() != SampleDataGenerator(seed=2).shares()


def test_time_series_shape():
    series = SampleDataGenerator().time_series("visits", days=5, start=date(2024, 2, 27))
    assert series.name == "visits"
    assert [p.key for p in series][-1] == date(2024, 3, 2)


def test_stacked_series_are_non_negative():
    data = SampleDataGenerator(seed=9).stacked_series(3, days=30)
    assert list(data) == ["series-0", "series-1", "series-2"]
    assert all(v >= 0 for s in data.values() for v in s.values())


def test_shares_sum_to_total():
    shares = SampleDataGenerator().shares(["a", "b", "c"], total=100)
    assert abs(sum(shares.values()) - 100) < 0.05


def test_chord_matrix_has_empty_diagonal():
    data = SampleDataGenerator().chord_matrix(["a", "b", "c"])
    assert [data["matrix"][i][i] for i in range(3)] == [0, 0, 0]


def test_flow_links_never_empty():
    links = SampleDataGenerator().flow_links(["a"], ["x"], density=0.0)
    assert links == [{"source": "a", "target": "x", "value": 1000}]


def test_daily_counts_cover_every_day():
    counts = SampleDataGenerator(seed=4).daily_counts(days=10, start=date(2024, 1, 1))
    assert list(counts)[0] == date(2024, 1, 1)
    assert list(counts)[-1] == date(2024, 1, 10)
    assert all(v >= 0 and v == int(v) for v in counts.values())
