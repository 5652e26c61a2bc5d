from src.processing.diagnostics import Diagnostics, SkipReason


class TestDiagnostics:
    def test_records_in_order_and_counts(self):
        diagnostics = Diagnostics()
        diagnostics.record(SkipReason.LOOKUP_MISS, "481130001001", "not in table")
        diagnostics.record(SkipReason.MISSING_GEOMETRY, "481130001002")
        diagnostics.record(SkipReason.LOOKUP_MISS, "481130001003")

        assert len(diagnostics) == 3
        assert diagnostics.counts() == {"lookup_miss": 2, "missing_geometry": 1}
        assert [e.geoid for e in diagnostics.by_reason(SkipReason.LOOKUP_MISS)] == [
            "481130001001",
            "481130001003",
        ]

    def test_to_dict(self):
        diagnostics = Diagnostics()
        diagnostics.record(SkipReason.EMPTY_RADIUS, None, "1mile")

        assert diagnostics.to_dict() == {
            "counts": {"empty_radius": 1},
            "events": [{"reason": "empty_radius", "geoid": None, "detail": "1mile"}],
        }

    def test_instances_do_not_share_events(self):
        first = Diagnostics()
        first.record(SkipReason.GEOMETRY_ERROR, "x")

        assert len(Diagnostics()) == 0
