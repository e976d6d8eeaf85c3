"""
Unit tests for the candidate model, deduplication and ranking.
"""
import pytest

from candidates import (
    FIELDS,
    Candidate,
    ExtractionResult,
    confidence_level,
    dedupe_candidates,
    score,
    sentinel,
)


class TestDedupeCandidates:
    """Test dedupe_candidates()."""

    def test_empty_list_gets_sentinel(self):
        """An empty field still yields exactly one sentinel entry."""
        result = dedupe_candidates([])
        assert result == [Candidate(value="", method="none", confidence=0.1)]

    def test_higher_confidence_wins(self):
        """On a collision the higher confidence candidate is kept."""
        result = dedupe_candidates([
            Candidate("Muster GmbH", "bold", 0.4),
            Candidate("Muster GmbH", "jsonld", 1.0),
        ])
        assert result == [Candidate("Muster GmbH", "jsonld", 1.0)]

    def test_lower_confidence_loser_is_discarded(self):
        """A later, weaker duplicate does not replace the stronger one."""
        result = dedupe_candidates([
            Candidate("info@muster.de", "mailto", 1.0),
            Candidate("info@muster.de", "regex-1", 0.7),
        ])
        assert result == [Candidate("info@muster.de", "mailto", 1.0)]

    def test_key_is_trimmed_and_case_insensitive(self):
        """Values differing only in case and surrounding whitespace collide."""
        result = dedupe_candidates([
            Candidate("  Muster GmbH ", "heading", 0.5),
            Candidate("MUSTER GMBH", "regex-1", 0.8),
        ])
        assert len(result) == 1
        assert result[0].method == "regex-1"

    def test_equal_confidence_keeps_first(self):
        """Equal confidence does not replace the existing entry."""
        result = dedupe_candidates([
            Candidate("Max Muster", "regex-1", 0.8),
            Candidate("max muster", "regex-2", 0.8),
        ])
        assert result == [Candidate("Max Muster", "regex-1", 0.8)]

    def test_sorted_descending(self):
        """Result is sorted by confidence, highest first."""
        result = dedupe_candidates([
            Candidate("a", "bold", 0.3),
            Candidate("b", "jsonld", 1.0),
            Candidate("c", "heading", 0.5),
        ])
        assert [c.confidence for c in result] == [1.0, 0.5, 0.3]

    def test_ties_keep_original_order(self):
        """Sorting is stable among equal confidences."""
        result = dedupe_candidates([
            Candidate("first", "postal-only", 0.5),
            Candidate("top", "jsonld", 1.0),
            Candidate("second", "heading", 0.5),
        ])
        assert [c.value for c in result] == ["top", "first", "second"]

    def test_replacement_keeps_first_seen_position(self):
        """A replaced entry keeps the slot of the first occurrence among ties."""
        result = dedupe_candidates([
            Candidate("alpha", "bold", 0.3),
            Candidate("beta", "heading", 0.5),
            Candidate("alpha", "heading", 0.5),
        ])
        assert [c.value for c in result] == ["alpha", "beta"]

    def test_no_duplicates_in_result(self):
        """No two entries share a normalised value."""
        result = dedupe_candidates([
            Candidate("X", "a", 0.2),
            Candidate("x ", "b", 0.9),
            Candidate(" x", "c", 0.4),
            Candidate("y", "d", 0.1),
        ])
        keys = [c.value.strip().lower() for c in result]
        assert len(keys) == len(set(keys))


class TestScore:
    """Test confidence arithmetic."""

    def test_rounds_float_noise(self):
        assert score(0.7, 0.1) == 0.6

    def test_combined_penalty(self):
        assert score(0.7, 0.1 * 2 + 0.05 * 1) == 0.45

    def test_never_reaches_zero(self):
        """Large penalties are floored to stay within (0, 1]."""
        assert score(0.5, 0.1 * 7) == 0.05

    def test_never_exceeds_one(self):
        assert score(1.0 + 0.1) == 1.0


class TestConfidenceLevel:
    """Test confidence_level() badge mapping."""

    @pytest.mark.parametrize("confidence,level", [
        (1.0, "high"),
        (0.8, "high"),
        (0.7, "medium"),
        (0.5, "medium"),
        (0.45, "low"),
        (0.1, "low"),
    ])
    def test_levels(self, confidence, level):
        assert confidence_level(confidence) == level


class TestExtractionResult:
    """Test ExtractionResult construction and serialisation."""

    def test_from_raw_fills_every_field(self):
        """Fields missing from the raw map get the sentinel."""
        result = ExtractionResult.from_raw({"email": [Candidate("a@b.de", "mailto", 1.0)]}, "https://b.de/impressum")
        for name in FIELDS:
            assert len(result.fields[name]) >= 1
        assert result.fields["company"] == [sentinel()]
        assert result.source == "https://b.de/impressum"

    def test_to_dict_shape(self):
        result = ExtractionResult.from_raw({"phone": [Candidate("+49 30 1234567", "tel-link", 1.0)]}, "https://b.de/i")
        data = result.to_dict()

        assert list(data.keys()) == ["fields", "source"]
        assert list(data["fields"].keys()) == list(FIELDS)
        assert data["fields"]["phone"] == [{"value": "+49 30 1234567", "method": "tel-link", "confidence": 1.0}]
        assert data["fields"]["ceos"] == [{"value": "", "method": "none", "confidence": 0.1}]

    def test_summary_uses_best_values(self):
        result = ExtractionResult.from_raw({
            "company": [Candidate("Muster GmbH", "regex-1", 0.8), Candidate("Muster", "heading", 0.5)],
            "ceos": [Candidate("Max Muster", "regex-1", 0.8), Candidate("Erika Muster", "regex-1", 0.75)],
        }, "https://muster.de/impressum")

        summary = result.summary()
        assert summary["company"] == "Muster GmbH"
        assert summary["ceos"] == ["Max Muster", "Erika Muster"]
        assert summary["source"] == "https://muster.de/impressum"

    def test_summary_defaults_without_candidates(self):
        summary = ExtractionResult.from_raw({}, "").summary()
        assert summary["company"] == "Unknown"
        assert summary["address"] == "Unknown"
        assert summary["phone"] is None
        assert summary["email"] is None
        assert summary["ceos"] == []

    def test_summary_carries_confidence_levels(self):
        result = ExtractionResult.from_raw({
            "company": [Candidate("Muster GmbH", "jsonld", 1.0)],
            "address": [Candidate("80331 München", "postal-only", 0.5)],
            "phone": [Candidate("+49 89 1234567", "regex-3", 0.45)],
        }, "https://muster.de/impressum")

        assert result.summary()["levels"] == {
            "company": "high",
            "address": "medium",
            "phone": "low",
            "email": "low",
            "ceos": "low",
        }
