"""Tests for reference validation against segment text."""

from fracture_pdf.pipeline.references import fuzzy_contains, normalize_reference, validate_references

TEXT = """As shown by Smith et al. (2019), the effect holds.
See   Section 4.2  for details, and ISO 9001:2015 for the quality rules."""


class TestValidateReferences:
    def test_exact_normalized_match_is_kept(self) -> None:
        assert validate_references(["section 4.2 for details"], TEXT) == ["section 4.2 for details"]

    def test_near_match_is_kept(self) -> None:
        assert validate_references(["Smith et al (2019)"], TEXT) == ["Smith et al (2019)"]

    def test_unrelated_reference_is_dropped(self) -> None:
        assert validate_references(["Jones and Brown, 1987"], TEXT) == []

    def test_duplicates_and_blanks_are_dropped(self) -> None:
        refs = ["ISO 9001:2015", "iso  9001:2015", "   "]
        assert validate_references(refs, TEXT) == ["ISO 9001:2015"]

    def test_order_is_preserved(self) -> None:
        refs = ["ISO 9001:2015", "Nowhere 2000", "Smith et al. (2019)"]
        assert validate_references(refs, TEXT) == ["ISO 9001:2015", "Smith et al. (2019)"]


class TestFuzzyContains:
    def test_window_band_limits_lengths(self) -> None:
        text = normalize_reference(TEXT)
        assert fuzzy_contains("smith et al (2019)", text, 0.2, 0.25)
        assert not fuzzy_contains("smith et al (2019)", text, 0.0, 0.0)
