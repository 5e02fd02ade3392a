"""Tests for heading alignment and section cropping."""

from fracture_pdf.pipeline.headings import (
    find_heading,
    first_heading,
    headings,
    normalize_for_match,
    tokenize,
    trim_to_section,
)

THREE_SECTIONS = (
    "# Intro\n"
    "\n"
    "Intro body.\n"
    "\n"
    "# Methods\n"
    "\n"
    "Methods body.\n"
    "\n"
    "- a list item\n"
    "\n"
    "# Results\n"
    "\n"
    "Results body.\n"
)

NESTED = (
    "# 2 Background\n"
    "\n"
    "Overview.\n"
    "\n"
    "## 2.1 Prior work\n"
    "\n"
    "Earlier systems.\n"
    "\n"
    "## 2.2 Gaps\n"
    "\n"
    "What is missing.\n"
    "\n"
    "# 3 Design\n"
    "\n"
    "The design.\n"
)


class TestNormalize:
    def test_lowercases_and_strips_punctuation(self) -> None:
        assert normalize_for_match("  2.1 Prior-Work!  ") == "21priorwork"

    def test_keeps_non_ascii_letters(self) -> None:
        assert normalize_for_match("Über die Änderung") == "überdieänderung"


class TestTokenize:
    def test_headings_carry_levels_and_positions(self) -> None:
        found = headings(tokenize(NESTED))
        assert [(h.text, h.level) for h in found] == [
            ("2 Background", 1), ("2.1 Prior work", 2), ("2.2 Gaps", 2), ("3 Design", 1),
        ]
        assert found[0].line == 0
        assert found[1].line == 4


class TestFindHeading:
    def test_prefers_smallest_distance(self) -> None:
        blocks = tokenize("# Results\n\n# Result\n")
        assert find_heading(blocks, "result") == 1

    def test_ties_keep_the_earliest(self) -> None:
        blocks = tokenize("# Methods\n\ntext\n\n# Methods\n")
        assert find_heading(blocks, "methods") == 0

    def test_respects_start_index(self) -> None:
        blocks = tokenize("# Methods\n\ntext\n\n# Methods\n")
        assert find_heading(blocks, "methods", from_index=1) == 2

    def test_rejects_beyond_ratio(self) -> None:
        blocks = tokenize("# Methods\n")
        assert find_heading(blocks, "Conclusion", max_distance_ratio=0.4) == -1


class TestTrimToSection:
    def test_crops_to_next_heading_of_same_level(self) -> None:
        trimmed = trim_to_section(THREE_SECTIONS, "  methods ")
        assert trimmed == "# Methods\n\nMethods body.\n\n- a list item"

    def test_trimming_again_is_a_no_op(self) -> None:
        once = trim_to_section(THREE_SECTIONS, "methods")
        assert trim_to_section(once, "methods") == once

    def test_no_match_returns_text_unchanged(self) -> None:
        assert trim_to_section(THREE_SECTIONS, "Discussion", max_distance_ratio=0.05) == THREE_SECTIONS

    def test_tolerates_small_wording_differences(self) -> None:
        trimmed = trim_to_section(THREE_SECTIONS, "Method", max_distance_ratio=0.2)
        assert trimmed.startswith("# Methods")
        assert "Results" not in trimmed

    def test_section_keeps_deeper_headings(self) -> None:
        trimmed = trim_to_section(NESTED, "2 Background")
        assert trimmed.startswith("# 2 Background")
        assert "## 2.2 Gaps" in trimmed
        assert "3 Design" not in trimmed

    def test_last_section_runs_to_end(self) -> None:
        assert trim_to_section(NESTED, "3 design") == "# 3 Design\n\nThe design."

    def test_bracketing_by_next_title(self) -> None:
        trimmed = trim_to_section(NESTED, "2 Background", next_title="2.1 Prior work")
        assert trimmed == "# 2 Background\n\nOverview."

    def test_bracketing_with_unmatched_next_title_runs_to_end(self) -> None:
        trimmed = trim_to_section(NESTED, "2.2 Gaps", next_title="Appendix Z")
        assert trimmed.startswith("## 2.2 Gaps")
        assert trimmed.endswith("The design.")

    def test_drops_leading_material_before_heading(self) -> None:
        text = "running header\n\n## 2.2 Gaps\n\nWhat is missing.\n"
        assert trim_to_section(text, "2.2 gaps") == "## 2.2 Gaps\n\nWhat is missing."

    def test_keeps_crlf_line_endings(self) -> None:
        text = THREE_SECTIONS.replace("\n", "\r\n")
        trimmed = trim_to_section(text, "methods")
        assert trimmed == "# Methods\r\n\r\nMethods body.\r\n\r\n- a list item"

    def test_plain_text_without_headings_is_untouched(self) -> None:
        text = "just words\nand more words\n"
        assert trim_to_section(text, "words") == text


class TestFirstHeading:
    def test_returns_normalized_first_heading(self) -> None:
        assert first_heading(NESTED) == "2background"

    def test_none_without_headings(self) -> None:
        assert first_heading("no headings here") is None
