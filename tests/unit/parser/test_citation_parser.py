"""
Unit tests for citation parsing.

Tests volume/reporter/page extraction, reporter canonicalization, pin cites,
and error reporting for malformed input.
"""

import pytest
from hypothesis import given, settings, strategies as st

from lexcerta.parser import parse_citation, ParsedCitation


class TestParseCitationSuccess:
    """Test well-formed citations."""

    def test_supreme_court_citation(self):
        """Test the canonical U.S. Reports form."""
        result = parse_citation("347 U.S. 483")

        assert result.ok
        assert result.error is None
        assert result.citation == ParsedCitation(
            volume=347,
            reporter="U.S.",
            page=483,
            raw="347 U.S. 483",
            normalized="347 U.S. 483",
        )

    @pytest.mark.parametrize(
        "raw",
        ["123 S Ct 456", "123 s. ct. 456", "123 S. Ct. 456", "123 SCt 456", "123  S.  Ct.  456"],
    )
    def test_reporter_variants_canonicalize(self, raw):
        """Test loose spellings resolve to the same canonical reporter."""
        result = parse_citation(raw)

        assert result.ok
        assert result.citation.reporter == "S. Ct."
        assert result.citation.normalized == "123 S. Ct. 456"

    def test_series_suffix_is_not_a_page(self):
        """Test '2d' inside 'F. Supp. 2d' is part of the reporter."""
        result = parse_citation("100 F. Supp. 2d 200")

        assert result.ok
        assert result.citation.reporter == "F. Supp. 2d"
        assert result.citation.page == 200

    def test_compact_federal_reporter(self):
        """Test 'F.3d' written without spaces."""
        result = parse_citation("500 F.3d 1234")

        assert result.citation.reporter == "F.3d"
        assert result.citation.volume == 500
        assert result.citation.page == 1234

    def test_pin_cite_resolves_to_first_page(self):
        """Test pin cites keep the starting page."""
        result = parse_citation("347 U.S. 483, 490")

        assert result.citation.page == 483

    def test_parenthetical_is_ignored(self):
        """Test trailing year parentheticals."""
        result = parse_citation("347 U.S. 483 (1954)")

        assert result.citation.page == 483
        assert result.citation.normalized == "347 U.S. 483"

    def test_surrounding_whitespace_trimmed(self):
        """Test leading/trailing whitespace is ignored."""
        result = parse_citation("   410 U.S. 113  ")

        assert result.ok
        assert result.citation.raw == "410 U.S. 113"

    def test_to_dict(self):
        """Test dictionary form used in envelopes."""
        result = parse_citation("1 A.2d 2")

        assert result.citation.to_dict() == {
            "volume": 1,
            "reporter": "A.2d",
            "page": 2,
            "normalized": "1 A.2d 2",
        }


class TestParseCitationErrors:
    """Test malformed input handling."""

    @pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
    def test_empty_input(self, raw):
        """Test blank input is rejected as empty."""
        result = parse_citation(raw)

        assert not result.ok
        assert result.citation is None
        assert result.error.code == "PARSE_ERROR"
        assert "empty" in result.error.message.lower()

    def test_unrecognized_reporter(self):
        """Test volume + unknown text + number names the reporter."""
        result = parse_citation("123 Xyz. Rptr. 456")

        assert result.error.code == "PARSE_ERROR"
        assert "Unrecognized reporter" in result.error.message
        assert "Xyz. Rptr." in result.error.message

    def test_unparseable_input(self):
        """Test free text gets the generic format hint."""
        result = parse_citation("Brown v. Board of Education")

        assert result.error.code == "PARSE_ERROR"
        assert "Could not parse" in result.error.message
        assert "<volume> <reporter> <page>" in result.error.message

    def test_missing_page(self):
        """Test a citation without a page number."""
        result = parse_citation("347 U.S.")

        assert not result.ok
        assert "Could not parse" in result.error.message


def _respell(reporter: str, draw_case, drop_periods: bool, extra_space: bool) -> str:
    text = reporter.replace(".", "") if drop_periods else reporter
    if extra_space:
        text = text.replace(" ", "   ")
    return text.upper() if draw_case else text.lower()


class TestParserProperties:
    """Property-based tests for reporter canonicalization."""

    @settings(max_examples=100)
    @given(
        volume=st.integers(min_value=1, max_value=9999),
        page=st.integers(min_value=1, max_value=99999),
        reporter=st.sampled_from(["U.S.", "S. Ct.", "L. Ed. 2d", "F. Supp. 3d", "N.E.2d", "So. 2d"]),
        upper=st.booleans(),
        drop_periods=st.booleans(),
        extra_space=st.booleans(),
    )
    def test_canonical_form_invariant_under_respelling(
        self, volume, page, reporter, upper, drop_periods, extra_space
    ):
        """Test case, periods and spacing never change the canonical reporter."""
        spelled = _respell(reporter, upper, drop_periods, extra_space)
        result = parse_citation(f"{volume} {spelled} {page}")

        assert result.ok
        assert result.citation.reporter == reporter
        assert result.citation.normalized == f"{volume} {reporter} {page}"

    @settings(max_examples=50)
    @given(
        volume=st.integers(min_value=1, max_value=999),
        page=st.integers(min_value=1, max_value=9999),
        pin=st.integers(min_value=1, max_value=9999),
    )
    def test_pin_cite_never_changes_page(self, volume, page, pin):
        """Test pin cites always resolve to the first page."""
        result = parse_citation(f"{volume} U.S. {page}, {pin}")

        assert result.citation.page == page
