"""Hypothesis property-based tests for the matching pipeline.

Properties tested:
- Extraction of flat named groups equals the engine's groupdict
- Spans are absolute: engine span plus offset
- Multi-match runs always terminate; zero-width patterns yield at most one match
- Templating nests exactly the untemplated result under the scope name
"""

import math
import re
import warnings

from hypothesis import given, settings
from hypothesis import strategies as st

from repart import Pattern, execute_match, match_and_extract


# =============================================================================
# Strategy Definitions
# =============================================================================

# Words that never look like JSON objects or arrays
words = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=8)

word_rows = st.lists(words, min_size=1, max_size=6)

small_texts = st.text(alphabet="ab xy\n", max_size=30)


class TestGroupdictEquivalence:
    """Flat named groups extract to exactly what the engine captured."""

    @given(word_rows)
    @settings(max_examples=100)
    def test_extract_equals_groupdict(self, row):
        source = ",".join(rf"(?P<g{i}>\w+)" for i in range(len(row)))
        text = ",".join(row)
        expected = re.search(source, text).groupdict()

        assert match_and_extract(text, source) == expected
        assert expected == {f"g{i}": word for i, word in enumerate(row)}


class TestSpans:
    """Reported spans are absolute."""

    @given(small_texts, st.integers(min_value=0, max_value=1000))
    @settings(max_examples=100)
    def test_offset_shifts_spans(self, text, offset):
        engine = re.search(r"\w+", text)
        raw = execute_match(text, r"\w+", offset=offset)
        if engine is None:
            assert raw is None
        else:
            assert (raw.start, raw.end) == (engine.start() + offset, engine.end() + offset)
            assert raw.text == text[raw.start - offset:raw.end - offset]


class TestTermination:
    """Multi-match loops terminate on any input."""

    @given(small_texts.filter(bool), st.sampled_from(["(?=a)", r"\b", "$", "(?<=x)"]))
    @settings(max_examples=100)
    def test_zero_width_patterns_yield_at_most_one(self, text, source):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            raw = execute_match(text, source, max_matches=math.inf)
        assert len(raw) <= 1

    @given(small_texts, st.sampled_from(["x*", r"\s*", "a?", "(?:ab)*"]))
    @settings(max_examples=100)
    def test_optional_patterns_terminate(self, text, source):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            raw = execute_match(text, source, max_matches=math.inf)
        assert len(raw) <= len(text) + 1
        assert [m.end for m in raw] == sorted(m.end for m in raw)
        assert all(m.end > m.start for m in raw[:-1])

    @given(small_texts)
    @settings(max_examples=100)
    def test_progressing_patterns_match_finditer(self, text):
        raw = execute_match(text, r"\w+", max_matches=math.inf)
        assert [m.text for m in raw] == re.findall(r"\w+", text)


class TestTemplating:
    """Templating nests the plain result under the scope name."""

    @given(word_rows)
    @settings(max_examples=50)
    def test_template_nests_plain_result(self, row):
        source = ",".join(rf"(?P<g{i}>\w+)" for i in range(len(row)))
        text = ",".join(row)
        plain = match_and_extract(text, source)
        templated = match_and_extract(text, Pattern(source).template("scope"))
        if len(row) == 1:
            assert templated == {"scope": plain["g0"]}
        else:
            assert templated == {"scope": plain}
