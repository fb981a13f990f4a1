"""Tests for the noise cleaner."""

from src.ingestion.cleaner import (
    BLANK,
    clean,
    find_answer_key,
    normalize_blanks,
    strip_embedded_header,
    truncate_answer_key,
)
from src.ingestion.segmenter import segment


class TestNormalizeBlanks:
    def test_underscore_runs(self) -> None:
        assert normalize_blanks("He ___ home.") == f"He {BLANK} home."
        assert normalize_blanks("He __________ home.") == f"He {BLANK} home."

    def test_ellipsis_runs(self) -> None:
        assert normalize_blanks("She .... it") == f"She {BLANK} it"
        assert normalize_blanks("She …… it") == f"She {BLANK} it"

    def test_empty_parentheses(self) -> None:
        assert normalize_blanks("I (   ) you") == f"I {BLANK} you"
        assert normalize_blanks("I （    ） you") == f"I {BLANK} you"

    def test_short_runs_untouched(self) -> None:
        assert normalize_blanks("a_b and e.g. ..") == "a_b and e.g. .."


class TestClean:
    def test_removes_page_number_lines(self) -> None:
        result = clean("21. First question\n  3  \n22. Second question")
        assert "3" not in [line.strip() for line in result.splitlines()]
        assert "21. First question" in result
        assert "22. Second question" in result

    def test_removes_page_boilerplate(self) -> None:
        result = clean("21. A\nPage 2 of 8\n22. B\n第3页 共8页\n23. C")
        assert "Page" not in result
        assert "页" not in result

    def test_collapses_blank_lines(self) -> None:
        assert clean("21. A\n\n\n\n\n22. B") == "21. A\n\n22. B"

    def test_keeps_answer_key_by_default(self) -> None:
        assert "参考答案" in clean("21. A\n参考答案\n21. B")


class TestAnswerKeyTruncation:
    def test_truncates_at_chinese_header(self) -> None:
        text = "21. He ______ home.\n22. She ______ it.\n参考答案\n21. went\n22. did"
        result = clean(text, truncate_answer_key_section=True)
        assert result == f"21. He {BLANK} home.\n22. She {BLANK} it."

    def test_truncates_at_english_header(self) -> None:
        text = "21. A\n\nKeys to Exercises\n21. B"
        assert truncate_answer_key(text) == "21. A\n\n"

    def test_earliest_header_wins(self) -> None:
        text = "21. A\nReference Answers\n21. B\n参考答案\n21. C"
        assert find_answer_key(text) == text.index("Reference Answers")

    def test_header_merged_after_wide_space(self) -> None:
        text = "21. He ___ it.\nA) a B) b D) d    参考答案    21. A    22. B"
        result = clean(text, truncate_answer_key_section=True)
        assert result == f"21. He {BLANK} it.\nA) a B) b D) d"
        assert segment(result) == [result]

    def test_english_header_merged_after_wide_space(self) -> None:
        text = "22. She ______ it.     Answer Keys 21. went"
        assert truncate_answer_key(text).rstrip() == "22. She ______ it."

    def test_mid_line_mention_is_not_a_header(self) -> None:
        assert find_answer_key("21. Check the 参考答案 later.") is None

    def test_no_header(self) -> None:
        assert truncate_answer_key("21. A") == "21. A"


class TestStripEmbeddedHeader:
    def test_removes_trailing_instruction(self) -> None:
        unit = "30. What an ______ day! #### III. Choose the proper words in the box"
        assert strip_embedded_header(unit) == "30. What an ______ day!"

    def test_leaves_plain_unit(self) -> None:
        assert strip_embedded_header("30. What a day!") == "30. What a day!"
