"""
Test Suite for the Question Bank Parser
=======================================
Unit tests for the line classifier, the accumulator, the fallback
segmenter, models and validation.
"""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from qbank_parser import parse_questions
from qbank_parser.classifier import (
    CATEGORY_PATTERNS,
    MARKER_PATTERNS,
    OPTION_PATTERNS,
    QUESTION_PATTERNS,
    classify_line,
    detect_category,
    find_answer_letter,
    is_answer_option,
    is_correct_answer_marker,
    is_question_start,
    strip_option_label,
)
from qbank_parser.fallback import FallbackSegmenter
from qbank_parser.models import (
    ANSWER_NOT_FOUND,
    ANSWER_VARIES,
    PLACEHOLDER_OPTIONS,
    LineRole,
    PartialQuestion,
    Question,
    QuestionType,
    ValidationReport,
)
from qbank_parser.state_machine import (
    ParserState,
    StateMachineParser,
    resolve_correct_answer,
    seal_question,
    split_lines,
)
from qbank_parser.validator import ValidationEngine


HEART_BLOCK = [
    "1. What organ pumps blood?",
    "A. Lungs",
    "B. Heart",
    "C. Liver",
    "D. Kidney",
]


# ═══════════════════════════════════════════════════════════════════════════════
# MODEL TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestQuestion:
    """Test Question model."""

    def test_defaults(self):
        q = Question(id="q1", text="What is a neuron?")
        assert q.type == QuestionType.MULTIPLE_CHOICE
        assert q.options == []
        assert q.correct_answer == ANSWER_NOT_FOUND
        assert q.category == "Medical"
        assert q.difficulty == "medium"

    def test_empty_text_rejected(self):
        with pytest.raises(ValidationError):
            Question(id="q1", text="")

    def test_frozen(self):
        q = Question(id="q1", text="What is a neuron?")
        with pytest.raises(ValidationError):
            q.text = "changed"

    def test_serializes_camel_case_answer(self):
        q = Question(id="q1", text="Which?", correct_answer="Heart")
        data = q.model_dump(mode="json", by_alias=True)
        assert data["correctAnswer"] == "Heart"
        assert data["type"] == "multiple-choice"

    def test_accepts_alias_on_input(self):
        q = Question.model_validate(
            {"id": "q2", "text": "Which?", "correctAnswer": "Liver"}
        )
        assert q.correct_answer == "Liver"

    def test_answer_comparison_ignores_case_and_whitespace(self):
        q = Question(id="q1", text="Which?", correct_answer="Heart")
        assert q.is_correct("  heart ")
        assert q.is_correct("HEART")
        assert not q.is_correct("Lungs")
        assert not q.is_correct(None)


class TestValidationReport:
    """Test ValidationReport model."""

    def test_empty_report(self):
        report = ValidationReport()
        assert report.structured_rate == 0.0
        assert report.low_confidence is False

    def test_structured_rate(self):
        report = ValidationReport(
            total_questions=4,
            questions_missing_answer=["q2"],
        )
        assert report.structured_rate == 75.0

    def test_low_confidence_when_all_fallback(self):
        report = ValidationReport(
            total_questions=2,
            short_answer_count=2,
            fallback_questions=["q1", "q2"],
        )
        assert report.low_confidence is True
        assert report.structured_rate == 0.0


# ═══════════════════════════════════════════════════════════════════════════════
# LINE CLASSIFIER TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestPatternTables:
    """Pattern tables are ordered and non-empty."""

    def test_category_labels_in_order(self):
        labels = [label for label, _ in CATEGORY_PATTERNS]
        assert labels == [
            "Anatomy",
            "Physiology",
            "Pathology",
            "Pharmacology",
            "Microbiology",
            "Short Answer",
        ]

    def test_tables_populated(self):
        assert len(QUESTION_PATTERNS) == 6
        assert len(OPTION_PATTERNS) == 2
        assert len(MARKER_PATTERNS) == 6


class TestCategoryDetection:

    def test_headers(self):
        assert detect_category("ANATOMY") == "Anatomy"
        assert detect_category("Section 2: Physiology") == "Physiology"
        assert detect_category("pathology review") == "Pathology"
        assert detect_category("Pharmacology") == "Pharmacology"
        assert detect_category("Clinical Microbiology") == "Microbiology"
        assert detect_category("SHORT ANSWER QUESTIONS") == "Short Answer"

    def test_first_label_wins(self):
        assert detect_category("Anatomy and Physiology") == "Anatomy"

    def test_no_category(self):
        assert detect_category("1. What organ pumps blood?") is None
        assert detect_category("Cardiology") is None


class TestQuestionStartDetection:

    def test_numbered(self):
        assert is_question_start("1. The aorta")
        assert is_question_start("12) The aorta")

    def test_capital_letter_prefix(self):
        assert is_question_start("Q. Name the largest artery")
        assert is_question_start("E. Name the largest artery")

    def test_trailing_question_mark(self):
        assert is_question_start("The largest artery is?")

    def test_interrogative_words(self):
        for word in ["What", "which", "WHEN", "Where", "why", "How"]:
            assert is_question_start(f"{word} does the kidney filter")

    def test_question_and_mcq_labels(self):
        assert is_question_start("Question 4: Name the nerve")
        assert is_question_start("question 4: Name the nerve")
        assert is_question_start("MCQ 12: Name the nerve")
        assert is_question_start("mcq12: Name the nerve")

    def test_label_colon_must_follow_number(self):
        assert not is_question_start("Question 4 : Name the nerve")
        assert not is_question_start("MCQ 12 : Name the nerve")

    def test_interrogative_prefix_is_permissive(self):
        assert is_question_start("However the aorta")
        assert is_question_start("Whichever nerve")
        assert is_question_start("Whenever the heart")

    def test_not_questions(self):
        assert not is_question_start("The heart has four chambers")
        assert not is_question_start("a. lowercase option")
        assert not is_question_start("Correct answer: B")
        assert not is_question_start("Answer key provided separately")


class TestOptionDetection:

    def test_options(self):
        assert is_answer_option("A. Lungs")
        assert is_answer_option("D) Kidney")
        assert is_answer_option("b. heart")
        assert is_answer_option("c) liver")

    def test_only_four_letters(self):
        assert not is_answer_option("E. Spleen")
        assert not is_answer_option("e) spleen")

    def test_requires_punctuation(self):
        assert not is_answer_option("A Lungs")
        assert not is_answer_option("Aorta")


class TestMarkerDetection:

    def test_markers(self):
        assert is_correct_answer_marker("Correct answer: B")
        assert is_correct_answer_marker("The answer that is correct is C")
        assert is_correct_answer_marker("Key answer: D")
        assert is_correct_answer_marker("Answer key provided separately")
        assert is_correct_answer_marker("Answer: A")
        assert is_correct_answer_marker("correct: a")

    def test_not_markers(self):
        assert not is_correct_answer_marker("The heart pumps blood")
        assert not is_correct_answer_marker("Explanation: see chapter 4")


class TestClassifyLine:
    """Precedence: category > question > option > marker."""

    def test_category_beats_question(self):
        assert classify_line("What is anatomy?") == LineRole.CATEGORY_HEADER

    def test_question(self):
        assert classify_line("1. What organ pumps blood?") == LineRole.QUESTION_START

    def test_marker(self):
        assert classify_line("Correct answer: B") == LineRole.CORRECT_ANSWER_MARKER

    def test_none(self):
        assert classify_line("Page footer text") == LineRole.NONE

    def test_option_beats_marker(self):
        line = "b) The correct answer is uncertain"
        assert classify_line(line, in_question=True) == LineRole.ANSWER_OPTION

    def test_lettered_option_outside_question_starts_question(self):
        assert classify_line("A. Lungs") == LineRole.QUESTION_START

    def test_lettered_option_inside_question_is_option(self):
        assert classify_line("A. Lungs", in_question=True) == LineRole.ANSWER_OPTION

    def test_lettered_question_inside_question_still_starts(self):
        line = "B. Which vessel carries oxygenated blood?"
        assert classify_line(line, in_question=True) == LineRole.QUESTION_START

    def test_lowercase_option(self):
        assert classify_line("c) liver", in_question=True) == LineRole.ANSWER_OPTION


class TestAnswerHelpers:

    def test_strip_option_label(self):
        assert strip_option_label("B. Heart") == "Heart"
        assert strip_option_label("c) Liver") == "Liver"
        assert strip_option_label("Heart") == "Heart"

    def test_find_answer_letter(self):
        assert find_answer_letter("Correct answer: B") == "B"
        assert find_answer_letter("answer: c") == "C"
        assert find_answer_letter("Answer key provided separately") is None
        assert find_answer_letter("Answer: (D)") == "D"


# ═══════════════════════════════════════════════════════════════════════════════
# ACCUMULATOR TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestSplitLines:

    def test_trims_and_drops_blank_lines(self):
        text = "  1. What?  \n\n   \r\nA. Yes\r\n"
        assert split_lines(text) == ["1. What?", "A. Yes"]

    def test_empty(self):
        assert split_lines("") == []
        assert split_lines(None) == []


class TestResolveCorrectAnswer:

    def test_letter_resolves_option(self):
        options = ["A. Lungs", "B. Heart"]
        assert resolve_correct_answer("Answer: B", options) == "Heart"

    def test_letter_past_options_falls_back_to_first(self):
        options = ["A. Lungs", "B. Heart"]
        assert resolve_correct_answer("Answer: D", options) == "Lungs"

    def test_no_options(self):
        assert resolve_correct_answer("Answer: B", []) == ANSWER_NOT_FOUND


class TestSealQuestion:

    def test_defaults_applied(self):
        q = seal_question(PartialQuestion(text="1. What?"), 3)
        assert q.id == "q3"
        assert q.options == PLACEHOLDER_OPTIONS
        assert q.correct_answer == ANSWER_NOT_FOUND
        assert q.category == "Medical"
        assert q.difficulty == "medium"
        assert q.type == QuestionType.MULTIPLE_CHOICE

    def test_empty_text_fallback(self):
        q = seal_question(PartialQuestion(), 5)
        assert q.text == "Question 5"

    def test_category_precedence(self):
        partial = PartialQuestion(text="1. What?", category="Anatomy")
        assert seal_question(partial, 1, "Pathology").category == "Anatomy"
        bare = PartialQuestion(text="1. What?")
        assert seal_question(bare, 1, "Pathology").category == "Pathology"

    def test_collected_options_kept_verbatim(self):
        partial = PartialQuestion(text="1. What?", options=["a) one", "b) two"])
        assert seal_question(partial, 1).options == ["a) one", "b) two"]


class TestStateMachineParser:
    """Test the accumulator state machine."""

    def test_option_index_resolution(self):
        parser = StateMachineParser()
        questions = parser.parse(HEART_BLOCK + ["Correct answer: B"])

        assert len(questions) == 1
        q = questions[0]
        assert q.id == "q1"
        assert q.text == "1. What organ pumps blood?"
        assert q.options == ["A. Lungs", "B. Heart", "C. Liver", "D. Kidney"]
        assert q.correct_answer == "Heart"

    def test_marker_without_letter_uses_first_option(self):
        parser = StateMachineParser()
        questions = parser.parse(
            HEART_BLOCK + ["Answer key provided separately"]
        )
        assert questions[0].correct_answer == "Lungs"

    def test_placeholder_defaulting(self):
        parser = StateMachineParser()
        questions = parser.parse([
            "1. What is the heart?",
            "2. What is the liver?",
        ])

        assert [q.id for q in questions] == ["q1", "q2"]
        for q in questions:
            assert q.options == PLACEHOLDER_OPTIONS
            assert q.correct_answer == ANSWER_NOT_FOUND

    def test_sequential_ids(self):
        lines = []
        for n in range(1, 8):
            lines += [f"{n}. Which structure number {n}?", "A. One", "B. Two"]

        questions = StateMachineParser().parse(lines)
        assert [q.id for q in questions] == [f"q{n}" for n in range(1, 8)]

    def test_category_inheritance(self):
        questions = StateMachineParser().parse_text(
            "1. What is a neuron?\n"
            "Anatomy\n"
            "2. Which bone is the longest?\n"
            "3. Which muscle flexes the elbow?\n"
            "Physiology\n"
            "4. What regulates heart rate?\n"
        )
        assert [q.category for q in questions] == [
            "Medical", "Anatomy", "Anatomy", "Physiology",
        ]

    def test_category_header_overwrites(self):
        questions = StateMachineParser().parse([
            "Anatomy",
            "Pathology",
            "1. Which lesion is benign?",
        ])
        assert questions[0].category == "Pathology"

    def test_lines_before_first_question_discarded(self):
        questions = StateMachineParser().parse([
            "Board Review Booklet",
            "Answer: C",
            "b) stray option",
            "1. What organ pumps blood?",
            "A. Lungs",
        ])
        assert len(questions) == 1
        assert questions[0].options == ["A. Lungs"]
        assert questions[0].correct_answer == ANSWER_NOT_FOUND

    def test_unclassified_lines_ignored(self):
        questions = StateMachineParser().parse(
            HEART_BLOCK[:3] + ["continued on next page"] + HEART_BLOCK[3:]
        )
        assert len(questions[0].options) == 4

    def test_option_and_marker_line_consumed_once(self):
        questions = StateMachineParser().parse([
            "1. What organ pumps blood?",
            "A) The correct answer is heart",
            "B) Lungs",
        ])
        q = questions[0]
        assert q.options == ["A) The correct answer is heart", "B) Lungs"]
        assert q.correct_answer == ANSWER_NOT_FOUND

    def test_last_marker_wins(self):
        questions = StateMachineParser().parse(
            HEART_BLOCK + ["Answer: A", "Correct answer: C"]
        )
        assert questions[0].correct_answer == "Liver"

    def test_state_transitions(self):
        parser = StateMachineParser()
        assert parser.state == ParserState.SEEKING_QUESTION
        parser._process_line("1. What organ pumps blood?")
        assert parser.state == ParserState.ACCUMULATING_QUESTION
        parser.finalize()
        assert parser.state == ParserState.SEEKING_QUESTION
        assert len(parser.questions) == 1

    def test_parser_reusable(self):
        parser = StateMachineParser()
        first = parser.parse(["Anatomy", "1. What is a neuron?"])
        second = parser.parse(["1. What is a neuron?"])
        assert first[0].category == "Anatomy"
        assert second[0].category == "Medical"
        assert second[0].id == "q1"

    def test_interrogative_prefix_stem_keeps_its_options(self):
        questions = parse_questions(
            "However the heart has four chambers\n"
            "A. One\n"
            "B. Two\n"
            "Answer: B"
        )

        assert len(questions) == 1
        q = questions[0]
        assert q.text == "However the heart has four chambers"
        assert q.options == ["A. One", "B. Two"]
        assert q.correct_answer == "Two"

    def test_no_questions(self):
        assert StateMachineParser().parse([]) == []
        assert StateMachineParser().parse(["The heart pumps blood"]) == []


# ═══════════════════════════════════════════════════════════════════════════════
# FALLBACK TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestFallbackSegmenter:

    def test_sentence_questions(self):
        text = (
            "The heart pumps blood. The liver detoxifies substances. "
            "Short fragment."
        )
        questions = FallbackSegmenter().build(text)

        assert [q.text for q in questions] == [
            "The heart pumps blood?",
            "The liver detoxifies substances?",
        ]
        for q in questions:
            assert q.type == QuestionType.SHORT_ANSWER
            assert q.options == []
            assert q.correct_answer == ANSWER_VARIES
            assert q.category == "Medical"
            assert q.difficulty == "medium"
        assert [q.id for q in questions] == ["q1", "q2"]

    def test_length_threshold(self):
        exactly_twenty = "a" * 20
        twenty_one = "b" * 21
        questions = FallbackSegmenter().build(f"{exactly_twenty}. {twenty_one}!")
        assert [q.text for q in questions] == [twenty_one + "?"]

    def test_caps_at_ten(self):
        text = " ".join(
            f"Sentence number {i} about the kidney." for i in range(15)
        )
        questions = FallbackSegmenter().build(text)
        assert len(questions) == 10
        assert questions[-1].id == "q10"
        assert questions[0].text == "Sentence number 0 about the kidney?"

    def test_runs_of_terminal_punctuation(self):
        text = "Insulin lowers blood glucose!!! Glucagon raises blood glucose?!"
        questions = FallbackSegmenter().build(text)
        assert len(questions) == 2

    def test_empty(self):
        assert FallbackSegmenter().build("") == []
        assert FallbackSegmenter().build(None) == []


# ═══════════════════════════════════════════════════════════════════════════════
# ENTRY POINT TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestParseQuestions:

    @pytest.mark.parametrize("text", ["", "   ", "\n\n\t\n", "x", "Hi.", None])
    def test_totality(self, text):
        assert parse_questions(text) == []

    def test_structured_input(self):
        text = "\n".join(
            ["Anatomy", ""] + HEART_BLOCK + ["Correct answer: B", ""]
        )
        questions = parse_questions(text)
        assert len(questions) == 1
        assert questions[0].category == "Anatomy"
        assert questions[0].correct_answer == "Heart"

    def test_no_structure_falls_back(self):
        text = (
            "The heart pumps blood. The liver detoxifies substances. "
            "Short fragment."
        )
        questions = parse_questions(text)
        assert len(questions) == 2
        assert all(q.type == QuestionType.SHORT_ANSWER for q in questions)

    def test_structured_result_never_mixed_with_fallback(self):
        text = "The heart pumps blood in every mammal.\n1. What is a neuron?"
        questions = parse_questions(text)
        assert len(questions) == 1
        assert questions[0].type == QuestionType.MULTIPLE_CHOICE

    def test_single_question_line(self):
        questions = parse_questions("How many chambers does the heart have?")
        assert len(questions) == 1
        assert questions[0].options == PLACEHOLDER_OPTIONS


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION ENGINE TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestValidationEngine:

    def test_empty_questions(self):
        report = ValidationEngine().validate([])
        assert report.total_questions == 0
        assert report.low_confidence is False

    def test_structured_report(self):
        questions = parse_questions(
            "Anatomy\n"
            + "\n".join(HEART_BLOCK)
            + "\nAnswer: B\n"
            "Pathology\n"
            "2. Which cells mediate acute inflammation?\n"
        )
        report = ValidationEngine().validate(questions)

        assert report.total_questions == 2
        assert report.multiple_choice_count == 2
        assert report.questions_missing_answer == ["q2"]
        assert report.questions_with_placeholder_options == ["q2"]
        assert report.fallback_questions == []
        assert report.category_breakdown == {"Anatomy": 1, "Pathology": 1}
        assert report.structured_rate == 50.0
        assert report.low_confidence is False

    def test_fallback_report_is_low_confidence(self):
        questions = parse_questions(
            "The heart pumps blood. The liver detoxifies substances."
        )
        report = ValidationEngine().validate(questions)
        assert report.short_answer_count == 2
        assert report.fallback_questions == ["q1", "q2"]
        assert report.low_confidence is True

    def test_report_serializes(self):
        report = ValidationEngine().validate(parse_questions("1. What?"))
        data = json.loads(json.dumps(report.model_dump()))
        assert data["total_questions"] == 1
        assert "low_confidence" in data
        assert "structured_rate" in data


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
