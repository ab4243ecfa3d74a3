"""
Error Classifier: maps a wrong answer onto a pedagogical error category.

Detectors run in a fixed priority order; the first match wins:

  1. doubling / halving fact       (n1 == n2 for +, n1 == 2*n2 for -)
  2. operation confusion           (the other operation's exact result)
  3. stop at the ten               (14 - 6: 14 - 4 = 10, then 10 + 2 = 12)
  4. smaller from larger at ten    (14 - 6: 14 - 4 = 10, then answers 2)
  5. digit reversal                (two-digit answers only)
  6. input error                   (a digit typed twice: 122 for 12)
  7. counting ±1 / ±2
  8. off by ten ±10
  9. place value                   (±90 / ±100, carry written as digits, tens off)
 10. other                         (never unclassified)

The expected answer is re-checked against the operands before anything else;
a wrong value is logged and replaced.
"""
from __future__ import annotations

import logging
from typing import Optional

from numberpath.models.errors import ErrorAnalysis, ErrorCategory
from numberpath.utils.answer_computer import compute, hidden_value

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Category tables
# ---------------------------------------------------------------------------

ERROR_TYPE_LABELS: dict[str, str] = {
    "counting_error_minus_1": "Counted one short",
    "counting_error_plus_1": "Counted one too far",
    "counting_error_minus_2": "Counted two short",
    "counting_error_plus_2": "Counted two too far",
    "operation_confusion": "Mixed up plus and minus",
    "input_error": "Typing slip",
    "place_value": "Tens and ones problem",
    "off_by_ten_minus": "Ten too few",
    "off_by_ten_plus": "Ten too many",
    "doubling_error": "Doubles / halves fact",
    "digit_reversal": "Swapped digits",
    "decade_boundary_confusion": "Stopped at the ten, then added",
    "subtraction_reversal_at_ten": "Smaller from larger at the ten",
    "other": "Other error",
}

ERROR_TYPE_DESCRIPTIONS: dict[str, str] = {
    "counting_error_minus_1": "The answer is one less than the result; counting stopped one step early.",
    "counting_error_plus_1": "The answer is one more than the result; counting went one step too far.",
    "counting_error_minus_2": "The answer is two less than the result; counting stopped too early.",
    "counting_error_plus_2": "The answer is two more than the result; counting went too far.",
    "operation_confusion": "The learner carried out the other operation.",
    "input_error": "A digit was entered twice; the underlying calculation was right.",
    "place_value": "Tens and ones were not handled as separate places.",
    "off_by_ten_minus": "The answer is exactly ten too small; a ten was forgotten.",
    "off_by_ten_plus": "The answer is exactly ten too big; a ten was counted twice.",
    "doubling_error": "A core doubles or halves fact such as 6 + 6 or 14 - 7 is not yet automatic.",
    "digit_reversal": "The two digits of the answer were written in the wrong order.",
    "decade_boundary_confusion": (
        "Subtracted correctly down to the ten, then added the rest instead of "
        "subtracting it (14 - 6: 14 - 4 = 10, then 10 + 2 = 12)."
    ),
    "subtraction_reversal_at_ten": (
        "Subtracted correctly down to the ten, then gave the rest instead of "
        "ten minus the rest (14 - 6: 14 - 4 = 10, then answers 2)."
    ),
    "other": "No known pattern; watch how the learner works the next tasks.",
}

ERROR_TYPE_HINTS: dict[str, str] = {
    "counting_error_minus_1": "Still counting in ones. Build strategies and automatic core facts; check the count.",
    "counting_error_plus_1": "Still counting in ones. Build strategies and automatic core facts; mark the stopping point.",
    "counting_error_minus_2": "Counting is unreliable. Work with a twenty frame or bead string instead of counting.",
    "counting_error_plus_2": "Counting is unreliable. Work with a twenty frame or bead string instead of counting.",
    "operation_confusion": "Have the learner say the operation aloud before calculating.",
    "input_error": "Not a calculation problem. Encourage checking the answer before submitting.",
    "place_value": "Practise tens and ones separately with base-ten blocks or a hundred chart.",
    "off_by_ten_minus": "Split numbers into tens and ones (23 = 20 + 3) and count the tens explicitly.",
    "off_by_ten_plus": "Split numbers into tens and ones and ask whether the result makes sense.",
    "doubling_error": "Rehearse doubles and halves until they are automatic; they anchor other strategies.",
    "digit_reversal": "Read numbers aloud left to right; check how the number is written.",
    "decade_boundary_confusion": "Keep the operation fixed across the ten: we are still taking away after the ten.",
    "subtraction_reversal_at_ten": "Model the second step as 'from the ten take away the rest' on a number line.",
    "other": "Observe the learner's working to find the misconception.",
}

ERROR_TYPE_INTERVENTIONS: dict[str, list[str]] = {
    "counting_error_minus_1": ["Practise core facts", "Count with self-checking"],
    "counting_error_plus_1": ["Practise core facts", "Mark where counting stops"],
    "counting_error_minus_2": ["Twenty frame work", "Replace counting with strategies"],
    "counting_error_plus_2": ["Twenty frame work", "Replace counting with strategies"],
    "operation_confusion": ["Name the operation before calculating", "Sort tasks by sign"],
    "input_error": ["Check the answer before submitting"],
    "place_value": ["Base-ten blocks", "Tens and ones separately", "Bundling ten ones into a ten"],
    "off_by_ten_minus": ["Decompose into tens and ones", "Hundred chart"],
    "off_by_ten_plus": ["Decompose into tens and ones", "Estimate before calculating"],
    "doubling_error": ["Doubles games", "Link doubling and halving"],
    "digit_reversal": ["Read numbers aloud", "Place value cards"],
    "decade_boundary_confusion": ["Number line in two steps", "Say each step aloud"],
    "subtraction_reversal_at_ten": ["Number line in two steps", "From the ten, take away the rest"],
    "other": ["Individual observation"],
}

ERROR_TYPE_EXAMPLES: dict[str, list[str]] = {
    "counting_error_minus_1": ["3 + 5 = 7 (correct: 8)", "14 - 6 = 7 (correct: 8)"],
    "counting_error_plus_1": ["3 + 4 = 8 (correct: 7)", "14 - 6 = 9 (correct: 8)"],
    "counting_error_minus_2": ["5 + 7 = 10 (correct: 12)", "15 - 8 = 5 (correct: 7)"],
    "counting_error_plus_2": ["5 + 7 = 14 (correct: 12)", "15 - 8 = 9 (correct: 7)"],
    "operation_confusion": ["6 + 4 = 2", "7 - 3 = 10"],
    "input_error": ["6 + 6 = 122 (correct: 12)", "12 - 5 = 77 (correct: 7)"],
    "place_value": ["3 + 9 = 102 (correct: 12)", "26 - 8 = 22 (correct: 18)"],
    "off_by_ten_minus": ["12 + 9 = 11 (correct: 21)", "18 + 7 = 15 (correct: 25)"],
    "off_by_ten_plus": ["8 + 5 = 23 (correct: 13)", "9 + 6 = 25 (correct: 15)"],
    "doubling_error": ["6 + 6 = 11 (correct: 12)", "14 - 7 = 6 (correct: 7)"],
    "digit_reversal": ["7 + 10 = 71 (correct: 17)", "8 + 6 = 41 (correct: 14)"],
    "decade_boundary_confusion": ["14 - 6 = 12 (correct: 8)", "15 - 9 = 14 (correct: 6)"],
    "subtraction_reversal_at_ten": ["14 - 6 = 2 (correct: 8)", "15 - 9 = 4 (correct: 6)"],
    "other": [],
}

_SEVERITY: dict[str, str] = {
    "counting_error_minus_1": "minor",
    "counting_error_plus_1": "minor",
    "counting_error_minus_2": "moderate",
    "counting_error_plus_2": "moderate",
    "operation_confusion": "severe",
    "input_error": "minor",
    "off_by_ten_minus": "moderate",
    "off_by_ten_plus": "moderate",
    "doubling_error": "moderate",
    "digit_reversal": "moderate",
    "decade_boundary_confusion": "severe",
    "subtraction_reversal_at_ten": "severe",
}


def error_categories() -> list[ErrorCategory]:
    return [
        ErrorCategory(
            error_type=key,
            label=label,
            description=ERROR_TYPE_DESCRIPTIONS[key],
            interventions=ERROR_TYPE_INTERVENTIONS[key],
            examples=ERROR_TYPE_EXAMPLES[key],
        )
        for key, label in ERROR_TYPE_LABELS.items()
    ]


def placeholder_context(op: str, n1: int, n2: int, position: str) -> str:
    """Task as HTML with the hidden slot underlined."""
    sym = "+" if op == "+" else "−"
    result = compute(op, n1, n2)
    if position == "start":
        return f"<u>{n1}</u> {sym} {n2} = {result}"
    if position == "middle":
        return f"{n1} {sym} <u>{n2}</u> = {result}"
    return f"{n1} {sym} {n2} = <u>{result}</u>"


# ---------------------------------------------------------------------------
# Detectors: each returns an error type (and optionally a severity) or None
# ---------------------------------------------------------------------------

def _ten_crossing(op: str, n1: int, n2: int, correct: int) -> Optional[tuple[int, int]]:
    """(ten below n1, remainder past it) for a subtraction that crosses that ten."""
    if op != "-" or n1 <= 10:
        return None
    lower_ten = n1 - n1 % 10
    if correct >= lower_ten:
        return None
    remaining = lower_ten - correct
    if not 1 <= remaining <= 9:
        return None
    return lower_ten, remaining


def _doubling(op, n1, n2, correct, student) -> Optional[str]:
    if op == "+" and n1 == n2:
        return "doubling_error"
    if op == "-" and n1 == 2 * n2:
        return "doubling_error"
    return None


def _operation_confusion(op, n1, n2, correct, student) -> Optional[str]:
    other = n1 - n2 if op == "+" else n1 + n2
    if student == other:
        return "operation_confusion"
    if op == "+" and student == abs(n1 - n2):
        return "operation_confusion"
    return None


def _stop_at_ten(op, n1, n2, correct, student) -> Optional[str]:
    crossing = _ten_crossing(op, n1, n2, correct)
    if crossing and student == crossing[0] + crossing[1]:
        return "decade_boundary_confusion"
    return None


def _reversal_at_ten(op, n1, n2, correct, student) -> Optional[str]:
    crossing = _ten_crossing(op, n1, n2, correct)
    if crossing and student == crossing[1]:
        return "subtraction_reversal_at_ten"
    return None


def _digit_reversal(correct: int, student: int) -> Optional[str]:
    c, s = str(correct), str(student)
    if len(c) == 2 and len(s) == 2 and s == c[::-1]:
        return "digit_reversal"
    return None


def _input_error(correct: int, student: int) -> Optional[str]:
    c, s = str(correct), str(student)
    if len(s) <= len(c):
        return None
    for digit in sorted(set(s)):
        count = s.count(digit)
        if count < 2:
            continue
        trimmed = s
        for _ in range(count - 1):
            i = trimmed.rfind(digit)
            trimmed = trimmed[:i] + trimmed[i + 1:]
        if trimmed and int(trimmed) == correct:
            return "input_error"
    return None


def _counting(diff: int) -> Optional[str]:
    return {
        -1: "counting_error_minus_1",
        1: "counting_error_plus_1",
        -2: "counting_error_minus_2",
        2: "counting_error_plus_2",
    }.get(diff)


def _off_by_ten(diff: int) -> Optional[str]:
    return {-10: "off_by_ten_minus", 10: "off_by_ten_plus"}.get(diff)


def _place_value(op, n1, n2, correct, student) -> Optional[tuple[str, str]]:
    if abs(student - correct) in (90, 100):
        return "place_value", "severe"
    if op == "+" and 10 < correct < 20:
        ones1, ones2 = n1 % 10, n2 % 10
        if ones1 + ones2 >= 10:
            expected_ones = str((ones1 + ones2) % 10)
            s = str(student)
            if "1" in s and expected_ones in s:
                return "place_value", "moderate"
    if correct >= 10 and student >= 10:
        if abs(correct % 10 - student % 10) <= 2 and correct // 10 != student // 10:
            return "place_value", "moderate"
    return None


def _other_severity(diff: int) -> str:
    if abs(diff) <= 3:
        return "minor"
    if abs(diff) >= 20:
        return "severe"
    return "moderate"


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------

class ErrorClassifier:
    """Stateless; call ``classify`` for each wrong answer."""

    def classify(
        self,
        op: str,
        n1: int,
        n2: int,
        correct_answer: int,
        student_answer: int,
        placeholder_position: str = "end",
    ) -> Optional[ErrorAnalysis]:
        position = placeholder_position or "end"
        expected = hidden_value(op, n1, n2, position)
        if correct_answer != expected:
            logger.error(
                "[error_classifier.classify] wrong expected answer %r for %s %s %s (%s), using %d",
                correct_answer, n1, op, n2, position, expected,
            )
            correct_answer = expected

        if student_answer == correct_answer:
            return None

        diff = student_answer - correct_answer
        error_type: Optional[str] = None
        severity: Optional[str] = None

        # Operand-pattern detectors describe how the result was computed, so
        # they only apply when the result itself is the hidden slot.
        result_hidden = position in ("end", "none")
        detectors = [_doubling]
        if result_hidden:
            detectors += [_operation_confusion, _stop_at_ten, _reversal_at_ten]
        for detect in detectors:
            error_type = detect(op, n1, n2, correct_answer, student_answer)
            if error_type:
                break

        if not error_type:
            error_type = (
                _digit_reversal(correct_answer, student_answer)
                or _input_error(correct_answer, student_answer)
                or _counting(diff)
                or _off_by_ten(diff)
            )

        if not error_type:
            found = _place_value(op, n1, n2, correct_answer, student_answer)
            if found:
                error_type, severity = found

        if not error_type:
            error_type, severity = "other", _other_severity(diff)

        return ErrorAnalysis(
            error_type=error_type,
            error_severity=severity or _SEVERITY[error_type],
            label=ERROR_TYPE_LABELS[error_type],
            description=ERROR_TYPE_DESCRIPTIONS[error_type],
            pedagogical_hint=ERROR_TYPE_HINTS[error_type],
            interventions=ERROR_TYPE_INTERVENTIONS[error_type],
            difference=abs(diff),
            examples=ERROR_TYPE_EXAMPLES[error_type],
            placeholder_position=position,
            placeholder_context=placeholder_context(op, n1, n2, position),
        )


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_CLASSIFIER: Optional[ErrorClassifier] = None


def get_error_classifier() -> ErrorClassifier:
    """Return the module-level singleton."""
    global _CLASSIFIER
    if _CLASSIFIER is None:
        _CLASSIFIER = ErrorClassifier()
    return _CLASSIFIER


def classify_error(
    op: str,
    n1: int,
    n2: int,
    correct_answer: int,
    student_answer: int,
    placeholder_position: str = "end",
) -> Optional[ErrorAnalysis]:
    return get_error_classifier().classify(op, n1, n2, correct_answer, student_answer, placeholder_position)
