"""
Learner simulator: run from backend/ with:
    python scripts/simulate_learner.py --sessions 30 --accuracy 0.85 --seed 7

Drives the full loop offline (session batch → simulated answers → progress
update) and prints how the learner's level, mastered competencies and error
profile evolve. Wrong answers are drawn from typical slips (off by one, off by
ten, operation mix-up) so the classifier has something to diagnose.
"""
import argparse
import json
import logging
import os
import random
import sys
from collections import Counter

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from numberpath.models.progression import LearningProgression, apply_update
from numberpath.services.competency_scheduler import calculate_overall_level
from numberpath.services.error_classifier import classify_error
from numberpath.services.progress_tracker import competency_summary, record_result
from numberpath.services.session_builder import SessionTaskBuilder, resolve_session_level
from numberpath.utils.answer_computer import compute


def wrong_answer(task, rng: random.Random) -> int:
    slip = rng.choice(("minus_1", "plus_1", "ten", "operation"))
    if slip == "minus_1":
        return max(0, task.correct_answer - 1)
    if slip == "plus_1":
        return task.correct_answer + 1
    if slip == "ten":
        return task.correct_answer + 10
    other = "-" if task.operation == "+" else "+"
    return abs(compute(other, task.number1, task.number2))


def simulate(sessions: int, accuracy: float, seed: int, size: int) -> list[dict]:
    rng = random.Random(seed)
    builder = SessionTaskBuilder(rng=random.Random(seed + 1))
    progression = LearningProgression()
    report = []
    errors: Counter = Counter()

    for n in range(1, sessions + 1):
        level = resolve_session_level(progression)
        batch = builder.generate_session_batch(progression, count=size)
        correct = 0
        for task in batch:
            ok = rng.random() < accuracy
            answer = task.correct_answer if ok else wrong_answer(task, rng)
            ok = answer == task.correct_answer
            if not ok:
                analysis = classify_error(
                    task.operation, task.number1, task.number2,
                    task.correct_answer, answer, task.placeholder_position,
                )
                errors[analysis.error_type] += 1
            correct += ok
            update = record_result(progression, task, answer, ok)
            progression = apply_update(progression, update)

        summary = competency_summary(progression)
        report.append({
            "session": n,
            "level": round(level, 1),
            "overall_level": round(calculate_overall_level(progression), 2),
            "correct": correct,
            "mastered": len(summary["mastered"]),
            "weak": summary["weak"],
        })

    report.append({"error_profile": dict(errors.most_common())})
    return report


def main():
    parser = argparse.ArgumentParser(
        description="Simulate a learner practising with the adaptive scheduler"
    )
    parser.add_argument("--sessions", type=int, default=20, help="Number of sessions")
    parser.add_argument("--accuracy", type=float, default=0.85, help="Probability of a correct answer")
    parser.add_argument("--size", type=int, default=10, help="Tasks per session")
    parser.add_argument("--seed", type=int, default=7, help="Random seed")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    report = simulate(args.sessions, args.accuracy, args.seed, args.size)

    if args.json:
        print(json.dumps(report, indent=2))
        return

    print("-" * 60)
    for row in report[:-1]:
        print(
            f"  session {row['session']:>3}  level {row['level']:>5}  "
            f"overall {row['overall_level']:>4}  correct {row['correct']:>2}/{args.size}  "
            f"mastered {row['mastered']:>2}"
        )
    print("-" * 60)
    print("  error profile:", report[-1]["error_profile"])


if __name__ == "__main__":
    main()
