"""Batch checking of every exercise with a JSON report of the results."""

from __future__ import annotations

import json
import os
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .exercise import Exercise
from .run import run
from .verify import ExerciseFailed

DEFAULT_RESULT_PATH = ".github/result/check_result.json"


@dataclass
class ExerciseResult:
    """Whether one exercise passed."""

    name: str
    result: bool

    def to_dict(self) -> dict:
        return {"name": self.name, "result": self.result}


@dataclass
class ExerciseStatistics:
    """Totals over a whole checking run."""

    total_exercations: int = 0
    total_succeeds: int = 0
    total_failures: int = 0
    total_time: int = 0

    def to_dict(self) -> dict:
        return {
            "total_exercations": self.total_exercations,
            "total_succeeds": self.total_succeeds,
            "total_failures": self.total_failures,
            "total_time": self.total_time,
        }


@dataclass
class ExerciseCheckList:
    """The full report written after checking all exercises."""

    exercises: list[ExerciseResult] = field(default_factory=list)
    user_name: str | None = None
    statistics: ExerciseStatistics = field(default_factory=ExerciseStatistics)

    def to_dict(self) -> dict:
        return {
            "exercises": [result.to_dict() for result in self.exercises],
            "user_name": self.user_name,
            "statistics": self.statistics.to_dict(),
        }

    def to_json(self) -> str:
        """Serialise as pretty-printed JSON with two-space indentation."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def _now() -> int:
    return int(time.time())


def cicv_verify(
    exercises: Iterable[Exercise],
    output_path: str | os.PathLike = DEFAULT_RESULT_PATH,
) -> ExerciseCheckList:
    """Run every exercise, print progress, and write the JSON report."""
    exercises = list(exercises)
    started = _now()
    total = len(exercises)
    check_list = ExerciseCheckList(statistics=ExerciseStatistics(total_exercations=total))
    statistics = check_list.statistics

    for exercise in exercises:
        exercise_started = _now()
        try:
            run(exercise, True)
        except ExerciseFailed:
            passed = False
        else:
            passed = True

        if passed:
            statistics.total_succeeds += 1
            print(f"{exercise.name}执行成功")
        else:
            print(f"{exercise.name}执行失败")
        print(f"总的题目数: {total}")
        print(f"当前做正确的题目数: {statistics.total_succeeds}")
        print(f"当前修改试卷耗时: {_now() - exercise_started} s")

        check_list.exercises.append(ExerciseResult(name=exercise.name, result=passed))
        if not passed:
            statistics.total_failures += 1

    total_time = _now() - started
    print(
        "===============================试卷批改完成,总耗时: "
        f"{total_time} s; =================================="
    )
    statistics.total_time = total_time
    Path(output_path).write_text(check_list.to_json(), encoding="utf-8")
    return check_list