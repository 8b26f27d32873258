from __future__ import annotations
from typing import List, Optional, Protocol

from .types import Quiz, QuizResult


class QuizRepository(Protocol):
    """The reads and writes the engine needs from persistence."""

    def get_quiz(self, quiz_id: str) -> Optional[Quiz]: ...

    def list_quizzes(self) -> List[Quiz]: ...

    def save_quiz(self, quiz: Quiz) -> None: ...

    def list_results(self, quiz_id: str) -> List[QuizResult]: ...

    def get_result(self, result_id: str) -> Optional[QuizResult]: ...

    def save_result(self, result: QuizResult) -> None: ...
