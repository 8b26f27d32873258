"""JSON-file persistence for quiz definitions and results.

One file per quiz and per result under ``DATA_DIR`` plus a small index that
maps quiz ids to their result ids, so analytics can read a quiz's history
without scanning every result.  A database-backed repository can replace this
module as long as it provides the same methods.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from quiz_core.engine import utcnow_iso
from quiz_core.payloads import quiz_from_dict, quiz_to_dict, result_from_dict
from quiz_core.types import Quiz, QuizResult

log = logging.getLogger(__name__)

DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()

_LOCK = threading.Lock()


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        log.warning("unreadable json file %s", path)
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)


class JsonFileRepository:
    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root) if root is not None else DATA_ROOT
        self.quizzes_dir = self.root / "quizzes"
        self.results_dir = self.root / "results"
        self.index_path = self.root / "results_index.json"

    # ---- quizzes ----
    def get_quiz(self, quiz_id: str) -> Optional[Quiz]:
        raw = _read_json(self.quizzes_dir / f"{quiz_id}.json", None)
        if raw is None:
            return None
        return quiz_from_dict(raw, quiz_id=quiz_id)

    def list_quizzes(self) -> List[Quiz]:
        if not self.quizzes_dir.exists():
            return []
        out: List[Quiz] = []
        for path in sorted(self.quizzes_dir.glob("*.json")):
            quiz = self.get_quiz(path.stem)
            if quiz is not None:
                out.append(quiz)
        return out

    def save_quiz(self, quiz: Quiz) -> None:
        payload = quiz_to_dict(quiz)
        payload["updatedAt"] = utcnow_iso()
        _write_json(self.quizzes_dir / f"{quiz.id}.json", payload)

    # ---- results ----
    def get_result(self, result_id: str) -> Optional[QuizResult]:
        raw = _read_json(self.results_dir / f"{result_id}.json", None)
        if raw is None:
            return None
        return result_from_dict(raw)

    def list_results(self, quiz_id: str) -> List[QuizResult]:
        index: Dict[str, List[str]] = _read_json(self.index_path, {})
        out: List[QuizResult] = []
        for rid in index.get(quiz_id, []):
            result = self.get_result(rid)
            if result is not None:
                out.append(result)
        return out

    def save_result(self, result: QuizResult) -> None:
        _write_json(self.results_dir / f"{result.id}.json", result.to_dict())
        with _LOCK:
            index: Dict[str, List[str]] = _read_json(self.index_path, {})
            ids = index.setdefault(result.quiz_id, [])
            if result.id not in ids:
                ids.append(result.id)
            _write_json(self.index_path, index)
