# tools/audit_quizzes.py
from __future__ import annotations
import argparse, json, logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from quiz_core.engine import QuizEngine
from quiz_core.repository import QuizRepository

log = logging.getLogger("audit_quizzes")


def audit(engine: QuizEngine, quiz_ids: List[str], repair: bool = False) -> Dict[str, Any]:
    """Inspect (and optionally repair) each quiz; returns a JSON-ready summary."""
    rows: Dict[str, Any] = {}
    for qid in quiz_ids:
        before = engine.inspect(qid)
        row: Dict[str, Any] = {"before": before.to_dict()}
        if repair and not before.is_valid:
            row["repair"] = engine.repair(qid).to_dict()
            row["after"] = engine.inspect(qid).to_dict()
        rows[qid] = row
    remaining = sum(
        1 for row in rows.values()
        if not (row.get("after") or row["before"])["isValid"]
    )
    return {"quizzes": rows, "checked": len(rows), "withIssues": remaining}


def print_report(summary: Dict[str, Any]) -> None:
    print("=== Quiz Integrity ===")
    for qid, row in summary["quizzes"].items():
        final = row.get("after") or row["before"]
        status = "OK" if final["isValid"] else "ISSUES"
        print(f"\n{qid}: {status}")
        for msg in row["before"]["issues"]:
            print(f"  - {msg}")
        for msg in row["before"]["warnings"]:
            print(f"  ! {msg}")
        if "repair" in row:
            print(f"  {row['repair']['message']}")
    print(f"\nChecked {summary['checked']} quizzes, {summary['withIssues']} with remaining issues.")


def main(argv: Optional[List[str]] = None, repo: Optional[QuizRepository] = None) -> int:
    ap = argparse.ArgumentParser(description="Inspect stored quizzes and optionally repair broken dimension links")
    ap.add_argument("quiz_ids", nargs="*", help="quiz ids to check (default: every stored quiz)")
    ap.add_argument("--repair", action="store_true", help="persist repairs for quizzes with issues")
    ap.add_argument("--json", dest="json_path", default=None, help="also write the summary to this file")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if repo is None:
        from api.storage import JsonFileRepository
        repo = JsonFileRepository()
    engine = QuizEngine(repo)

    ids = args.quiz_ids or [q.id for q in repo.list_quizzes()]
    log.info("auditing %d quizzes (repair=%s)", len(ids), args.repair)
    summary = audit(engine, ids, repair=args.repair)
    print_report(summary)
    if args.json_path:
        Path(args.json_path).write_text(json.dumps(summary, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return 2 if summary["withIssues"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
