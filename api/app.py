from __future__ import annotations
from fastapi import FastAPI, HTTPException, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from quiz_core.config import load_config
from quiz_core.definition import (
    validate_basic_info,
    validate_definition,
    validate_dimensions,
    validate_questions,
)
from quiz_core.engine import QuizEngine
from quiz_core.errors import NotFound, Unavailable, ValidationFailed
from quiz_core.payloads import quiz_to_dict
from quiz_core.types import Submission, SubmissionAnswer
from .schemas import DimensionsReq, QuestionsReq, QuizIn, SubmitReq
from .storage import JsonFileRepository

log = logging.getLogger(__name__)

ENGINE = QuizEngine(JsonFileRepository())

app = FastAPI(title="Quiz Insight API")


@app.get("/")
def root():
    return {"status": "ok", "service": "quiz-insight-api"}


ALLOWED_ORIGINS = load_config().get("CORS_ORIGINS") or [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


# ---- Error mapping ----
@app.exception_handler(NotFound)
async def _not_found(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationFailed)
async def _invalid(request: Request, exc: ValidationFailed):
    return JSONResponse(
        status_code=422,
        content={"reason": exc.reason, "errors": [e.to_dict() for e in exc.errors]},
    )


@app.exception_handler(Unavailable)
async def _unavailable(request: Request, exc: Unavailable):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


# ---- Health ----
@app.get("/health")
def health():
    cfg = load_config()
    return {
        "data_dir": str(ENGINE.repo.root),
        "inline_repair": cfg.get("INLINE_REPAIR_ENABLED", True),
    }


# ---- Definitions ----
@app.post("/quizzes")
def create_quiz(payload: QuizIn, x_user_id: str | None = Header(default=None)):
    saved = ENGINE.create_quiz(payload.to_quiz(), created_by=x_user_id)
    return quiz_to_dict(saved)


@app.put("/quizzes/{quiz_id}")
def update_quiz(quiz_id: str, payload: QuizIn):
    return quiz_to_dict(ENGINE.update_quiz(quiz_id, payload.to_quiz(quiz_id)))


@app.get("/quizzes/{quiz_id}")
def get_quiz(quiz_id: str):
    return quiz_to_dict(ENGINE.get_quiz(quiz_id))


# ---- Progressive validation ----
# these always answer {valid, errors}; only malformed bodies get a 422
@app.post("/quizzes/validate")
def validate_full(payload: QuizIn):
    return validate_definition(payload.to_quiz()).to_dict()


@app.post("/quizzes/validate/basic")
def validate_basic(payload: QuizIn):
    return validate_basic_info(payload.to_quiz()).to_dict()


@app.post("/quizzes/validate/dimensions")
def validate_dims(req: DimensionsReq):
    dims = [d.to_dimension(i) for i, d in enumerate(req.dimensions)]
    return validate_dimensions(dims).to_dict()


@app.post("/quizzes/validate/questions")
def validate_qs(req: QuestionsReq):
    dims = [d.to_dimension(i) for i, d in enumerate(req.dimensions)]
    qs = [q.to_question(i) for i, q in enumerate(req.questions)]
    quiz_type = "COMPLEX" if req.quiz_type.upper() == "COMPLEX" else "SIMPLE"
    return validate_questions(qs, dims, quiz_type).to_dict()


# ---- Submissions ----
@app.post("/quizzes/{quiz_id}/submit")
def submit(quiz_id: str, req: SubmitReq, x_user_id: str | None = Header(default=None)):
    if req.quiz_id and req.quiz_id != quiz_id:
        raise HTTPException(422, "quizId does not match the path")
    answers = [SubmissionAnswer(question_id=a.question_id, option_id=a.option_id) for a in req.answers]
    result = ENGINE.submit(Submission(quiz_id=quiz_id, answers=answers, time_spent=req.time_spent), x_user_id)
    return result.to_dict()


@app.get("/results/{result_id}")
def get_result(result_id: str):
    return ENGINE.get_result(result_id).to_dict()


# ---- Reporting / maintenance ----
@app.get("/quizzes/{quiz_id}/analytics")
def analytics(quiz_id: str):
    return ENGINE.analytics(quiz_id).to_dict()


@app.get("/quizzes/{quiz_id}/integrity")
def integrity(quiz_id: str):
    return ENGINE.inspect(quiz_id).to_dict()


@app.post("/quizzes/{quiz_id}/repair")
def repair(quiz_id: str):
    report = ENGINE.repair(quiz_id)
    log.info("repair endpoint quiz=%s issues=%d", quiz_id, len(report.issues_found))
    return report.to_dict()
