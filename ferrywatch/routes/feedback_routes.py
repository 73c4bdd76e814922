"""
FastAPI Feedback Routes
Prediction feedback from riders and frontend error reports
"""
import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from ferrywatch.database import PredictionFeedback, get_db
from ferrywatch.dependencies import get_notifier
from ferrywatch.models.vessel import Terminal
from ferrywatch.prediction.constants import TERMINAL_LABELS
from ferrywatch.schemas import ErrorReport, FeedbackCreate, FeedbackResponse, FeedbackStats
from ferrywatch.services.telegram_service import TelegramNotifier

logger = logging.getLogger(__name__)

router = APIRouter()

STACK_PREVIEW = 500


@router.post("/prediction-feedback", response_model=FeedbackResponse)
def submit_prediction_feedback(
    feedback: FeedbackCreate,
    db: Session = Depends(get_db),
    notifier: TelegramNotifier = Depends(get_notifier),
):
    """Record whether the predicted ferry was the one the user boarded"""
    record = PredictionFeedback(
        terminal=feedback.terminal.value,
        ferry_name=feedback.ferry_name,
        correct=feedback.correct,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.info(f"✅ Feedback for {feedback.ferry_name} at {feedback.terminal.value}: correct={feedback.correct}")

    icon = "✅" if feedback.correct else "❌"
    notifier.send_message("\n".join([
        f"{icon} Ferry Prediction Feedback",
        f"Terminal: {TERMINAL_LABELS[feedback.terminal]}",
        f"Predicted: {feedback.ferry_name}",
        f"Correct: {'Yes' if feedback.correct else 'No'}",
        f"Time: {record.created_at:%Y-%m-%d %H:%M}",
    ]))

    return FeedbackResponse.model_validate(record)


@router.get("/prediction-feedback/stats", response_model=List[FeedbackStats])
def get_feedback_stats(db: Session = Depends(get_db)):
    """Prediction accuracy per terminal"""
    rows = (
        db.query(PredictionFeedback.terminal, PredictionFeedback.correct, func.count(PredictionFeedback.id))
        .group_by(PredictionFeedback.terminal, PredictionFeedback.correct)
        .all()
    )

    totals = {terminal: [0, 0] for terminal in Terminal}
    for terminal, correct, count in rows:
        bucket = totals[Terminal(terminal)]
        bucket[0] += count
        if correct:
            bucket[1] += count

    return [
        FeedbackStats(
            terminal=terminal,
            total=total,
            correct=correct,
            accuracy=round(correct / total, 3) if total else None,
        )
        for terminal, (total, correct) in totals.items()
    ]


@router.post("/report-error")
def report_error(
    report: ErrorReport,
    request: Request,
    notifier: TelegramNotifier = Depends(get_notifier),
):
    """Forward a frontend error to the alert channel"""
    ip = request.headers.get("x-forwarded-for") or (request.client.host if request.client else "unknown")
    logger.error(f"[Frontend] {report.source}: {report.error} (ip={ip}, url={report.url})")

    lines = [
        "⚠️ Frontend error",
        f"Source: {report.source}",
        f"Error: {report.error}",
        f"Stack: {report.stack[:STACK_PREVIEW]}" if report.stack else None,
        f"URL: {report.url or 'N/A'}",
        f"IP: {ip}",
        f"UA: {report.user_agent or 'N/A'}",
        f"Screen: {report.screen}" if report.screen else None,
        f"Time: {report.timestamp or datetime.now(timezone.utc).isoformat()}",
    ]
    notifier.send_alert("\n".join(line for line in lines if line))

    return {"ok": True}
