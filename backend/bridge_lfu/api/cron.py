"""Scheduler entry point."""
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from bridge_lfu.api.deps import get_db
from bridge_lfu.config import get_settings
from bridge_lfu.schemas.notification import CronRunResponse
from bridge_lfu.services.alert_scanner import trigger_all_alerts
from bridge_lfu.services.notification_email_job import trigger_notification_email_job

router = APIRouter(prefix="/cron", tags=["cron"])
logger = logging.getLogger(__name__)


def verify_cron_secret(authorization: str | None = Header(default=None)) -> None:
    """Require the shared secret when CRON_SECRET is configured."""
    cron_secret = get_settings().cron_secret
    if cron_secret and authorization != f"Bearer {cron_secret}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.post("/notifications", response_model=CronRunResponse, dependencies=[Depends(verify_cron_secret)])
def run_notifications(db: Session = Depends(get_db)):
    """Scan assets for new alerts, then deliver pending emails."""
    logger.info("Starting notification cron run")
    alert_stats = trigger_all_alerts(db)
    email_stats = trigger_notification_email_job(db)
    logger.info("Notification cron run finished: %s", email_stats)
    return CronRunResponse(
        success=True,
        message="Notification processing finished",
        alert_stats=alert_stats,
        email_stats=email_stats,
    )
