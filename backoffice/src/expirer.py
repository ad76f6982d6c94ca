import datetime, logging
from backoffice.src.db import sessionMaker, Promotion
from backoffice.src.constants import TMZ_SECONDARY
from backoffice.src.enums import Action, EntityKind, PromotionStatus
from backoffice.src import workflow
from sqlalchemy.orm import Session

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("Expirer")


def expirePromotions(session: Session, today: datetime.date) -> int:
    promotions = (
        session.query(Promotion)
        .filter(
            Promotion.end_date < today,
            Promotion.status.in_([PromotionStatus.SCHEDULED, PromotionStatus.ACTIVE]),
        )
        .all()
    )
    for promotion in promotions:
        promotion.status = workflow.transition(
            EntityKind.PROMOTION, promotion.status, Action.EXPIRE
        )
    session.commit()
    logger.info(f"Expired {len(promotions)} promotions ended before {today}")
    return len(promotions)


def main():
    try:
        with sessionMaker() as session:
            today = datetime.datetime.now(TMZ_SECONDARY).date()
            expirePromotions(session, today)
    except Exception:
        logger.exception("expirer.py failed")


if __name__ == "__main__":
    main()
