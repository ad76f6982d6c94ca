from datetime import date, timedelta

from backoffice.src.db import Promotion
from backoffice.src.enums import DiscountType, PromotionStatus
from backoffice.src.expirer import expirePromotions


def addPromotion(session, title, end_date, status):
    promotion = Promotion(
        title=title,
        discount_type=DiscountType.FIXED,
        discount_value=500,
        start_date=end_date - timedelta(days=10),
        end_date=end_date,
        status=status,
    )
    session.add(promotion)
    session.commit()
    return promotion


def test_expire_ended_promotions(session):
    today = date.today()
    ended = addPromotion(session, "Ended", today - timedelta(days=1), PromotionStatus.ACTIVE)
    pending = addPromotion(
        session, "Never started", today - timedelta(days=2), PromotionStatus.SCHEDULED
    )
    running = addPromotion(session, "Running", today, PromotionStatus.ACTIVE)

    assert expirePromotions(session, today) == 2
    session.refresh(ended)
    session.refresh(pending)
    session.refresh(running)
    assert ended.status == PromotionStatus.EXPIRED
    assert pending.status == PromotionStatus.EXPIRED
    assert running.status == PromotionStatus.ACTIVE

    assert expirePromotions(session, today) == 0
