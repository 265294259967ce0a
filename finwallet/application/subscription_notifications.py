"""
Expiring subscription notices.

For every user: unpaid subscriptions with expiry_on < today + N days are
collected into one message and handed to the Notifier. Delivery is
fire-and-forget: a failing notifier is logged and the loop continues.
Scheduling this check is the caller's concern.
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol

from sqlalchemy.orm import Session

from finwallet.config import get_settings
from finwallet.domain.periods import today as local_today
from finwallet.infrastructure.db.models import SubscriptionModel, User, Wallet
from finwallet.infrastructure.db.repositories import SubscriptionRepository, UserRepository, WalletRepository
from finwallet.utils.money import format_money2

logger = logging.getLogger(__name__)

SUBJECT_PREFIX = "Expiring subscriptions "


@dataclass(frozen=True)
class Notice:
    user_id: int
    subject: str
    body: str


class Notifier(Protocol):
    def send(self, user_id: int, subject: str, body: str) -> None:
        ...


class LoggingNotifier:
    """Notifier that only writes the notice to the log."""

    def send(self, user_id: int, subject: str, body: str) -> None:
        logger.info("Notice for user_id=%s: %s\n%s", user_id, subject, body)


def build_notice(user: User, expiring: list[SubscriptionModel], currency: str, days: int) -> Notice:
    lines = [
        f"Hello, {user.username}!",
        "",
        f"The following subscriptions expire within {days} days:",
    ]
    for s in expiring:
        lines.append(f"- {s.name}: {format_money2(s.price, currency)} (expires on {s.expiry_on.isoformat()})")
    return Notice(user_id=user.id, subject=SUBJECT_PREFIX + user.username, body="\n".join(lines))


def collect_expiring_notices(db: Session, today: date | None = None) -> list[Notice]:
    today = today or local_today()
    days = get_settings().SUBSCRIPTION_NOTICE_DAYS
    limit = today + timedelta(days=days)
    subscriptions = SubscriptionRepository(db)
    wallets = WalletRepository(db)

    notices = []
    for user in UserRepository(db).list_all():
        expiring = subscriptions.list_unpaid_expiring_before(user.id, limit)
        if not expiring:
            continue
        wallet: Wallet | None = wallets.find_by_user_id(user.id)
        currency = wallet.currency if wallet else get_settings().WALLET_CURRENCY
        notices.append(build_notice(user, expiring, currency, days))
    return notices


def notify_expiring_subscriptions(db: Session, notifier: Notifier, today: date | None = None) -> int:
    """
    Отправить уведомления об истекающих подписках.

    Returns:
        число успешно переданных уведомлений
    """
    sent = 0
    for notice in collect_expiring_notices(db, today):
        try:
            notifier.send(notice.user_id, notice.subject, notice.body)
            sent += 1
        except Exception:
            logger.exception("Expiring subscriptions notice failed for user_id=%s", notice.user_id)
    logger.info("Expiring subscriptions: sent %d notice(s)", sent)
    return sent
