"""
Periodic lifecycle jobs.

Each job takes a session, does its work in a single transaction and returns
a report. They run from Celery beat and from the cron endpoints.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.config import settings
from app.models.audit import SystemLog
from app.models.menu import Product
from app.models.order import Order
from app.models.stock import Stock
from app.models.subscription import Subscription, SubscriptionPayment
from app.models.tenant import Restaurant
from app.models.user import User, RestaurantUser, RestaurantRole
from app.services.audit import log_system_action
from app.services.email import send_email
from app.services.order_status import CANCELLED, DELIVERED, PENDING, apply_status_change
from app.services.stats import get_orders_stats, get_period_range, get_revenue_stats, get_top_products
from app.services.subscriptions import days_remaining
from app.subscription.checker import has_feature

logger = structlog.get_logger()

REMINDER_DAYS = (7, 3, 1)


async def check_subscriptions(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Expire trials and paid periods that have ended"""
    now = now or datetime.utcnow()

    trials = (await db.execute(
        select(Subscription).where(
            Subscription.status == "trial",
            Subscription.trial_ends_at < now,
        )
    )).scalars().all()

    actives = (await db.execute(
        select(Subscription).where(
            Subscription.status == "active",
            Subscription.current_period_end < now,
        )
    )).scalars().all()

    for subscription in list(trials) + list(actives):
        subscription.status = "expired"
        subscription.updated_at = now

    if trials or actives:
        log_system_action(
            db,
            "subscriptions_expired",
            level="warning",
            data={"trials": len(trials), "subscriptions": len(actives)},
        )

    await db.commit()

    report = {
        "expired_trials": len(trials),
        "expired_subscriptions": len(actives),
        "checked_at": now.isoformat(),
    }
    logger.info("Subscriptions checked", **report)
    return report


async def suspend_expired_restaurants(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Deactivate active restaurants whose subscription has expired"""
    now = now or datetime.utcnow()

    result = await db.execute(
        select(Restaurant)
        .join(Subscription, Subscription.restaurant_id == Restaurant.id)
        .where(Restaurant.is_active == True, Subscription.status == "expired")
    )
    restaurants = result.scalars().all()

    for restaurant in restaurants:
        restaurant.is_active = False
        restaurant.updated_at = now
        log_system_action(
            db,
            "restaurant_suspended_auto",
            level="warning",
            restaurant_id=restaurant.id,
            resource_type="restaurant",
            resource_id=restaurant.id,
            data={"name": restaurant.name, "reason": "subscription_expired"},
        )

    await db.commit()

    report = {
        "suspended": len(restaurants),
        "restaurants": [restaurant.name for restaurant in restaurants],
        "checked_at": now.isoformat(),
    }
    logger.info("Expired restaurants suspended", suspended=len(restaurants))
    return report


async def cancel_abandoned_orders(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Cancel orders left pending too long at active restaurants"""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(minutes=settings.abandoned_order_minutes)

    result = await db.execute(
        select(Order)
        .join(Restaurant, Restaurant.id == Order.restaurant_id)
        .where(
            Order.status == PENDING,
            Order.created_at < cutoff,
            Restaurant.is_active == True,
        )
        .options(selectinload(Order.items))
    )
    orders = result.scalars().all()

    for order in orders:
        await apply_status_change(db, order, CANCELLED)
        log_system_action(
            db,
            "order_cancelled_auto",
            restaurant_id=order.restaurant_id,
            resource_type="order",
            resource_id=order.id,
            data={
                "order_number": order.order_number,
                "created_at": order.created_at.isoformat(),
                "minutes_pending": int((now - order.created_at).total_seconds() // 60),
            },
        )

    await db.commit()

    report = {
        "cancelled": len(orders),
        "cutoff": cutoff.isoformat(),
    }
    logger.info("Abandoned orders cancelled", **report)
    return report


async def get_admin_emails(db: AsyncSession, restaurant_id: UUID) -> List[str]:
    result = await db.execute(
        select(User.email)
        .join(RestaurantUser, RestaurantUser.user_id == User.id)
        .where(
            RestaurantUser.restaurant_id == restaurant_id,
            RestaurantUser.role == RestaurantRole.ADMIN,
            User.is_active == True,
        )
    )
    return [email for email in result.scalars().all() if email]


async def send_subscription_reminders(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Email restaurant admins when their period ends in 7, 3 or 1 days"""
    now = now or datetime.utcnow()

    result = await db.execute(
        select(Subscription, Restaurant)
        .join(Restaurant, Restaurant.id == Subscription.restaurant_id)
        .where(
            Subscription.status.in_(["trial", "active"]),
            Restaurant.is_active == True,
        )
    )

    sent = 0
    failed = 0
    for subscription, restaurant in result.all():
        remaining = days_remaining(subscription, now)
        if remaining not in REMINDER_DAYS:
            continue

        recipients = await get_admin_emails(db, restaurant.id)
        if not recipients:
            continue

        label = "essai gratuit" if subscription.status == "trial" else "abonnement"
        subject = f"Votre {label} Akôm expire dans {remaining} jour{'s' if remaining > 1 else ''}"
        body = (
            f"Bonjour,\n\n"
            f"Votre {label} pour {restaurant.name} expire dans {remaining} jour(s).\n"
            f"Renouvelez-le pour continuer à recevoir vos commandes : "
            f"{settings.app_url}/dashboard/subscription\n\n"
            f"L'équipe Akôm"
        )

        try:
            await send_email(recipients, subject, body)
            sent += 1
        except httpx.HTTPError as e:
            failed += 1
            logger.error(
                "Failed to send subscription reminder",
                restaurant_id=str(restaurant.id),
                error=str(e),
            )
            log_system_action(
                db,
                "cron_error",
                level="error",
                restaurant_id=restaurant.id,
                data={"job": "send_subscription_reminders", "error": str(e)},
            )

    await db.commit()

    report = {"sent": sent, "failed": failed}
    logger.info("Subscription reminders processed", **report)
    return report


async def send_stock_alerts(db: AsyncSession) -> Dict[str, Any]:
    """Email admins the products at or below their alert threshold"""
    restaurants = (await db.execute(
        select(Restaurant).where(Restaurant.is_active == True)
    )).scalars().all()

    alerted = 0
    failed = 0
    for restaurant in restaurants:
        if not await has_feature(db, restaurant.id, "stock_alerts"):
            continue

        result = await db.execute(
            select(Stock, Product)
            .join(Product, Product.id == Stock.product_id)
            .where(
                Stock.restaurant_id == restaurant.id,
                Product.has_stock == True,
                Stock.quantity <= Stock.alert_threshold,
            )
            .order_by(Stock.quantity)
        )
        low_stocks = result.all()
        if not low_stocks:
            continue

        recipients = await get_admin_emails(db, restaurant.id)
        if not recipients:
            continue

        lines = [
            f"- {product.name} : {stock.quantity} restant(s) (seuil {stock.alert_threshold})"
            for stock, product in low_stocks
        ]
        body = (
            f"Bonjour,\n\n"
            f"Les produits suivants de {restaurant.name} sont en stock bas :\n"
            + "\n".join(lines)
            + f"\n\nGérez votre stock : {settings.app_url}/dashboard/stock\n\nL'équipe Akôm"
        )

        try:
            await send_email(recipients, f"Alerte stock - {restaurant.name}", body)
            alerted += 1
        except httpx.HTTPError as e:
            failed += 1
            logger.error(
                "Failed to send stock alert",
                restaurant_id=str(restaurant.id),
                error=str(e),
            )
            log_system_action(
                db,
                "cron_error",
                level="error",
                restaurant_id=restaurant.id,
                data={"job": "send_stock_alerts", "error": str(e)},
            )

    await db.commit()

    report = {"restaurants_alerted": alerted, "failed": failed}
    logger.info("Stock alerts processed", **report)
    return report


async def alert_pending_orders(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Email admins about orders nobody picked up, once per order"""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(minutes=settings.pending_order_alert_minutes)

    result = await db.execute(
        select(Order, Restaurant)
        .join(Restaurant, Restaurant.id == Order.restaurant_id)
        .join(Subscription, Subscription.restaurant_id == Restaurant.id)
        .where(
            Order.status == PENDING,
            Order.created_at < cutoff,
            Restaurant.is_active == True,
            Subscription.status.in_(["trial", "active"]),
        )
        .options(selectinload(Order.items))
        .order_by(Order.created_at)
    )
    rows = result.all()

    order_ids = [order.id for order, _ in rows]
    already_alerted = set()
    if order_ids:
        alerted = await db.execute(
            select(SystemLog.resource_id).where(
                SystemLog.action == "pending_order_alert_sent",
                SystemLog.resource_id.in_(order_ids),
            )
        )
        already_alerted = set(alerted.scalars().all())

    by_restaurant: Dict[UUID, List[Order]] = {}
    restaurants: Dict[UUID, Restaurant] = {}
    for order, restaurant in rows:
        if order.id in already_alerted:
            continue
        by_restaurant.setdefault(restaurant.id, []).append(order)
        restaurants[restaurant.id] = restaurant

    alerted_orders = 0
    failed = 0
    for restaurant_id, orders in by_restaurant.items():
        restaurant = restaurants[restaurant_id]
        recipients = await get_admin_emails(db, restaurant_id)
        if not recipients:
            continue

        lines = []
        for order in orders:
            minutes = int((now - order.created_at).total_seconds() // 60)
            items = ", ".join(f"{item.quantity} x {item.product_name}" for item in order.items)
            where = order.table_label or order.customer_name or order.source
            lines.append(
                f"- {order.order_number} ({where}) : {order.total_amount} FCFA, "
                f"en attente depuis {minutes} min - {items}"
            )
        body = (
            f"Bonjour,\n\n"
            f"Ces commandes de {restaurant.name} attendent toujours d'être prises en charge :\n"
            + "\n".join(lines)
            + f"\n\nOuvrez l'écran cuisine : {settings.app_url}/dashboard/orders\n\nL'équipe Akôm"
        )

        try:
            await send_email(recipients, f"Commandes en attente - {restaurant.name}", body)
        except httpx.HTTPError as e:
            failed += 1
            logger.error(
                "Failed to send pending order alert",
                restaurant_id=str(restaurant_id),
                error=str(e),
            )
            log_system_action(
                db,
                "pending_order_alert_failed",
                level="error",
                restaurant_id=restaurant_id,
                data={"orders": [order.order_number for order in orders], "error": str(e)},
            )
            continue

        for order in orders:
            alerted_orders += 1
            log_system_action(
                db,
                "pending_order_alert_sent",
                level="warning",
                restaurant_id=restaurant_id,
                resource_type="order",
                resource_id=order.id,
                data={
                    "order_number": order.order_number,
                    "minutes_pending": int((now - order.created_at).total_seconds() // 60),
                },
            )

    await db.commit()

    report = {
        "pending_orders": len(rows),
        "alerts_sent": alerted_orders,
        "failed": failed,
    }
    logger.info("Pending order alerts processed", **report)
    return report


async def verify_stock_consistency(db: AsyncSession) -> Dict[str, Any]:
    """Take out-of-stock products off sale"""
    result = await db.execute(
        select(Product, Stock)
        .join(Stock, Stock.product_id == Product.id)
        .where(
            Product.has_stock == True,
            Product.is_available == True,
            Stock.quantity <= 0,
        )
    )
    rows = result.all()

    for product, stock in rows:
        product.is_available = False
        log_system_action(
            db,
            "stock_consistency_fix",
            level="warning",
            restaurant_id=product.restaurant_id,
            resource_type="product",
            resource_id=product.id,
            data={"name": product.name, "quantity": stock.quantity, "action": "product_disabled"},
        )

    await db.commit()

    report = {
        "corrected": len(rows),
        "products_disabled": [product.name for product, _ in rows],
    }
    logger.info("Stock consistency verified", corrected=len(rows))
    return report


async def send_daily_reports(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Email each restaurant's admins the figures of the previous day"""
    now = now or datetime.utcnow()
    day = now.date() - timedelta(days=1)
    period = get_period_range("custom", day, day)

    restaurants = (await db.execute(
        select(Restaurant).where(Restaurant.is_active == True)
    )).scalars().all()

    sent = 0
    failed = 0
    for restaurant in restaurants:
        orders = await get_orders_stats(db, restaurant.id, period)
        if orders.total == 0:
            continue

        recipients = await get_admin_emails(db, restaurant.id)
        if not recipients:
            continue

        revenue = await get_revenue_stats(db, restaurant.id, period)
        top_products = await get_top_products(db, restaurant.id, period, limit=5)
        average_basket = revenue.total // revenue.orders_count if revenue.orders_count else 0

        lines = [
            f"Commandes : {orders.total} (servies {orders.delivered}, annulées {orders.cancelled})",
            f"Chiffre d'affaires : {revenue.total} FCFA ({revenue.percent_change:+g} % vs la veille)",
            f"Panier moyen : {average_basket} FCFA",
        ]
        if top_products:
            lines.append("Meilleures ventes :")
            lines.extend(
                f"- {product.product_name} : {product.quantity_sold} vendu(s), {product.revenue} FCFA"
                for product in top_products
            )
        body = (
            f"Bonjour,\n\nVoici le bilan de {restaurant.name} pour le {day:%d/%m/%Y} :\n\n"
            + "\n".join(lines)
            + f"\n\nStatistiques détaillées : {settings.app_url}/dashboard/stats\n\nL'équipe Akôm"
        )

        try:
            await send_email(recipients, f"Bilan du {day:%d/%m/%Y} - {restaurant.name}", body)
            sent += 1
        except httpx.HTTPError as e:
            failed += 1
            logger.error(
                "Failed to send daily report",
                restaurant_id=str(restaurant.id),
                error=str(e),
            )
            log_system_action(
                db,
                "cron_error",
                level="error",
                restaurant_id=restaurant.id,
                data={"job": "send_daily_reports", "error": str(e)},
            )

    await db.commit()

    report = {"date": day.isoformat(), "sent": sent, "failed": failed}
    logger.info("Daily reports processed", **report)
    return report


async def archive_old_orders(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Archive delivered and cancelled orders untouched for the retention period"""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(days=settings.order_archive_days)

    result = await db.execute(
        update(Order)
        .where(
            Order.status.in_([DELIVERED, CANCELLED]),
            Order.updated_at < cutoff,
            Order.is_archived == False,
        )
        .values(is_archived=True)
    )
    archived = result.rowcount

    if archived:
        log_system_action(
            db,
            "orders_archived",
            data={"archived": archived, "cutoff": cutoff.isoformat()},
        )
    await db.commit()

    report = {"archived": archived, "cutoff": cutoff.isoformat()}
    logger.info("Old orders archived", **report)
    return report


async def clean_pending_payments(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Expire manual subscription payments left unvalidated too long"""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(days=settings.pending_payment_expiry_days)

    payments = (await db.execute(
        select(SubscriptionPayment).where(
            SubscriptionPayment.status == "pending",
            SubscriptionPayment.method == "manual",
            SubscriptionPayment.created_at < cutoff,
        )
    )).scalars().all()

    for payment in payments:
        payment.status = "expired"
        log_system_action(
            db,
            "payment_expired_auto",
            level="warning",
            restaurant_id=payment.restaurant_id,
            resource_type="subscription_payment",
            resource_id=payment.id,
            data={
                "amount": payment.amount,
                "billing_cycle": payment.billing_cycle,
                "days_pending": (now - payment.created_at).days,
            },
        )

    await db.commit()

    report = {"expired": len(payments)}
    logger.info("Pending payments cleaned", **report)
    return report


async def clean_system_logs(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Purge info and warning logs after 30 days, errors after 90"""
    now = now or datetime.utcnow()
    routine_cutoff = now - timedelta(days=settings.log_retention_days)
    error_cutoff = now - timedelta(days=settings.error_log_retention_days)

    routine = await db.execute(
        delete(SystemLog)
        .where(SystemLog.level.in_(["info", "warning"]), SystemLog.created_at < routine_cutoff)
    )
    errors = await db.execute(
        delete(SystemLog)
        .where(SystemLog.level == "error", SystemLog.created_at < error_cutoff)
    )

    report = {
        "deleted": routine.rowcount + errors.rowcount,
        "deleted_routine": routine.rowcount,
        "deleted_errors": errors.rowcount,
    }
    if report["deleted"]:
        log_system_action(db, "system_logs_cleaned", data=report)
    await db.commit()

    logger.info("System logs cleaned", **report)
    return report


JOBS = {
    "check-subscriptions": check_subscriptions,
    "suspend-expired-restaurants": suspend_expired_restaurants,
    "cancel-abandoned-orders": cancel_abandoned_orders,
    "send-subscription-reminders": send_subscription_reminders,
    "send-stock-alerts": send_stock_alerts,
    "alert-pending-orders": alert_pending_orders,
    "verify-stock-consistency": verify_stock_consistency,
    "send-daily-reports": send_daily_reports,
    "archive-old-orders": archive_old_orders,
    "clean-pending-payments": clean_pending_payments,
    "clean-system-logs": clean_system_logs,
}
