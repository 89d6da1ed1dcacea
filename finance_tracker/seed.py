"""
Sample data for local development.

Generates realistic Colombian household payments (about three expenses for
every income) and writes them to a user's collection.

Usage:
    python -m finance_tracker.seed USER_ID [--count 50] [--seed 42] [--append]
"""

import argparse
import asyncio
import random
import sys
from datetime import timedelta
from typing import Optional

import structlog

from finance_tracker.audit import configure_logging
from finance_tracker.config import get_settings
from finance_tracker.models.payment import (
    Payment,
    PaymentCategory,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    utc_now,
)
from finance_tracker.services.payment_store import ID_PREFIX, PaymentStore
from finance_tracker.services.storage import PaymentStorageInterface, build_payment_storage


logger = structlog.get_logger(__name__)


DESCRIPTIONS: dict[PaymentCategory, list[str]] = {
    PaymentCategory.FOOD: ["Almuerzo", "Supermercado Éxito", "Domicilio restaurante", "Desayuno", "Mercado"],
    PaymentCategory.TRANSPORT: ["Uber", "Gasolina", "Parqueadero", "Peaje", "Bus"],
    PaymentCategory.UTILITIES: ["Luz", "Agua", "Internet", "Netflix", "Spotify", "Gas"],
    PaymentCategory.HEALTH: ["Farmacia", "Médico", "EPS", "Gym"],
    PaymentCategory.ENTERTAINMENT: ["Cine", "Bar", "Concierto", "Videojuegos"],
    PaymentCategory.EDUCATION: ["Curso online", "Libros", "Udemy"],
    PaymentCategory.HOUSING: ["Arriendo", "Administración", "Reparaciones"],
    PaymentCategory.CLOTHING: ["Ropa nueva", "Zapatos", "Ropa deportiva"],
    PaymentCategory.TECH: ["Celular", "Audífonos", "Accesorios"],
    PaymentCategory.SPORTS: ["Gym", "Deportes", "Suplementos"],
    PaymentCategory.PETS: ["Veterinario", "Comida para mascota"],
    PaymentCategory.SAVINGS: ["Ahorro mensual", "Inversión"],
    PaymentCategory.LOAN: ["Préstamo personal", "Cuota préstamo", "Pago deuda"],
    PaymentCategory.OTHER: ["Varios", "Otros gastos"],
}

# Amount ranges in pesos
EXPENSE_RANGE = (5_000, 505_000)
INCOME_RANGE = (100_000, 5_100_000)

HISTORY_DAYS = 90


def generate_mock_payments(
    count: int = 50,
    rng: Optional[random.Random] = None,
) -> list[Payment]:
    """
    Build count random payments, newest first.

    Pass a seeded random.Random for reproducible output.
    """
    rng = rng or random.Random()
    now = utc_now()
    categories = list(PaymentCategory)
    methods = list(PaymentMethod)
    statuses = list(PaymentStatus)

    payments = []
    for i in range(count):
        created_at = now - timedelta(seconds=rng.random() * HISTORY_DAYS * 24 * 3600)
        status = rng.choice(statuses)
        payment_type = PaymentType.EXPENSE if rng.random() > 0.25 else PaymentType.INCOME
        category = rng.choice(categories)

        if payment_type == PaymentType.EXPENSE:
            amount = round(rng.uniform(*EXPENSE_RANGE))
            description = rng.choice(DESCRIPTIONS[category])
        else:
            amount = round(rng.uniform(*INCOME_RANGE))
            description = f"Salario/Ingreso {i + 1}"

        completed_at = None
        if status == PaymentStatus.COMPLETED:
            completed_at = min(
                created_at + timedelta(seconds=rng.random() * 24 * 3600),
                now,
            )

        payments.append(
            Payment(
                id=f"{ID_PREFIX}{i + 1:06d}",
                amount=amount,
                status=status,
                method=rng.choice(methods),
                type=payment_type,
                description=description,
                category=category,
                notes="Notas adicionales" if rng.random() > 0.7 else None,
                created_at=created_at,
                updated_at=completed_at or created_at,
                completed_at=completed_at,
            )
        )

    payments.sort(key=lambda p: p.created_at, reverse=True)
    return payments


async def seed_user(
    storage: PaymentStorageInterface,
    user_id: str,
    count: int = 50,
    rng: Optional[random.Random] = None,
    append: bool = False,
) -> list[Payment]:
    """
    Write generated payments to a user's collection.

    Replaces the collection unless append is set, in which case the sample
    payments go after the existing ones (ids that clash are skipped).
    """
    payments = generate_mock_payments(count, rng)

    if append:
        existing = await PaymentStore(storage).load_all(user_id)
        taken = {p.id for p in existing}
        payments = existing + [p for p in payments if p.id not in taken]

    await storage.save(user_id, [p.to_record() for p in payments])
    logger.info("user_seeded", user_id=user_id, record_count=len(payments))
    return payments


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="finance_tracker.seed",
        description="Fill a user's collection with sample payments.",
    )
    parser.add_argument("user_id", help="User whose collection is written")
    parser.add_argument("--count", type=int, default=50, help="Number of payments (default 50)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    parser.add_argument("--append", action="store_true", help="Keep existing payments")
    args = parser.parse_args(argv)

    if args.count < 0:
        parser.error("--count must be zero or more")

    app_settings = get_settings().app
    configure_logging(app_settings.log_level, json_logs=app_settings.log_json)

    storage = build_payment_storage()
    asyncio.run(
        seed_user(
            storage,
            args.user_id,
            count=args.count,
            rng=random.Random(args.seed),
            append=args.append,
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
