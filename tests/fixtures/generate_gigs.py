#!/usr/bin/env python3
"""
Seed a development gigbook database with a band roster, gigs, expenses,
payments and availability answers.
"""

import random
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

from faker import Faker

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from core import store
from core.database import create_schema, get_connection, transaction

# Initialize Faker with Indian locale for names, phones and cities
fake = Faker("en_IN")

# Database file
DB_FILE = Path(__file__).parent / "gigs.db"

ROSTER_SIZE = 6
GIG_COUNT = 40

# Status weights: most bookings are past the lead stage
STATUS_WEIGHTS = {
    "lead": 0.15,
    "quoted": 0.15,
    "confirmed": 0.25,
    "completed": 0.2,
    "paid": 0.2,
    "cancelled": 0.05,
}

EXPENSE_CATEGORIES = {
    "Travel": ["Cab to venue", "Train tickets", "Fuel"],
    "Equipment": ["Cable replacement", "Drum heads", "Guitar strings"],
    "Sound": ["PA rental", "Sound engineer fee"],
    "Food": ["Band dinner", "Green room snacks"],
    "Accommodation": ["Hotel rooms"],
}

GIG_KINDS = ["Wedding Sangeet", "Corporate Night", "Club Night", "College Fest", "Private Party"]
PAYMENT_MODES = ["bank_transfer", "upi", "cash", "cheque"]


def random_amount(low: int, high: int, step: int = 500) -> Decimal:
    return Decimal(random.randrange(low, high, step))


def seed_members(conn) -> list[str]:
    user_ids = []
    with transaction(conn):
        for i in range(ROSTER_SIZE):
            user_id = fake.uuid4()
            role = "app_admin" if i == 0 else random.choice(["admin", "musician", "musician"])
            store.upsert_member(conn, user_id, fake.name(), role=role)
            user_ids.append(user_id)
    return user_ids


def seed_gig(conn, user_ids: list[str]) -> str:
    status = random.choices(list(STATUS_WEIGHTS), weights=list(STATUS_WEIGHTS.values()), k=1)[0]
    gig_date = date.today() + timedelta(days=random.randint(-120, 90))
    quoted = random_amount(40000, 300000, 5000)
    confirmed = None
    if status in ("confirmed", "completed", "paid"):
        confirmed = quoted - random_amount(0, 20000, 5000)

    fields = {
        "title": f"{random.choice(GIG_KINDS)} - {fake.last_name()}",
        "venue": fake.company(),
        "city": fake.city(),
        "address": fake.street_address() if random.random() < 0.5 else None,
        "date": gig_date.isoformat(),
        "start_time": random.choice(["18:00:00", "19:30:00", "20:00:00", None]),
        "end_time": random.choice(["23:00:00", "01:00:00", None]),
        "organizer_name": fake.name(),
        "organizer_phone": fake.phone_number(),
        "organizer_email": fake.email(),
        "status": status,
        "quoted_amount": quoted,
        "confirmed_amount": confirmed,
        "tds_percentage": random.choice([Decimal("10"), Decimal("2"), None]),
        "notes": fake.sentence() if random.random() < 0.3 else None,
        "created_by": user_ids[0],
    }

    with transaction(conn):
        gig_id = store.insert_gig(conn, fields)

        for user_id in user_ids:
            answer = random.choices(["yes", "no", "maybe", "pending"], weights=[0.7, 0.1, 0.1, 0.1])[0]
            store.upsert_availability(conn, gig_id, user_id, answer, None)

        if confirmed is not None:
            for _ in range(random.randint(0, 4)):
                category = random.choice(list(EXPENSE_CATEGORIES))
                store.insert_expense(conn, {
                    "gig_id": gig_id,
                    "description": random.choice(EXPENSE_CATEGORIES[category]),
                    "amount": random_amount(500, 15000),
                    "category": category,
                    "date": gig_date.isoformat(),
                    "paid_by": random.choice(user_ids),
                })

        if status in ("completed", "paid"):
            installments = 1 if status == "paid" else random.randint(0, 1)
            for _ in range(installments):
                amount = confirmed if status == "paid" else (confirmed / 2).quantize(Decimal("1"))
                store.insert_payment(conn, {
                    "gig_id": gig_id,
                    "amount": amount,
                    "payment_date": (gig_date + timedelta(days=random.randint(0, 30))).isoformat(),
                    "payment_mode": random.choice(PAYMENT_MODES),
                    "reference_number": fake.bothify("TXN-########"),
                })

    return gig_id


def print_summary(conn):
    """Print summary statistics."""
    cursor = conn.cursor()

    cursor.execute("SELECT COUNT(*) FROM gigs")
    print(f"\nTotal gigs generated: {cursor.fetchone()[0]}")

    print("\nGigs by status:")
    cursor.execute("""
        SELECT status, COUNT(*) as count
        FROM gigs
        GROUP BY status
        ORDER BY count DESC
    """)
    for row in cursor.fetchall():
        print(f"  {row[0]}: {row[1]}")

    print("\nExpenses by category:")
    cursor.execute("""
        SELECT category, COUNT(*) as count
        FROM expenses
        GROUP BY category
        ORDER BY count DESC
    """)
    for row in cursor.fetchall():
        print(f"  {row[0]}: {row[1]}")


def main():
    print("Creating database and generating gigs...")

    conn = get_connection(DB_FILE)
    create_schema(conn)

    user_ids = seed_members(conn)
    for _ in range(GIG_COUNT):
        seed_gig(conn, user_ids)

    print_summary(conn)

    conn.close()
    print(f"\nDatabase saved to: {DB_FILE}")


if __name__ == "__main__":
    main()
