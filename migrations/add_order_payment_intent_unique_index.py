"""
Enforce one order per Stripe payment intent

Databases created before the constraint existed may hold duplicate orders
written by the success page and the webhook racing each other. Duplicates are
reported and must be resolved by hand before the index can be created.

Index:
- ux_orders_stripe_payment_intent_id UNIQUE (stripe_payment_intent_id)
"""

# Ensure this script can be run directly from repo root or the migrations folder
import sys
from pathlib import Path

CURRENT_DIR = Path(__file__).resolve().parent
PROJECT_DIR = CURRENT_DIR.parent
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from sqlalchemy import text
from goodstay.database import engine

INDEX_NAME = "ux_orders_stripe_payment_intent_id"


def find_duplicates(conn) -> list:
    return conn.execute(
        text(
            """
            SELECT stripe_payment_intent_id, COUNT(*) AS order_count
            FROM orders
            WHERE stripe_payment_intent_id IS NOT NULL
            GROUP BY stripe_payment_intent_id
            HAVING COUNT(*) > 1
            """
        )
    ).fetchall()


def upgrade():
    with engine.connect() as conn:
        duplicates = find_duplicates(conn)
        if duplicates:
            print("Duplicate orders found; merge or delete them before re-running:")
            for row in duplicates:
                print(f"  {row.stripe_payment_intent_id}: {row.order_count} orders")
            sys.exit(1)

        conn.execute(
            text(
                f"""
                CREATE UNIQUE INDEX IF NOT EXISTS {INDEX_NAME}
                ON orders (stripe_payment_intent_id);
                """
            )
        )
        conn.commit()
        print("Migration add_order_payment_intent_unique_index applied successfully")


def downgrade():
    with engine.connect() as conn:
        conn.execute(text(f"DROP INDEX IF EXISTS {INDEX_NAME}"))
        conn.commit()
        print("Migration add_order_payment_intent_unique_index rolled back")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Manage the orders payment intent unique index")
    parser.add_argument("--down", action="store_true", help="Rollback the migration")
    args = parser.parse_args()

    if args.down:
        downgrade()
    else:
        upgrade()
