"""
Add structured contact columns to bookings and backfill them from notes

Columns:
- contact_name VARCHAR(255)
- contact_email VARCHAR(255)
- contact_phone VARCHAR(50)

Older rows only carry contact details in notes as
"Contact: <name>, Email: <email>, Phone: <phone>"; those are parsed and copied
into the new columns. Notes are left untouched.
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
from goodstay.domain.bookings.service import parse_legacy_contact


def upgrade():
    with engine.connect() as conn:
        for column, column_type in (
            ("contact_name", "VARCHAR(255)"),
            ("contact_email", "VARCHAR(255)"),
            ("contact_phone", "VARCHAR(50)"),
        ):
            conn.execute(text(f"ALTER TABLE bookings ADD COLUMN IF NOT EXISTS {column} {column_type};"))

        rows = conn.execute(
            text(
                """
                SELECT id, notes FROM bookings
                WHERE contact_name IS NULL AND contact_email IS NULL AND notes LIKE 'Contact:%'
                """
            )
        ).fetchall()

        for row in rows:
            contact = parse_legacy_contact(row.notes)
            conn.execute(
                text(
                    """
                    UPDATE bookings
                    SET contact_name = :name, contact_email = :email, contact_phone = :phone
                    WHERE id = :id
                    """
                ),
                {
                    "id": row.id,
                    "name": None if contact["name"] == "Unknown" else contact["name"],
                    "email": None if contact["email"] == "N/A" else contact["email"],
                    "phone": None if contact["phone"] == "N/A" else contact["phone"],
                },
            )

        conn.commit()
        print(f"Migration add_booking_contact_fields applied successfully ({len(rows)} rows backfilled)")


def downgrade():
    with engine.connect() as conn:
        conn.execute(text("ALTER TABLE bookings DROP COLUMN IF EXISTS contact_phone"))
        conn.execute(text("ALTER TABLE bookings DROP COLUMN IF EXISTS contact_email"))
        conn.execute(text("ALTER TABLE bookings DROP COLUMN IF EXISTS contact_name"))
        conn.commit()
        print("Migration add_booking_contact_fields rolled back")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Manage booking contact fields migration")
    parser.add_argument("--down", action="store_true", help="Rollback the migration")
    args = parser.parse_args()

    if args.down:
        downgrade()
    else:
        upgrade()
