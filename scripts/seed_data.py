"""
Seed demo data: a few participants and an upcoming Shabbaton.
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from app.db.base import Base, SessionLocal, engine
from app.models.participant import Participant, ParticipantRole, ParticipantStatus
from app.models.shabbaton import Shabbaton
from app.utils.dates import get_upcoming_saturday
from datetime import date, datetime, timedelta


def seed_participants(db):
    """Seed demo participants."""
    print("Seeding participants...")
    participants = [
        {"id": "demo-admin", "email": "admin@example.com", "preferred_name": "Admin", "role": ParticipantRole.ADMIN},
        {"id": "demo-sarah", "email": "sarah@example.com", "preferred_name": "Sarah", "role": ParticipantRole.PARTICIPANT},
        {"id": "demo-david", "email": "david@example.com", "preferred_name": "David", "role": ParticipantRole.PARTICIPANT},
    ]

    for data in participants:
        existing = db.query(Participant).filter(Participant.id == data["id"]).first()
        if not existing:
            db.add(Participant(status=ParticipantStatus.ACTIVE, **data))

    db.commit()
    print("Participants seeded")


def seed_shabbaton(db):
    """Seed a Shabbaton two Saturdays from now."""
    print("Seeding shabbaton...")
    saturday = get_upcoming_saturday(date.today()) + timedelta(days=7)
    title = f"Shabbaton {saturday.isoformat()}"
    existing = db.query(Shabbaton).filter(Shabbaton.title == title).first()
    if not existing:
        db.add(Shabbaton(
            title=title,
            date=datetime(saturday.year, saturday.month, saturday.day, 12, 0),
            default_meals=3,
            default_minutes=180,
            attendance_count=0,
        ))
        db.commit()
    print("Shabbaton seeded")


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_participants(db)
        seed_shabbaton(db)
        print("\n✅ Seed data complete")
    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding data: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
