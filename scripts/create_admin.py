"""
Grant the admin role to a participant (creating the profile if needed).
Usage: python scripts/create_admin.py <auth-provider-user-id> --email admin@example.com
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from app.db.base import SessionLocal
from app.models.participant import Participant, ParticipantRole, ParticipantStatus


def create_admin(participant_id: str, email: str, preferred_name: str = "Admin"):
    """Create or promote a participant profile to admin."""
    db = SessionLocal()
    try:
        participant = db.query(Participant).filter(Participant.id == participant_id).first()
        if participant:
            participant.role = ParticipantRole.ADMIN
            participant.status = ParticipantStatus.ACTIVE
            print(f"Promoting existing participant {participant.email} to admin")
        else:
            participant = Participant(
                id=participant_id,
                email=email,
                preferred_name=preferred_name,
                role=ParticipantRole.ADMIN,
                status=ParticipantStatus.ACTIVE,
            )
            db.add(participant)

        db.commit()
        print(f"✅ Admin ready: {participant.email} ({participant_id})")

    except Exception as e:
        db.rollback()
        print(f"❌ Error creating admin: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create or promote an admin participant")
    parser.add_argument("participant_id", help="User id issued by the auth provider (JWT sub)")
    parser.add_argument("--email", required=True, help="Admin email")
    parser.add_argument("--name", default="Admin", help="Preferred name")

    args = parser.parse_args()

    create_admin(participant_id=args.participant_id, email=args.email, preferred_name=args.name)
