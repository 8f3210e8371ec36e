# app/db/init_db.py
# Seed initial data into the database
# Run once after migrations: python -m app.db.init_db
#
# Creates:
#   1. Default academic subjects
#   2. Promotes ADMIN_EMAIL to admin (the profile must already exist --
#      profiles are only created by the identity bootstrap)

import os

from dotenv import load_dotenv

load_dotenv()

import app.db.base  # noqa: E402,F401
from app.db.session import SessionLocal  # noqa: E402
from app.models.lesson import Subject  # noqa: E402
from app.models.profile import Profile  # noqa: E402

DEFAULT_SUBJECTS = [
    {"name": "Mathematics", "description": "Algebra, geometry, calculus and statistics", "icon_name": "Calculator"},
    {"name": "Physics", "description": "Mechanics, electricity, waves and modern physics", "icon_name": "Atom"},
    {"name": "Chemistry", "description": "Organic, inorganic and physical chemistry", "icon_name": "FlaskConical"},
    {"name": "Biology", "description": "Cells, genetics, ecology and human biology", "icon_name": "Dna"},
    {"name": "Computer Science", "description": "Programming, algorithms and data structures", "icon_name": "Code"},
    {"name": "English Language", "description": "Grammar, writing, reading and conversation", "icon_name": "BookOpen"},
    {"name": "Arabic Language", "description": "Grammar, reading, writing and conversation", "icon_name": "Languages"},
    {"name": "History", "description": "World and regional history", "icon_name": "Landmark"},
    {"name": "Geography", "description": "Physical and human geography", "icon_name": "Globe"},
    {"name": "Art & Design", "description": "Drawing, painting and design fundamentals", "icon_name": "Palette"},
]


def seed_subjects(db) -> int:
    """Create the default subjects that don't exist yet. Returns how many were added."""
    created = 0
    for subject_data in DEFAULT_SUBJECTS:
        existing = db.query(Subject).filter(Subject.name == subject_data["name"]).first()
        if existing:
            print(f"  Subject already exists: {subject_data['name']}")
            continue
        db.add(Subject(**subject_data))
        created += 1
        print(f"  Subject created: {subject_data['name']}")
    db.flush()
    return created


def promote_admin(db, admin_email=None) -> bool:
    """Set user_type=admin on the profile matching ADMIN_EMAIL, if any."""
    admin_email = admin_email or os.getenv("ADMIN_EMAIL")
    if not admin_email:
        print("  ADMIN_EMAIL not set, skipping")
        return False

    profile = db.query(Profile).filter(Profile.email == admin_email).first()
    if profile is None:
        print(f"  No profile for {admin_email} yet -- sign up first, then re-run")
        return False
    if profile.user_type == "admin":
        print(f"  Already admin: {admin_email}")
        return True

    profile.user_type = "admin"
    db.flush()
    print(f"  Promoted to admin: {admin_email}")
    return True


def init_db() -> None:
    print("Seeding database...")
    db = SessionLocal()
    try:
        print("\n[1/2] Subjects")
        seed_subjects(db)

        print("\n[2/2] Admin")
        promote_admin(db)

        db.commit()
        print("\nDone. Database seeded successfully.")
    except Exception as e:
        db.rollback()
        print(f"\nERROR: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
