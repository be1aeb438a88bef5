# scripts/seed.py

import os
import sys
import argparse
from datetime import datetime, timedelta

from dotenv import load_dotenv
from sqlmodel import Session, select

# Ensure root path for relative imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.database import create_db_and_tables, engine
from core.security import hash_password
from models.models import (
    DEFAULT_USER_ROLE,
    Project,
    ProjectMember,
    ProjectRole,
    Role,
    Task,
    TaskPriority,
    User,
)

# ✅ Load environment variables
load_dotenv()


def _ensure_user(session: Session, role: Role, firstname: str, lastname: str, email: str, password: str) -> User:
    user = session.exec(select(User).where(User.email == email)).first()
    if user:
        return user
    user = User(
        firstname=firstname,
        lastname=lastname,
        email=email,
        password_hash=hash_password(password),
        enabled=True,
        roles=[role],
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    print(f"✅ Added user {email}")
    return user


def _ensure_role(session: Session) -> Role:
    role = session.exec(select(Role).where(Role.name == DEFAULT_USER_ROLE)).first()
    if not role:
        role = Role(name=DEFAULT_USER_ROLE)
        session.add(role)
        session.commit()
        session.refresh(role)
    return role


def seed_dev_data(bind=None):
    """Seed development database with demo users and a 'Roadmap' project."""
    print("🌱 Seeding development data...")
    bind = bind or engine
    create_db_and_tables(bind)

    with Session(bind) as session:
        role = _ensure_role(session)

        # -----------------------------
        # 👑 Owner + 👥 member
        # -----------------------------
        owner = _ensure_user(session, role, "Olivia", "Owner", "owner@demo.com", "owner12345")
        member = _ensure_user(session, role, "Max", "Member", "member@demo.com", "member12345")

        # -----------------------------
        # 📁 Demo project
        # -----------------------------
        project = session.exec(
            select(Project).where(Project.name == "Roadmap", Project.owner_id == owner.id)
        ).first()
        if not project:
            project = Project(name="Roadmap", description="Demo project", owner_id=owner.id)
            session.add(project)
            session.flush()
            session.add(ProjectMember(
                project_id=project.id,
                user_id=member.id,
                role=ProjectRole.DEVELOPER.value,
                invited_by=owner.id,
                invitation_accepted=True,
            ))
            session.add(Task(
                title="Draft Q3 milestones",
                project_id=project.id,
                creator_id=owner.id,
                assignee_id=member.id,
                priority=TaskPriority.HIGH.value,
                deadline=datetime.utcnow() + timedelta(days=14),
                estimated_hours=6,
            ))
            session.commit()
            print("✅ Created 'Roadmap' project")

    print("🌱 Development data seeding complete.")


def seed_staging_data(bind=None):
    """Seed staging database with a single enabled account."""
    print("🌱 Seeding staging data...")
    bind = bind or engine
    create_db_and_tables(bind)

    with Session(bind) as session:
        role = _ensure_role(session)
        _ensure_user(session, role, "Staging", "Admin", "staging-admin@taskpilot.dev", "staging12345")

    print("🌱 Staging data seeding complete.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the TaskPilot database.")
    parser.add_argument(
        "--env",
        choices=["dev", "staging"],
        default="dev",
        help="Select environment to seed (dev or staging)",
    )
    args = parser.parse_args()

    if args.env == "dev":
        seed_dev_data()
    elif args.env == "staging":
        seed_staging_data()
