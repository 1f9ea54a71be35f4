"""CLI commands for seeding categories and draining the outbox.

Usage:
    flask seed-categories                 # Insert missing system categories
    flask dispatch-outbox                 # Publish ready outbox messages
    flask dispatch-outbox --limit 200
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from skilltrack.domains.skills.models.skill_models import Category
from skilltrack.extensions import db
from skilltrack.skilltrack_platform.outbox import dispatch_ready

SYSTEM_CATEGORIES = (
    ("Programming", "Software development and computer science", "code", "#3b82f6"),
    ("Languages", "Spoken and written languages", "globe", "#10b981"),
    ("Music", "Instruments, theory and production", "music", "#8b5cf6"),
    ("Art & Design", "Drawing, painting and visual design", "palette", "#ec4899"),
    ("Business", "Management, marketing and finance", "briefcase", "#f59e0b"),
    ("Health & Fitness", "Exercise, nutrition and wellbeing", "heart", "#ef4444"),
    ("Personal Development", "Habits, productivity and soft skills", "user", "#14b8a6"),
    ("Academic", "School and university subjects", "book", "#6366f1"),
    ("Other", "Anything else", "star", "#6b7280"),
)


def seed_categories() -> int:
    """Insert the system categories that are missing; returns how many were added."""
    existing = {name for (name,) in db.session.query(Category.name)}
    added = 0
    for name, description, icon, color in SYSTEM_CATEGORIES:
        if name in existing:
            continue
        db.session.add(
            Category(name=name, description=description, icon=icon, color=color, is_system=True)
        )
        added += 1
    db.session.commit()
    return added


@click.command("seed-categories")
@with_appcontext
def seed_categories_command():
    """Insert the built-in skill categories."""
    added = seed_categories()
    click.echo(f"Seeded {added} categories ({len(SYSTEM_CATEGORIES) - added} already present)")


@click.command("dispatch-outbox")
@click.option("--limit", "-l", type=int, default=50, help="Maximum messages to dispatch")
@with_appcontext
def dispatch_outbox_command(limit: int):
    """Publish pending domain events to the in-process event bus."""
    sent = dispatch_ready(limit=limit)
    click.echo(f"Dispatched {len(sent)} outbox messages")


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(seed_categories_command)
    app.cli.add_command(dispatch_outbox_command)
