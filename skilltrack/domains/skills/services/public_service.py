"""Read-only public views: shared skills and public profiles."""

from __future__ import annotations

from typing import Optional

from skilltrack.core.users.services import find_public_profile
from skilltrack.domains.progress.mappers import map_dashboard
from skilltrack.domains.progress.services.stats_service import get_dashboard_stats
from skilltrack.domains.skills.mappers import map_skill, map_skill_detail
from skilltrack.domains.skills.models.skill_models import Skill
from skilltrack.extensions import db


def get_public_skill_by_slug(slug: str) -> Optional[Skill]:
    """Public skill for ``slug``; each hit bumps its view counter."""
    skill = Skill.query.filter_by(public_slug=slug, visibility="public").first()
    if not skill:
        return None
    skill.view_count = (skill.view_count or 0) + 1
    db.session.commit()
    return skill


def get_skill_for_details(skill_id: int, viewer_id: Optional[int] = None) -> Optional[Skill]:
    """Skill visible to ``viewer_id``: always when owned, otherwise only when public."""
    skill = db.session.get(Skill, skill_id)
    if not skill:
        return None
    if skill.is_public or (viewer_id is not None and skill.user_id == viewer_id):
        return skill
    return None


def build_public_profile(username: str) -> Optional[dict]:
    """Compose a public profile honouring the owner's show_* switches."""
    settings = find_public_profile(username)
    if not settings:
        return None
    user = settings.user
    profile: dict = {
        "username": settings.public_username,
        "full_name": user.full_name,
        "job_title": user.job_title,
        "bio": user.bio,
    }
    if settings.show_skills:
        skills = (
            Skill.query.filter_by(user_id=user.id, visibility="public")
            .order_by(Skill.created_at.desc())
            .all()
        )
        if settings.show_goals:
            profile["skills"] = [
                map_skill_detail(s).model_dump(mode="json") for s in skills
            ]
        else:
            profile["skills"] = [map_skill(s).model_dump(mode="json") for s in skills]
        if not settings.show_progress:
            for item in profile["skills"]:
                item.pop("mastery_percentage", None)
                item.pop("total_hours_logged", None)
    if settings.show_statistics:
        profile["statistics"] = map_dashboard(get_dashboard_stats(user.id)).model_dump(mode="json")
    return profile
