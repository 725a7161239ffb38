"""
Activity feed and global search tests.
"""
from datetime import datetime, timedelta, timezone

from agrocoop.core.config import settings
from agrocoop.models.activity import ActivityLog
from agrocoop.services import projects
from agrocoop.services.activity import list_recent_activity, log_activity
from agrocoop.services.search import global_search


class TestActivityFeed:
    def test_actions_are_logged(self, db, pm, u1, project_id):
        projects.add_task(db, pm, {"project_id": project_id, "title": "Plough", "assigned_to": [u1.id]})
        messages = [entry.message for entry in list_recent_activity(db, pm.company_id)]
        assert 'Kofi Manager added task "Plough" to project "Maize Expansion".' in messages
        assert 'Kofi Manager created a new project: "Maize Expansion".' in messages

    def test_failed_action_is_not_logged(self, db, u1, project_id):
        before = len(list_recent_activity(db, u1.company_id))
        projects.add_task(db, u1, {"project_id": project_id, "title": "Plough", "assigned_to": [u1.id]})
        assert len(list_recent_activity(db, u1.company_id)) == before

    def test_feed_is_newest_first_and_limited(self, db, company, other_company):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        for i in range(settings.ACTIVITY_FEED_LIMIT + 5):
            db.add(ActivityLog(
                company_id=company.id,
                message=f"entry {i}",
                timestamp=(start + timedelta(minutes=i)).isoformat(),
            ))
        db.add(ActivityLog(company_id=other_company.id, message="elsewhere"))
        db.commit()

        feed = list_recent_activity(db, company.id)
        assert len(feed) == settings.ACTIVITY_FEED_LIMIT
        assert feed[0].message == f"entry {settings.ACTIVITY_FEED_LIMIT + 4}"
        assert "elsewhere" not in [entry.message for entry in feed]

    def test_missing_company_is_ignored(self, db):
        log_activity(db, None, "orphan")
        log_activity(db, "c-1", "")
        assert list_recent_activity(db, "c-1") == []


class TestGlobalSearch:
    def test_matches_across_groups_case_insensitive(self, db, pm, u1, seed, project_id):
        results = global_search(db, pm, "MAIZE")
        assert [hit.id for hit in results.projects] == [project_id]
        assert [hit.name for hit in results.resources] == ["Maize Seed"]
        assert results.members == []

        members = global_search(db, pm, "member")
        assert [hit.id for hit in members.members] == [u1.id]

    def test_blank_query(self, db, pm, project_id):
        results = global_search(db, pm, "   ")
        assert results.projects == [] and results.members == [] and results.resources == []

    def test_wildcards_match_literally(self, db, pm, u1, seed, project_id):
        assert global_search(db, pm, "_").projects == []
        assert global_search(db, pm, "%").members == []

        projects.create_project(db, pm, {
            "title": "Plot_7 Beans", "description": "Trial", "status": "Planning", "team": [pm.id],
        })
        results = global_search(db, pm, "_")
        assert [hit.name for hit in results.projects] == ["Plot_7 Beans"]
        assert results.members == [] and results.resources == []

    def test_scoped_to_company(self, db, outsider, seed, project_id):
        results = global_search(db, outsider, "maize")
        assert results.projects == [] and results.resources == []

    def test_result_limit(self, db, pm):
        for i in range(settings.SEARCH_RESULT_LIMIT + 3):
            projects.create_project(db, pm, {
                "title": f"Field {i}", "description": "Plot", "status": "Planning", "team": [pm.id],
            })
        assert len(global_search(db, pm, "field").projects) == settings.SEARCH_RESULT_LIMIT
