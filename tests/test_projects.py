"""
Project aggregate tests.

Tests cover:
  - Derived progress/team recomputation
  - Task lifecycle end to end
  - Project CRUD, validation failures and tenant isolation
  - Comment authorship rule
  - Output add/delete
"""
import pytest

from agrocoop.models.project import Project, Task, TaskStatus
from agrocoop.services import projects
from agrocoop.services.projects import recalculate_progress_and_team


def _task(status=TaskStatus.TODO, assigned_to=("a",)):
    return Task(title="Some task", status=status, assigned_to=list(assigned_to))


def _reload(db, project_id) -> Project:
    db.expire_all()
    return db.get(Project, project_id)


# ═══════════════════════════════════════════════════════════════
# BLOCK 1: Derived fields
# ═══════════════════════════════════════════════════════════════

class TestRecalculate:
    def test_empty_task_list(self):
        assert recalculate_progress_and_team([]) == (0, [])

    @pytest.mark.parametrize("completed,total,expected", [
        (0, 3, 0),
        (1, 3, 33),
        (2, 3, 67),
        (1, 2, 50),
        (1, 8, 13),   # 12.5 rounds half up
        (3, 8, 38),   # 37.5 rounds half up
        (4, 4, 100),
    ])
    def test_progress_rounding(self, completed, total, expected):
        tasks = [_task(TaskStatus.COMPLETED) for _ in range(completed)]
        tasks += [_task(TaskStatus.IN_PROGRESS) for _ in range(total - completed)]
        progress, _ = recalculate_progress_and_team(tasks)
        assert progress == expected

    def test_team_is_deduplicated_union_in_first_seen_order(self):
        tasks = [_task(assigned_to=["b", "a"]), _task(assigned_to=["a", "c"]), _task(assigned_to=["b"])]
        _, team = recalculate_progress_and_team(tasks)
        assert team == ["b", "a", "c"]


# ═══════════════════════════════════════════════════════════════
# BLOCK 2: Task lifecycle
# ═══════════════════════════════════════════════════════════════

class TestTaskLifecycle:
    def test_full_lifecycle(self, db, pm, u1, u2, project_id):
        project = _reload(db, project_id)
        assert (project.progress, project.team) == (0, [])

        res_a = projects.add_task(db, pm, {"project_id": project_id, "title": "Clear land", "assigned_to": [u1.id]})
        assert res_a.success
        project = _reload(db, project_id)
        assert (project.progress, project.team) == (0, [u1.id])

        res_b = projects.add_task(db, pm, {
            "project_id": project_id, "title": "Plant seed", "assigned_to": [u1.id, u2.id],
        })
        assert res_b.success
        project = _reload(db, project_id)
        assert (project.progress, project.team) == (0, [u1.id, u2.id])

        assert projects.update_task(db, pm, {
            "project_id": project_id, "task_id": res_a.task_id, "status": "Completed",
        }).success
        project = _reload(db, project_id)
        assert (project.progress, project.team) == (50, [u1.id, u2.id])

        assert projects.update_task(db, pm, {
            "project_id": project_id, "task_id": res_b.task_id, "status": "Completed",
        }).success
        project = _reload(db, project_id)
        assert (project.progress, project.team) == (100, [u1.id, u2.id])

        assert projects.delete_task(db, pm, {"project_id": project_id, "task_id": res_a.task_id}).success
        project = _reload(db, project_id)
        # Task B is still assigned to both members
        assert project.progress == 100
        assert project.team == [u1.id, u2.id]
        assert [t["id"] for t in project.tasks] == [res_b.task_id]

    def test_reassignment_shrinks_team(self, db, pm, u1, u2, project_id):
        res = projects.add_task(db, pm, {"project_id": project_id, "title": "Weeding", "assigned_to": [u1.id, u2.id]})
        projects.update_task(db, pm, {"project_id": project_id, "task_id": res.task_id, "assigned_to": [u2.id]})
        assert _reload(db, project_id).team == [u2.id]

    def test_assignee_may_update_own_task(self, db, pm, u1, project_id):
        res = projects.add_task(db, pm, {"project_id": project_id, "title": "Irrigate", "assigned_to": [u1.id]})
        result = projects.update_task(db, u1, {
            "project_id": project_id, "task_id": res.task_id, "status": "In Progress",
        })
        assert result.success
        assert _reload(db, project_id).tasks[0]["status"] == "In Progress"

    def test_non_assignee_member_cannot_update_task(self, db, pm, u1, u2, project_id):
        res = projects.add_task(db, pm, {"project_id": project_id, "title": "Irrigate", "assigned_to": [u1.id]})
        result = projects.update_task(db, u2, {
            "project_id": project_id, "task_id": res.task_id, "status": "Completed",
        })
        assert not result.success
        assert _reload(db, project_id).tasks[0]["status"] == "To Do"

    def test_member_cannot_add_task(self, db, u1, project_id):
        result = projects.add_task(db, u1, {"project_id": project_id, "title": "Harvest", "assigned_to": [u1.id]})
        assert not result.success
        assert _reload(db, project_id).tasks == []

    def test_task_validation(self, db, pm, project_id):
        result = projects.add_task(db, pm, {"project_id": project_id, "title": "ab", "assigned_to": []})
        assert not result.success
        assert result.error == "Validation failed."
        assert "title" in result.field_errors
        assert "assigned_to" in result.field_errors

    def test_null_task_fields_are_rejected(self, db, pm, u1, project_id):
        res = projects.add_task(db, pm, {"project_id": project_id, "title": "Irrigate", "assigned_to": [u1.id]})
        result = projects.update_task(db, pm, {
            "project_id": project_id, "task_id": res.task_id, "title": None, "assigned_to": None,
        })
        assert not result.success
        assert set(result.field_errors) == {"title", "assigned_to"}
        assert _reload(db, project_id).tasks[0]["title"] == "Irrigate"

    def test_unknown_task(self, db, pm, project_id):
        result = projects.delete_task(db, pm, {"project_id": project_id, "task_id": "missing"})
        assert not result.success
        assert result.error == "Task not found in project."


# ═══════════════════════════════════════════════════════════════
# BLOCK 3: Project root
# ═══════════════════════════════════════════════════════════════

class TestProjectRoot:
    def test_create_does_not_store_submitted_team(self, db, pm, u1, project_id):
        project = _reload(db, project_id)
        assert project.title == "Maize Expansion"
        assert project.team == []
        assert project.company_id == pm.company_id

    def test_null_for_required_field_is_a_field_error(self, db, pm, project_id):
        result = projects.update_project(db, pm, {"project_id": project_id, "title": None, "status": None})
        assert not result.success
        assert result.error == "Validation failed."
        assert set(result.field_errors) == {"title", "status"}
        assert _reload(db, project_id).title == "Maize Expansion"

    def test_deadline_can_be_cleared(self, db, pm, project_id):
        projects.update_project(db, pm, {"project_id": project_id, "deadline": "2026-12-01"})
        assert projects.update_project(db, pm, {"project_id": project_id, "deadline": None}).success
        assert _reload(db, project_id).deadline is None

    def test_create_requires_team(self, db, pm):
        result = projects.create_project(db, pm, {
            "title": "Cassava", "description": "Trial plot", "status": "Planning", "team": [],
        })
        assert not result.success
        assert "team" in result.field_errors

    def test_member_cannot_create(self, db, u1):
        result = projects.create_project(db, u1, {
            "title": "Cassava", "description": "Trial plot", "status": "Planning", "team": [u1.id],
        })
        assert not result.success

    def test_update_fields(self, db, pm, project_id):
        result = projects.update_project(db, pm, {
            "project_id": project_id, "status": "In Progress", "deadline": "2026-12-01",
        })
        assert result.success
        project = _reload(db, project_id)
        assert project.status == "In Progress"
        assert project.deadline == "2026-12-01"
        assert project.title == "Maize Expansion"

    def test_delete(self, db, admin, project_id):
        assert projects.delete_project(db, admin, {"project_id": project_id}).success
        assert _reload(db, project_id) is None

    def test_other_company_sees_not_found(self, db, outsider, project_id):
        result = projects.update_project(db, outsider, {"project_id": project_id, "title": "Hijacked"})
        assert not result.success
        assert result.error == "Project not found."
        assert projects.get_project(db, outsider, project_id) is None
        assert projects.list_projects(db, outsider) == []


# ═══════════════════════════════════════════════════════════════
# BLOCK 4: Comments & outputs
# ═══════════════════════════════════════════════════════════════

class TestComments:
    def test_author_can_delete(self, db, u1, project_id):
        res = projects.add_comment(db, u1, {"project_id": project_id, "comment_text": "Rain expected"})
        assert res.success
        comment = _reload(db, project_id).comments[0]
        assert comment["author_id"] == u1.id
        assert comment["author_name"] == "Esi Member"

        assert projects.delete_comment(db, u1, {"project_id": project_id, "comment_id": res.comment_id}).success
        assert _reload(db, project_id).comments == []

    def test_other_user_cannot_delete_even_admin(self, db, u1, admin, project_id):
        res = projects.add_comment(db, u1, {"project_id": project_id, "comment_text": "Rain expected"})
        before = _reload(db, project_id).comments

        result = projects.delete_comment(db, admin, {"project_id": project_id, "comment_id": res.comment_id})
        assert not result.success
        assert result.error == "You do not have permission to delete this comment."
        assert _reload(db, project_id).comments == before

    def test_empty_comment_rejected(self, db, u1, project_id):
        result = projects.add_comment(db, u1, {"project_id": project_id, "comment_text": ""})
        assert not result.success
        assert "comment_text" in result.field_errors


class TestOutputs:
    def test_add_then_delete_restores_outputs(self, db, u1, project_id):
        projects.add_output(db, u1, {"project_id": project_id, "description": "Maize", "quantity": 12, "unit": "bags"})
        before = _reload(db, project_id).outputs

        res = projects.add_output(db, u1, {
            "project_id": project_id, "description": "Cassava", "quantity": 2.5, "unit": "tonnes",
        })
        assert res.success
        assert len(_reload(db, project_id).outputs) == 2

        assert projects.delete_output(db, u1, {"project_id": project_id, "output_id": res.output_id}).success
        assert _reload(db, project_id).outputs == before

    def test_quantity_must_be_positive(self, db, u1, project_id):
        result = projects.add_output(db, u1, {
            "project_id": project_id, "description": "Maize", "quantity": 0, "unit": "bags",
        })
        assert not result.success
        assert "quantity" in result.field_errors

    def test_accountant_cannot_log_outputs(self, db, accountant, project_id):
        result = projects.add_output(db, accountant, {
            "project_id": project_id, "description": "Maize", "quantity": 1, "unit": "bags",
        })
        assert not result.success
