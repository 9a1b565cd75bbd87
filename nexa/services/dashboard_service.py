from collections import Counter

from nexa.models.common import DashboardStats
from nexa.models.task import TaskStatus
from nexa.repositories.base import Repository


class DashboardService:
    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    def get_stats(self) -> DashboardStats:
        projects = self.repository.list_projects()
        live_project_ids = {p["id"] for p in projects}
        tasks = [t for t in self.repository.list_tasks() if t["project_id"] in live_project_ids]
        by_status = Counter(t["status"] for t in tasks)

        return DashboardStats(
            total_cl=len(self.repository.list_clients(active_only=True)),
            total_projects=len(projects),
            total_tasks=len(tasks),
            tasks_by_status={s.value: by_status.get(s.value, 0) for s in TaskStatus},
            pending_approval=by_status.get(TaskStatus.COMPLETADA.value, 0),
            active_users=sum(1 for u in self.repository.list_users() if u.get("active")),
        )
