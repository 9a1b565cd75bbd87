from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str


class CreatedResponse(BaseModel):
    id: str
    message: str


class DashboardStats(BaseModel):
    total_cl: int
    total_projects: int
    total_tasks: int
    tasks_by_status: dict[str, int]
    pending_approval: int
    active_users: int
