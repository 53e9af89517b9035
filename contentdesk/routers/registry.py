"""Central router registry."""
from __future__ import annotations

from fastapi import FastAPI

from contentdesk.routers.clients import router as clients_router
from contentdesk.routers.dashboard import router as dashboard_router
from contentdesk.routers.invoices import router as invoices_router
from contentdesk.routers.projects import router as projects_router
from contentdesk.routers.tasks import router as tasks_router
from contentdesk.routers.users import router as users_router

ALL_ROUTERS = (
    clients_router,
    projects_router,
    tasks_router,
    invoices_router,
    dashboard_router,
    users_router,
)


def include_all_routers(app: FastAPI) -> None:
    for router in ALL_ROUTERS:
        app.include_router(router)
