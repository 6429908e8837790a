from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hr_portal.api.routers.analytics import router as analytics_router
from hr_portal.api.routers.auth import router as auth_router
from hr_portal.api.routers.chat import router as chat_router
from hr_portal.api.routers.departments import router as departments_router
from hr_portal.api.routers.departments import succession_router
from hr_portal.api.routers.documents import router as documents_router
from hr_portal.api.routers.employees import router as employees_router
from hr_portal.api.routers.expenses import router as expenses_router
from hr_portal.api.routers.leave import router as leave_router
from hr_portal.api.routers.notifications import router as notifications_router
from hr_portal.api.routers.roles import router as roles_router
from hr_portal.core.config import settings
from hr_portal.core.logging import configure_logging

configure_logging()

app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description=(
        "HR workflow backend: role permissions, leave and expense approvals, "
        "role promotions, department succession, document uploads and chat."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def health() -> dict[str, str]:
    return {"status": "ok", "service": settings.app_name}


app.include_router(auth_router)
app.include_router(employees_router)
app.include_router(departments_router)
app.include_router(succession_router)
app.include_router(leave_router)
app.include_router(expenses_router)
app.include_router(roles_router)
app.include_router(documents_router)
app.include_router(notifications_router)
app.include_router(analytics_router)
app.include_router(chat_router)
