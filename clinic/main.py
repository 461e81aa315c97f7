from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinic.config import settings
from clinic.database import init_db
from clinic.routers import (
    admin,
    appointments,
    auth,
    billing,
    content,
    health,
    patients,
    portal,
    receptionist,
    treatment,
    users,
)
from clinic.services.scheduler import start_scheduler, stop_scheduler
from clinic.services.users import user_store

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    user_store.ensure_seed_admin()
    start_scheduler()
    try:
        yield
    finally:
        stop_scheduler()


app = FastAPI(title=f"{settings.clinic_name} API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (
    health,
    auth,
    users,
    admin,
    appointments,
    content,
    patients,
    billing,
    treatment,
    portal,
    receptionist,
):
    app.include_router(module.router, prefix="/api")


@app.get("/")
def root():
    return {"status": "Backend running"}
