import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from huddle.auth.router import router as auth_router
from huddle.meetings.router import router as meetings_router
from huddle.groups.router import router as groups_router
from huddle.calendar.router import router as calendar_router
from huddle.core.db import init_db
from huddle.scheduler.reminder import start_scheduler, stop_scheduler

logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Huddle - Meeting Coordination")

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Database ---
@app.on_event("startup")
def on_startup():
    init_db()

    # Start meeting reminder scheduler
    start_scheduler()
    logging.info("⏰ Meeting reminder scheduler started...")


@app.on_event("shutdown")
def on_shutdown():
    stop_scheduler()


# --- Routers ---
app.include_router(auth_router, prefix="/auth", tags=["Auth"])
app.include_router(meetings_router, tags=["Meetings"])
app.include_router(groups_router, tags=["Groups"])
app.include_router(calendar_router, tags=["Calendar"])
