from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lms_backend.chat.router import router as chat_router
from lms_backend.config import CORS_ORIGINS, LOG_LEVEL
from lms_backend.contact.contact_router import router as contact_router
from lms_backend.courses.course_router import router as course_router
from lms_backend.database import close_client, create_indexes, get_db_instance
from lms_backend.enrollments.enrollment_router import router as enrollment_router
from lms_backend.errors import register_exception_handlers
from lms_backend.instructors.instructor_router import router as instructor_router
from lms_backend.logging_config import setup_logging
from lms_backend.profiles.profile_router import router as profile_router
from lms_backend.students.student_router import router as student_router
from lms_backend.system.health_router import router as health_router
from lms_backend.users.user_router import router as user_router

app = FastAPI(title="LMS Backend")


@app.on_event("startup")
async def startup_event():
    setup_logging(LOG_LEVEL)
    await create_indexes(get_db_instance())


@app.on_event("shutdown")
async def shutdown_event():
    close_client()


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ==================== ROUTER REGISTRATION ====================
app.include_router(student_router)
app.include_router(instructor_router)
app.include_router(course_router)
app.include_router(enrollment_router)
app.include_router(chat_router)
app.include_router(contact_router)
app.include_router(profile_router)
app.include_router(user_router)
app.include_router(health_router)
# ============================================================
