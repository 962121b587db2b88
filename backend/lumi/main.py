import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .db import init_db
from .errors import LumiError
from .settings import settings
from .routers import auth
from .routers import courses
from .routers import saved_courses
from .routers import users
from .routers import friends
from .routers import classes

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Lumi Study API")
app.include_router(auth.router)
app.include_router(courses.router)
app.include_router(saved_courses.router)
app.include_router(users.router)
app.include_router(friends.router)
app.include_router(classes.router)


@app.exception_handler(LumiError)
async def lumi_error_handler(request: Request, exc: LumiError):
	if exc.status_code >= 500:
		logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
	return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}


@app.on_event("startup")
async def startup_event():
	init_db()
