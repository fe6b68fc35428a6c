from fastapi import FastAPI, HTTPException
from cloud_ide.api.v1 import (
    ai,
    auth,
    collaboration,
    file,
    folder,
    user,
)
from cloud_ide.core.config import settings
from cloud_ide.core.database import engine, Base
from cloud_ide.core.errors import register_exception_handlers
import cloud_ide.models  # noqa: F401  registers every table on Base.metadata
import logging
import time
from fastapi.middleware.cors import CORSMiddleware


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Cloud IDE API", version="1.0.0")

# Include routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["authentication"])
app.include_router(user.router, prefix="/api/v1/user", tags=["user"])
app.include_router(folder.router, prefix="/api/v1/folders", tags=["folders"])
app.include_router(file.router, prefix="/api/v1/files", tags=["files"])
app.include_router(
    collaboration.router, prefix="/api/v1/collaboration", tags=["collaboration"]
)
app.include_router(ai.router, prefix="/api/v1/ai", tags=["ai assistant"])

register_exception_handlers(app)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_url or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    # Wait for database to be ready and create tables
    max_retries = 30
    retry_count = 0

    while retry_count < max_retries:
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created successfully")
            break
        except Exception as e:
            retry_count += 1
            logger.warning(
                f"Database connection attempt {retry_count} failed: {str(e)}"
            )
            if retry_count >= max_retries:
                logger.error("Max retries reached. Could not connect to database.")
                raise e
            time.sleep(2)


@app.get("/")
def read_root():
    return {"message": "Cloud IDE API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    try:
        # Check database connection
        from sqlalchemy import text

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Database unhealthy: {str(e)}")
