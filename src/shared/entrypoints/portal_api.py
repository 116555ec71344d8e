"""
Clinic Portal API - mounts the case, directory and supplies routers.
"""
from datetime import datetime, timezone
import logging

import uvicorn
from fastapi import FastAPI
from sqlalchemy import create_engine

import config
from shared.adapters import orm
from case.entrypoints.case_api import router as case_router
from directory.entrypoints.directory_api import router as directory_router
from supplies.entrypoints.supplies_api import router as supplies_router

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Clinic Portal API",
    description="Requisitions, case status, reports and supply orders for partner clinics",
    version="1.0.0"
)

app.include_router(case_router)
app.include_router(directory_router)
app.include_router(supplies_router)


# Initialize database and ORM mappers (Cosmic Python pattern)
@app.on_event("startup")
async def startup_event():
    engine = create_engine(config.get_postgres_uri())
    orm.start_mappers()
    orm.metadata.create_all(engine)
    logger.info("Portal database initialized")


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "clinic-portal-api",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


def main():
    uvicorn.run(app, **config.get_api_host_and_port())


if __name__ == "__main__":
    main()
