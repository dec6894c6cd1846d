from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import db
from core.gateway import RecordGateway
from designs import router as designs_router

@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(designs_router.router, tags=["designs"])


@app.get("/health")
async def health(gateway: RecordGateway = Depends(db.get_gateway)) -> dict:
    database = await gateway.test_connection()
    return {"status": "ok" if database["connected"] else "error", "database": database}


@app.get("/")
def root() -> dict:
    return {"message": "apparel designs api"}
