from contextlib import asynccontextmanager
from fastapi import FastAPI
from castgraph.db.graph_state import close_store, get_store

# Routers
from castgraph.api.routers.actors import router as actors_router
from castgraph.api.routers.movies import router as movies_router
from castgraph.api.routers.graph import router as graph_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the graph snapshot on startup; release (and maybe save) it on shutdown."""
    get_store()
    try:
        yield
    finally:
        close_store()


app = FastAPI(title="Castgraph", version="0.1", lifespan=lifespan)

app.include_router(actors_router)
app.include_router(movies_router)
app.include_router(graph_router)
