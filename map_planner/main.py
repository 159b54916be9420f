# map_planner/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from map_planner.api.errors import register_error_handlers
from map_planner.api.places import router as places_router

app = FastAPI(
    title="Map Planner Agent Backend",
    version="0.1.0",
)

# Allow frontend to call backend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(places_router, prefix="/api")
