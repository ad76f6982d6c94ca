from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice.src import schemas
from backoffice.src.constants import API_TITLE, API_VERSION
from backoffice.api.controller import app_admin


app = FastAPI(title=API_TITLE, version=API_VERSION)

origins = ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/api", app_admin, "Admin API")


# Health check endpoint
@app.get("/health", tags=["Health Check"], response_model=schemas.HealthStatus)
async def health_check():
    return {"status": "OK", "version": API_VERSION}
