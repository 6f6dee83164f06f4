"""
Prospect Tracker - API Backend

Démarre avec:
    uvicorn server:app --host 0.0.0.0 --port 8001 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from config import db, client, CORS_ORIGINS
from services.errors import ProspectError

# Configuration logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("prospect_tracker")

# Créer l'app
app = FastAPI(
    title="Prospect Tracker",
    description="Suivi des prospects commerciaux: fiches, decks, export Excel, graphiques",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== ERREURS ====================

@app.exception_handler(ProspectError)
async def prospect_error_handler(request: Request, exc: ProspectError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Server error"},
    )


# ==================== IMPORT DES ROUTES ====================

from routes import prospects

# Routes avec préfixe /api
app.include_router(prospects.router, prefix="/api")


# ==================== ROUTE RACINE ====================

@app.get("/")
async def root():
    return {
        "name": "Prospect Tracker API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }


# ==================== STARTUP / SHUTDOWN ====================

@app.on_event("startup")
async def startup():
    logger.info("Prospect Tracker démarré")

    # Créer les index MongoDB
    await db.prospect_details.create_index("id", unique=True)
    await db.prospect_details.create_index("createdAt")
    await db.prospect_details.create_index("prospect")
    await db.prospect_details.create_index("geo")
    await db.prospect_details.create_index("month")
    await db.prospect_details.create_index("quarter")
    await db.prospect_details.create_index("rag")

    logger.info("Index MongoDB créés")


@app.on_event("shutdown")
async def shutdown_db_client():
    client.close()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
