"""
Configuration et utilitaires partagés
"""

import os
import time
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
from pathlib import Path

# Charger .env
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# MongoDB
MONGO_URL = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
DB_NAME = os.environ.get('DB_NAME', 'prospect_tracker')

client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]

# Cloudinary (stockage des decks)
CLOUDINARY_CLOUD_NAME = os.environ.get('CLOUDINARY_CLOUD_NAME', '')
CLOUDINARY_API_KEY = os.environ.get('CLOUDINARY_API_KEY', '')
CLOUDINARY_API_SECRET = os.environ.get('CLOUDINARY_API_SECRET', '')
CLOUDINARY_TIMEOUT = int(os.environ.get('CLOUDINARY_TIMEOUT', '60'))
DECK_FOLDER = os.environ.get('DECK_FOLDER', 'decks')

CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')


# ==================== HELPERS ====================

def now_iso() -> str:
    """Retourne la date/heure actuelle en ISO"""
    return datetime.now(timezone.utc).isoformat()


def generate_opp_id() -> str:
    """Identifiant d'opportunité par défaut: OPP-<epoch millis>"""
    return f"OPP-{int(time.time() * 1000)}"
