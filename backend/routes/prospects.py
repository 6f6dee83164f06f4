"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  Prospect Tracker - Routes Prospects                                         ║
║                                                                              ║
║  CRUD des fiches prospect + deck Cloudinary + export Excel + graphiques      ║
║  Create / update acceptent multipart/form-data (champ fichier "deck") ou JSON║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import Dict, Optional, Tuple

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from starlette.datastructures import UploadFile

from config import db
from models import (
    ProspectResponse,
    ProspectListResponse,
    ChartResponse,
    MessageResponse,
)
from services.errors import ProspectError, ProspectNotFound, NoRecordsFound
from services.deck_storage import store_deck, replace_deck, destroy_deck
from services.prospect_fields import build_prospect, merge_prospect
from services.prospect_query import (
    build_filter,
    parse_positive_int,
    DEFAULT_PAGE,
    DEFAULT_LIMIT,
)
from services.excel_export import export_prospects_xlsx, EXPORT_FILENAME, XLSX_MEDIA_TYPE
from services.chart_data import category_geo_chart, category_month_chart

logger = logging.getLogger("prospects")

router = APIRouter(prefix="/prospect-details", tags=["Prospects"])

DECK_FIELD = "deck"


# ==================== HELPERS ====================

async def read_submission(request: Request) -> Tuple[Dict, Optional[UploadFile]]:
    """
    Read a create/update payload.

    Multipart keys sent several times are kept as lists, the field
    normalizer picks the first value. Returns (body, deck file or None).
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        body = {}
        deck = None
        for key in form.keys():
            values = form.getlist(key)
            if key == DECK_FIELD and isinstance(values[0], UploadFile):
                if values[0].filename:
                    deck = values[0]
                continue
            values = [v for v in values if not isinstance(v, UploadFile)]
            if values:
                body[key] = values[0] if len(values) == 1 else values
        return body, deck

    if "json" in content_type:
        payload = await request.json()
        return (payload if isinstance(payload, dict) else {}), None

    return {}, None


async def find_prospect(prospect_id: str) -> Dict:
    prospect = await db.prospect_details.find_one({"id": prospect_id}, {"_id": 0})
    if not prospect:
        raise ProspectNotFound()
    return prospect


# ==================== CRUD ====================

@router.post("", status_code=201, response_model=ProspectResponse)
async def create_prospect(request: Request):
    """Crée une fiche prospect, avec upload du deck si un fichier est joint"""
    try:
        body, deck_file = await read_submission(request)
        deck = await store_deck(deck_file) if deck_file else None

        doc = build_prospect(body, deck)
        await db.prospect_details.insert_one(doc)
    except Exception as e:
        logger.exception(f"createProspect error: {str(e)}")
        raise ProspectError() from e

    doc.pop("_id", None)
    logger.info(f"Prospect created: {doc['id']} ({doc['prospect']}), oppId={doc['oppId']}")
    return {"success": True, "data": doc}


@router.get("", response_model=ProspectListResponse)
async def list_prospects(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    search: str = "",
    geo: Optional[str] = None,
    month: Optional[str] = None,
    quarter: Optional[str] = None,
    rag: Optional[str] = None,
):
    """
    Liste paginée des prospects, plus récents d'abord

    - search: recherche insensible à la casse sur le nom du prospect
    - geo, month, quarter, rag: filtres exacts
    """
    page_num = parse_positive_int(page, DEFAULT_PAGE)
    limit_num = parse_positive_int(limit, DEFAULT_LIMIT)
    skip = (page_num - 1) * limit_num

    query = build_filter(search, geo, month, quarter, rag)

    items = await db.prospect_details.find(query, {"_id": 0}) \
        .sort("createdAt", -1) \
        .skip(skip) \
        .limit(limit_num) \
        .to_list(limit_num)
    total = await db.prospect_details.count_documents(query)

    return {
        "success": True,
        "data": items,
        "meta": {"page": page_num, "limit": limit_num, "total": total},
    }


@router.get("/download")
async def download_prospects(
    search: str = "",
    geo: Optional[str] = None,
    month: Optional[str] = None,
    quarter: Optional[str] = None,
    rag: Optional[str] = None,
):
    """Export Excel de tous les prospects correspondant aux filtres"""
    query = build_filter(search, geo, month, quarter, rag)
    items = await db.prospect_details.find(query, {"_id": 0}).sort("createdAt", -1).to_list(None)

    if not items:
        raise NoRecordsFound()

    buffer = export_prospects_xlsx(items)
    logger.info(f"Excel export: {len(items)} prospects")

    return StreamingResponse(
        buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


# ==================== GRAPHIQUES ====================

@router.get("/chart/category-geo", response_model=ChartResponse, response_model_exclude_none=True)
async def get_category_geo_chart():
    return await category_geo_chart()


@router.get("/chart/category-month", response_model=ChartResponse, response_model_exclude_none=True)
async def get_category_month_chart():
    return await category_month_chart()


# ==================== PAR ID ====================

@router.get("/{prospect_id}", response_model=ProspectResponse)
async def get_prospect(prospect_id: str):
    return {"success": True, "data": await find_prospect(prospect_id)}


@router.api_route("/{prospect_id}", methods=["PUT", "PATCH"], response_model=ProspectResponse)
async def update_prospect(prospect_id: str, request: Request):
    """
    Mise à jour partielle

    Un champ vide ou absent conserve la valeur existante. oppId n'est
    jamais modifié. Un nouveau deck remplace l'ancien (supprimé côté
    Cloudinary en best-effort).
    """
    existing = await find_prospect(prospect_id)

    try:
        body, deck_file = await read_submission(request)
        deck = await replace_deck(existing.get("deckPublicId"), deck_file) if deck_file else None

        update = merge_prospect(body, existing, deck)
        await db.prospect_details.update_one({"id": prospect_id}, {"$set": update})
        updated = await db.prospect_details.find_one({"id": prospect_id}, {"_id": 0})
    except Exception as e:
        logger.exception(f"updateProspect error: {str(e)}")
        raise ProspectError() from e

    if not updated:
        raise ProspectNotFound()

    logger.info(f"Prospect updated: {prospect_id}")
    return {"success": True, "data": updated}


@router.delete("/{prospect_id}", response_model=MessageResponse)
async def delete_prospect(prospect_id: str):
    """Supprime un prospect; le deck distant est supprimé d'abord (best-effort)"""
    prospect = await find_prospect(prospect_id)

    if prospect.get("deckPublicId"):
        await destroy_deck(prospect["deckPublicId"])

    await db.prospect_details.delete_one({"id": prospect_id})
    logger.info(f"Prospect deleted: {prospect_id}")

    return {"success": True, "message": "Deleted successfully"}
