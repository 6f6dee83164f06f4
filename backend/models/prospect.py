"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  Prospect Tracker - Modèle Prospect                                          ║
║                                                                              ║
║  RÈGLES:                                                                     ║
║  1. Tous les champs texte valent "" par défaut, jamais null                  ║
║  2. oppId est immuable après création                                        ║
║  3. deck / deckPublicId vont toujours ensemble                               ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict


class CallRecord(BaseModel):
    """Un point de contact (appel) avec le prospect"""
    checked: bool = False
    notes: str = ""


class ProspectDocument(BaseModel):
    """
    Structure complète d'une fiche prospect en base
    """
    model_config = ConfigDict(extra="ignore")  # Ignore MongoDB's _id field

    id: str

    # Classification
    month: str = ""
    quarter: str = ""
    geo: str = ""
    lob: str = ""
    category: str = ""
    categoryOther: str = ""
    rag: str = ""  # Red / Amber / Green

    # Description
    prospect: str = ""
    coreOfferings: str = ""
    primaryNeed: str = ""
    secondaryNeed: str = ""
    trace: str = ""
    salesSpoc: str = ""
    oppId: str = ""
    oppDetails: str = ""
    remark: str = ""

    # Appels
    call1: CallRecord = CallRecord()
    call2: CallRecord = CallRecord()
    call3: CallRecord = CallRecord()

    # Deck (Cloudinary)
    deck: str = ""
    deckPublicId: str = ""

    # Meta
    createdAt: str = ""
    updatedAt: str = ""


class ProspectResponse(BaseModel):
    success: bool = True
    data: ProspectDocument


class ListMeta(BaseModel):
    page: int
    limit: int
    total: int


class ProspectListResponse(BaseModel):
    success: bool = True
    data: List[ProspectDocument]
    meta: ListMeta


class ChartResponse(BaseModel):
    """Pivot prêt à afficher: une série par label, alignée sur xAxis"""
    success: bool = True
    xAxis: List[str] = []
    seriesLabels: List[str] = []
    data: Dict[str, List[int]] = {}
    filterNames: Optional[List[str]] = None


class MessageResponse(BaseModel):
    success: bool
    message: str
