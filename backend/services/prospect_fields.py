"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  Prospect Tracker - Normalisation et fusion des fiches prospect              ║
║                                                                              ║
║  RÈGLES:                                                                     ║
║  1. Tout champ texte est une chaîne, jamais None (liste -> 1er élément)      ║
║  2. category == "other" -> categoryOther devient la catégorie enregistrée    ║
║  3. En mise à jour, une valeur vide = "pas de changement"                    ║
║  4. oppId est fixé à la création et n'est jamais réécrit                     ║
║  5. deck et deckPublicId sont toujours écrits ensemble                       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import json
import uuid
from typing import Any, Dict, Mapping, Optional, Tuple

from config import now_iso, generate_opp_id
from services.deck_storage import DeckRef

OTHER_CATEGORY = "other"

CALL_SLOTS = ("call1", "call2", "call3")

# Champs texte libres, dans l'ordre du formulaire
TEXT_FIELDS = (
    "month",
    "quarter",
    "prospect",
    "geo",
    "lob",
    "coreOfferings",
    "primaryNeed",
    "secondaryNeed",
    "trace",
    "salesSpoc",
    "oppDetails",
    "rag",
    "remark",
)


# ==================== NORMALISATION ====================

def normalize_field(value: Any) -> str:
    """
    Force a single string out of whatever the client sent.

    Multipart forms may repeat a key, in which case the value arrives as a
    list: only the first element is kept.
    """
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return normalize_field(value[0] or "") if value else ""
    # JSON scalars render as in the form: true / false, 1 rather than 1.0
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def safe_parse_json(value: Any) -> Optional[Dict]:
    """Decode a JSON object sent as text; anything else gives None"""
    if not value:
        return None
    if isinstance(value, dict):
        return value
    if isinstance(value, (list, tuple)):
        value = value[0]
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _is_checked(value: Any) -> bool:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return value is True or value == "true"


def resolve_call(body: Mapping, slot: str, existing: Optional[Mapping] = None) -> Dict:
    """
    Build the {checked, notes} record of one call slot.

    The structured ``callN`` value wins when it parses. Otherwise the discrete
    ``callN_checked`` / ``callN_notes`` fields are used. On update, notes fall
    back to the stored ones but ``checked`` falls back to False.
    """
    structured = safe_parse_json(body.get(slot))
    if structured is not None:
        return {
            "checked": _is_checked(structured.get("checked")),
            "notes": normalize_field(structured.get("notes")),
        }

    notes_key = f"{slot}_notes"
    if notes_key in body and body[notes_key] is not None:
        notes = normalize_field(body[notes_key])
    elif existing is not None:
        notes = normalize_field((existing.get(slot) or {}).get("notes"))
    else:
        notes = ""

    return {
        "checked": _is_checked(body.get(f"{slot}_checked")),
        "notes": notes,
    }


def resolve_category(raw: str, other: str) -> Tuple[str, str]:
    """Returns (category, categoryOther) for a dropdown selection"""
    if raw == OTHER_CATEGORY:
        return other or "", other or ""
    return raw or "", ""


# ==================== CRÉATION ====================

def build_prospect(body: Mapping, deck: Optional[DeckRef] = None) -> Dict:
    """Assemble a new prospect document, ready for insert_one"""
    category, category_other = resolve_category(
        normalize_field(body.get("category")),
        normalize_field(body.get("categoryOther")),
    )
    now = now_iso()

    doc = {"id": str(uuid.uuid4())}
    for field in TEXT_FIELDS:
        doc[field] = normalize_field(body.get(field))
    for slot in CALL_SLOTS:
        doc[slot] = resolve_call(body, slot)

    doc.update({
        "category": category,
        "categoryOther": category_other,
        "oppId": normalize_field(body.get("oppId")) or generate_opp_id(),
        "deck": deck.url if deck else "",
        "deckPublicId": deck.public_id if deck else "",
        "createdAt": now,
        "updatedAt": now,
    })
    return doc


# ==================== MISE À JOUR ====================

def merge_prospect(body: Mapping, existing: Mapping, deck: Optional[DeckRef] = None) -> Dict:
    """
    Compute the $set document of a partial update.

    A submitted text field only replaces the stored one when it is non-empty.
    The category pair is recomputed only when a selection is submitted.
    """
    update = {}
    for field in TEXT_FIELDS:
        update[field] = normalize_field(body.get(field)) or existing.get(field) or ""
    for slot in CALL_SLOTS:
        update[slot] = resolve_call(body, slot, existing)

    category_raw = normalize_field(body.get("category"))
    if category_raw:
        category, category_other = resolve_category(
            category_raw, normalize_field(body.get("categoryOther"))
        )
    else:
        category = existing.get("category") or ""
        category_other = existing.get("categoryOther") or ""

    if deck is None:
        deck = DeckRef(existing.get("deck") or "", existing.get("deckPublicId") or "")

    update.update({
        "category": category,
        "categoryOther": category_other,
        "oppId": existing.get("oppId") or "",
        "deck": deck.url,
        "deckPublicId": deck.public_id,
        "updatedAt": now_iso(),
    })
    return update
