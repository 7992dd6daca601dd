# src/tools/openfda.py
"""
OpenFDA drug labels: single-drug reference lookup (with Gemini filling
missing sections) and the RxNorm + label-text interaction checker.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

import requests

from agents.prompts import DRUG_FIELD_PROMPT
from tools import gemini_client
from tools.medical_schema import Interaction
from utils.errors import BadRequest, NotFound, UpstreamError
from utils.logging_config import get_logger
from utils.supabase_utils import get_gemini_api_key

logger = get_logger(__name__)

LABEL_URL = "https://api.fda.gov/drug/label.json"
RXNORM_URL = "https://rxnav.nlm.nih.gov/REST"
SUPPLEMENT_MODEL = "gemini-1.5-flash"

FIELDS_TO_SUPPLEMENT = (
    "indications_and_usage",
    "boxed_warning",
    "mechanism_of_action",
    "contraindications",
    "dosage_forms_and_strengths",
    "adverse_reactions",
)
FIELD_DESCRIPTIONS = {
    "indications_and_usage": "indications and usage",
    "boxed_warning": "boxed warning (if any)",
    "mechanism_of_action": "mechanism of action",
    "contraindications": "contraindications",
    "dosage_forms_and_strengths": "dosage forms and strengths",
    "adverse_reactions": "common adverse reactions",
}

_LUCENE_SPECIAL = re.compile(r'([\+\-\&\|\!\(\)\{\}\[\]\^"~\*\?:\\\/\s])')


def escape_lucene(text: str) -> str:
    return _LUCENE_SPECIAL.sub(r"\\\1", text)


def _error_message(resp) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP error {resp.status_code}"
    err = body.get("error") if isinstance(body, dict) else None
    return (err or {}).get("message") or f"HTTP error {resp.status_code}"


# ---- Drug reference ------------------------------------------------------------

def ai_supplement(drug: str, field: str) -> Optional[str]:
    """Ask Gemini for one label section; None when the call fails or is empty."""
    description = FIELD_DESCRIPTIONS.get(field, field.replace("_", " "))
    prompt = DRUG_FIELD_PROMPT.format(description=description, drug=drug)
    try:
        reply = gemini_client.generate(prompt, model=SUPPLEMENT_MODEL)
    except UpstreamError as e:
        logger.warning("AI supplement for %s/%s failed: %s", drug, field, e)
        return None
    return reply.text.strip() or None


def search_drug(term: Optional[str], *, session=None, use_ai: Optional[bool] = None) -> Dict[str, Any]:
    if not term or not term.strip():
        raise BadRequest("Missing search term")
    name = quote(term.strip())
    url = f'{LABEL_URL}?search=openfda.brand_name:"{name}"+openfda.generic_name:"{name}"&limit=1'

    http = session or requests
    logger.info("openfda label lookup term=%s", term)
    try:
        resp = http.get(url, timeout=20)
    except requests.RequestException as e:
        raise UpstreamError(f"OpenFDA API Error: {e}") from e

    # OpenFDA answers "no matches" with a 404
    if resp.status_code == 404:
        raise NotFound("No results found")
    if not resp.ok:
        raise UpstreamError(f"OpenFDA API Error: {_error_message(resp)}", status_code=resp.status_code)

    results = (resp.json() or {}).get("results") or []
    if not results:
        raise NotFound("No results found")

    label = dict(results[0])
    openfda = label.get("openfda") or {}
    drug = (openfda.get("brand_name") or [None])[0] or (openfda.get("generic_name") or [None])[0] or term.strip()
    if use_ai is None:
        use_ai = bool(get_gemini_api_key(required=False))

    for field in FIELDS_TO_SUPPLEMENT:
        values = label.get(field) or []
        fda_text = values[0] if values else None
        if fda_text and str(fda_text).strip():
            label[field] = [{"text": fda_text, "source": "fda"}]
        elif use_ai:
            text = ai_supplement(drug, field)
            label[field] = [
                {"text": text, "source": "ai"} if text
                else {"text": "Information not available from FDA or AI.", "source": "unavailable"}
            ]
        else:
            label[field] = [{"text": "Information not available from FDA.", "source": "unavailable"}]

    label["openfda"] = {
        k: [{"text": v, "source": "fda"} for v in vals] if isinstance(vals, list) else vals
        for k, vals in openfda.items()
    }
    return label


# ---- Interaction checker ---------------------------------------------------------

def clean_drug_list(drugs: Any) -> List[str]:
    if not isinstance(drugs, list) or len(drugs) < 2:
        raise BadRequest('Please provide an array of at least two drug names in the "drugs" field.')
    valid = [str(d).strip() for d in drugs if d is not None and str(d).strip()]
    if len(valid) < 2:
        raise BadRequest("Please provide at least two non-empty drug names.")
    return valid


def get_rxcuis(names: Iterable[str], *, session=None) -> Dict[str, Optional[str]]:
    http = session or requests
    out: Dict[str, Optional[str]] = {}
    for name in names:
        try:
            resp = http.get(
                f"{RXNORM_URL}/approximateTerm.json",
                params={"term": name, "maxEntries": 1},
                timeout=15,
            )
            if not resp.ok:
                logger.warning("RxNorm %s for %r", resp.status_code, name)
                out[name] = None
                continue
            candidates = ((resp.json() or {}).get("approximateGroup") or {}).get("candidate") or []
            out[name] = candidates[0].get("rxcui") if candidates else None
        except (requests.RequestException, ValueError) as e:
            logger.warning("RxNorm lookup failed for %r: %s", name, e)
            out[name] = None
    return out


def build_label_query(rxcuis: List[str], names: List[str]) -> str:
    parts = [f'openfda.rxcui:"{c}"' for c in rxcuis]
    for n in names:
        esc = escape_lucene(n)
        parts.append(f'(openfda.generic_name:"{esc}" OR openfda.brand_name:"{esc}")')
    return "+OR+".join(parts)


def fetch_interaction_labels(rxcuis: List[str], names: List[str], *, session=None) -> List[Dict[str, Any]]:
    query = build_label_query(rxcuis, names)
    if not query:
        return []
    http = session or requests
    try:
        resp = http.get(f"{LABEL_URL}?search=({query})&limit=200", timeout=30)
    except requests.RequestException as e:
        raise UpstreamError(f"OpenFDA API Error: {e}") from e
    if resp.status_code == 404:
        return []
    if not resp.ok:
        raise UpstreamError(f"OpenFDA API Error: {_error_message(resp)}")
    return (resp.json() or {}).get("results") or []


def parse_interactions(
    labels: List[Dict[str, Any]],
    rxcui_map: Dict[str, Optional[str]],
    names: List[str],
) -> List[Interaction]:
    """Pairs of input drugs where one drug's label mentions the other in its interactions section."""
    name_by_rxcui = {c: n for n, c in rxcui_map.items() if c}
    found: List[Interaction] = []
    seen = set()

    for label in labels:
        raw_sections = label.get("drug_interactions") or []
        full_text = " ".join(raw_sections)
        text_lower = full_text.lower()
        if not text_lower:
            continue
        openfda = label.get("openfda") or {}
        brands = {b.lower() for b in openfda.get("brand_name") or []}
        generics = {g.lower() for g in openfda.get("generic_name") or []}

        owners: List[str] = []
        for c in openfda.get("rxcui") or []:
            n = name_by_rxcui.get(c)
            if n and n not in owners:
                owners.append(n)
        for n in names:
            if n not in owners and (n.lower() in brands or n.lower() in generics):
                owners.append(n)
        if not owners:
            continue

        for other in names:
            if other in owners or other.lower() not in text_lower:
                continue
            for owner in owners:
                pair = tuple(sorted([owner, other]))
                if pair in seen:
                    continue
                seen.add(pair)
                found.append(
                    Interaction(
                        pair=list(pair),
                        severity="Unknown",
                        description=f'Interaction mentioned in the labeling for {owner}. Full text: "{full_text}"',
                    )
                )
    return found


def check_interactions(drugs: Any, *, session=None) -> Dict[str, Any]:
    names = clean_drug_list(drugs)
    logger.info("interaction check for %s", names)
    rxcui_map = get_rxcuis(names, session=session)
    rxcuis = [c for c in rxcui_map.values() if c]
    labels = fetch_interaction_labels(rxcuis, names, session=session)
    interactions = parse_interactions(labels, rxcui_map, names)
    return {"interactions": [i.model_dump() for i in interactions]}
