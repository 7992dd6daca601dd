from __future__ import annotations
import html
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Dict, Any, List

import requests

from utils.logging_config import get_logger
from utils.supabase_utils import get_supabase_client

logger = get_logger(__name__)

NEWS_TABLE = "latest_medical_news"
FEEDS = [
    {"name": "The Lancet", "url": "https://www.thelancet.com/rssfeed/lancet_current.xml"},
    {"name": "WHO", "url": "https://www.who.int/rss-feeds/news-english.xml"},
]
SNIPPET_LEN = 300
KEEP_DAYS = 3

_TAG_RE = re.compile(r"<[^>]+>")


def _local(tag: str) -> str:
    # "{namespace}item" -> "item"
    return tag.rsplit("}", 1)[-1]


def _child_text(el: ET.Element, *names: str) -> Optional[str]:
    for child in el:
        if _local(child.tag) in names and (child.text or "").strip():
            return child.text.strip()
    return None


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        dt = parsedate_to_datetime(value)  # RFC 822 (RSS 2.0 pubDate)
    except (TypeError, ValueError):
        dt = None
    if dt is None:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))  # dc:date / Atom
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def snippet(raw: Optional[str], limit: int = SNIPPET_LEN) -> Optional[str]:
    if not raw:
        return None
    text = html.unescape(_TAG_RE.sub(" ", raw))
    text = re.sub(r"\s+", " ", text).strip()
    return text[:limit] if text else None


def parse_feed(xml_text: str, source: str) -> List[Dict[str, Any]]:
    """RSS 2.0 / RSS 1.0 (RDF) / Atom -> rows for latest_medical_news (items without a link are dropped)."""
    root = ET.fromstring(xml_text)
    items: List[Dict[str, Any]] = []
    for el in root.iter():
        if _local(el.tag) not in ("item", "entry"):
            continue
        link = _child_text(el, "link")
        if not link:
            # Atom: <link href="..."/>
            for child in el:
                if _local(child.tag) == "link" and child.get("href"):
                    link = child.get("href")
                    break
        if not link:
            continue
        raw_date = _child_text(el, "pubDate", "date", "published", "updated")
        dt = _parse_date(raw_date)
        items.append(
            {
                "title": _child_text(el, "title"),
                "link": link,
                "pub_date": dt.isoformat() if dt else None,
                "iso_date": dt.isoformat().replace("+00:00", "Z") if dt else None,
                "content_snippet": snippet(_child_text(el, "description", "summary", "content", "encoded")),
                "source": source,
            }
        )
    return items


# -----------------------------
# Ingest
# -----------------------------
def fetch_feed(feed: Dict[str, str], *, session=None) -> List[Dict[str, Any]]:
    http = session or requests
    resp = http.get(feed["url"], timeout=15, headers={"User-Agent": "NucleAI-MedTools/1.0"})
    resp.raise_for_status()
    return parse_feed(resp.text, feed["name"])


def refresh_news(
    *,
    feeds: Optional[List[Dict[str, str]]] = None,
    session=None,
    sb=None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    all_items: List[Dict[str, Any]] = []
    failed: List[str] = []
    for feed in feeds or FEEDS:
        try:
            items = fetch_feed(feed, session=session)
        except (requests.RequestException, ET.ParseError) as e:
            logger.warning("feed %s failed: %s", feed["name"], e)
            failed.append(feed["name"])
            continue
        logger.info("feed %s: %d items", feed["name"], len(items))
        all_items.extend(items)

    if not all_items:
        return {"ok": True, "fetched": 0, "failed_feeds": failed, "pruned": False}

    sb = sb or get_supabase_client()
    sb.table(NEWS_TABLE).upsert(all_items, on_conflict="link", ignore_duplicates=True).execute()

    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=KEEP_DAYS)
    pruned = True
    try:
        sb.table(NEWS_TABLE).delete().lt("pub_date", cutoff.isoformat()).execute()
    except Exception as e:
        # the upsert already succeeded; stale rows go on the next run
        logger.warning("pruning old news failed: %s", e)
        pruned = False

    return {"ok": True, "fetched": len(all_items), "failed_feeds": failed, "pruned": pruned}


def list_latest_news(*, limit: int = 15, sb=None) -> List[Dict[str, Any]]:
    sb = sb or get_supabase_client()
    res = (
        sb.table(NEWS_TABLE)
        .select("*")
        .order("pub_date", desc=True, nullsfirst=False)
        .limit(limit)
        .execute()
    )
    return getattr(res, "data", []) or []
