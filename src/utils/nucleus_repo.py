from __future__ import annotations
import math
import re
from typing import Optional, Dict, Any, List, Union

from utils.errors import BadRequest, NotFound
from utils.logging_config import get_logger
from utils.supabase_utils import get_supabase_client
from utils.turnstile import verify_turnstile

logger = get_logger(__name__)

POSTS_PER_PAGE = 9
LIST_COLUMNS = "id, title, slug, summary, featured_image_url, published_at, category, author"
SORTS = {
    "published_at-desc": ("published_at", True),
    "published_at-asc": ("published_at", False),
    "title-asc": ("title", False),
    "title-desc": ("title", True),
}
POST_FIELDS = (
    "title", "slug", "summary", "featured_image_url", "content",
    "category", "subtitle", "author", "location", "key_insights",
)
SUBMISSION_OPTIONAL = (
    "category", "author", "location", "featured_image_url",
    "subtitle", "summary", "name", "email",
)


def slugify(title: str) -> str:
    s = (title or "").lower().strip()
    s = re.sub(r"[^\w\s-]", "", s)
    s = re.sub(r"[\s_-]+", "-", s)
    return s.strip("-")


def split_insights(value: Union[str, List[str], None]) -> Optional[List[str]]:
    """key_insights come as a list or as newline-separated text."""
    if value is None:
        return None
    items = value.split("\n") if isinstance(value, str) else list(value)
    cleaned = [str(x).strip() for x in items if str(x).strip()]
    return cleaned or None


def _filtered(query, category: Optional[str], search: Optional[str]):
    if category and category != "all":
        query = query.eq("category", category)
    if search and search.strip():
        query = query.ilike("title", f"%{search.strip()}%")
    return query


# -----------------------------
# Public reads
# -----------------------------
def list_posts(
    *,
    page: int = 1,
    per_page: int = POSTS_PER_PAGE,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "published_at-desc",
    sb=None,
) -> Dict[str, Any]:
    sb = sb or get_supabase_client()
    count_res = _filtered(
        sb.table("nucleus_posts").select("id", count="exact"), category, search
    ).execute()
    total = int(getattr(count_res, "count", None) or 0)
    total_pages = math.ceil(total / per_page) if per_page else 0

    # asking past the end shows the last page
    page = max(1, int(page or 1))
    if total_pages and page > total_pages:
        page = total_pages
    if total == 0:
        return {"posts": [], "total": 0, "total_pages": 0, "page": 1}

    column, desc = SORTS.get(sort, SORTS["published_at-desc"])
    start = (page - 1) * per_page
    res = (
        _filtered(sb.table("nucleus_posts").select(LIST_COLUMNS), category, search)
        .order(column, desc=desc)
        .range(start, start + per_page - 1)
        .execute()
    )
    return {"posts": getattr(res, "data", []) or [], "total": total, "total_pages": total_pages, "page": page}


def list_categories(*, sb=None) -> List[str]:
    sb = sb or get_supabase_client()
    rows = getattr(sb.table("nucleus_posts").select("category").execute(), "data", []) or []
    return sorted({r["category"] for r in rows if r.get("category")})


def latest_posts(*, limit: int = 6, sb=None) -> List[Dict[str, Any]]:
    sb = sb or get_supabase_client()
    res = (
        sb.table("nucleus_posts")
        .select(LIST_COLUMNS)
        .order("published_at", desc=True)
        .limit(limit)
        .execute()
    )
    return getattr(res, "data", []) or []


def get_post_by_slug(slug: str, *, sb=None) -> Dict[str, Any]:
    sb = sb or get_supabase_client()
    res = sb.table("nucleus_posts").select("*").eq("slug", slug).limit(1).execute()
    rows = getattr(res, "data", None) or []
    if not rows:
        raise NotFound("Post not found")
    return rows[0]


# -----------------------------
# Reader idea submissions
# -----------------------------
def submit_idea(
    payload: Dict[str, Any],
    turnstile_token: Optional[str],
    remote_ip: Optional[str] = None,
    *,
    sb=None,
    session=None,
    captcha_required: bool = True,
) -> Dict[str, Any]:
    """
    Store a reader idea as a pending submission. Anonymous callers (the HTTP
    route) must pass a Turnstile token; the Streamlit page runs behind sign-in
    and passes captcha_required=False.
    """
    if captcha_required:
        verify_turnstile(turnstile_token, remote_ip, session=session)

    payload = payload or {}
    if not payload.get("title") or not payload.get("content"):
        raise BadRequest("Missing required form data (title, content).")

    row: Dict[str, Any] = {"title": payload["title"], "content": payload["content"], "status": "pending"}
    for key in SUBMISSION_OPTIONAL:
        row[key] = payload.get(key) or None
    row["key_insights"] = split_insights(payload.get("key_insights"))

    sb = sb or get_supabase_client()
    res = sb.table("nucleus_submissions").insert(row).execute()
    data = getattr(res, "data", None) or []
    inserted_id = data[0].get("id") if data else None
    logger.info("nucleus submission stored id=%s", inserted_id)
    return {"success": True, "message": "Submission received successfully!", "insertedId": inserted_id}


# -----------------------------
# Admin: posts
# -----------------------------
def save_post(*, post: Dict[str, Any], post_id: Optional[Any] = None, sb=None) -> Dict[str, Any]:
    """Insert (post_id=None) or update a post. Blank slug -> slugify(title)."""
    row = {k: post.get(k) for k in POST_FIELDS if k in post}
    if not row.get("slug") and row.get("title"):
        row["slug"] = slugify(row["title"])
    if not row.get("title") or not row.get("slug") or not row.get("content"):
        raise BadRequest("Title, slug and content are required.")
    if "key_insights" in row:
        row["key_insights"] = split_insights(row["key_insights"])

    sb = sb or get_supabase_client()
    try:
        if post_id is None:
            res = sb.table("nucleus_posts").insert(row).execute()
        else:
            res = sb.table("nucleus_posts").update(row).eq("id", post_id).execute()
    except Exception as e:
        if str(getattr(e, "code", "")) == "23505":
            raise BadRequest("The slug must be unique") from e
        raise
    return {"ok": True, "saved": getattr(res, "data", [])}


def delete_post(*, post_id: Any, sb=None) -> Dict[str, Any]:
    sb = sb or get_supabase_client()
    sb.table("nucleus_posts").delete().eq("id", post_id).execute()
    logger.info("nucleus post %s deleted", post_id)
    return {"ok": True}


# -----------------------------
# Admin: submission moderation
# -----------------------------
def list_pending_submissions(*, sb=None) -> List[Dict[str, Any]]:
    sb = sb or get_supabase_client()
    res = (
        sb.table("nucleus_submissions")
        .select("id, created_at, title, name, email, status, summary")
        .eq("status", "pending")
        .order("created_at", desc=True)
        .execute()
    )
    return getattr(res, "data", []) or []


def set_submission_status(*, submission_id: Any, status: str, sb=None) -> Dict[str, Any]:
    if status not in ("approved", "rejected"):
        raise BadRequest(f"Invalid status: {status}")
    sb = sb or get_supabase_client()
    sb.table("nucleus_submissions").update({"status": status}).eq("id", submission_id).execute()
    return {"ok": True, "status": status}
