import streamlit as st

from gateway.theme import page_header
from utils.errors import ServiceError
from utils.nucleus_repo import SORTS, get_post_by_slug, list_categories, list_posts

SORT_LABELS = {
    "published_at-desc": "Newest",
    "published_at-asc": "Oldest",
    "title-asc": "Title A-Z",
    "title-desc": "Title Z-A",
}


def show_post(slug: str) -> None:
    try:
        post = get_post_by_slug(slug)
    except ServiceError as e:
        st.error(str(e))
        return

    if st.button("← Back to archive"):
        st.session_state.pop("nucleus_slug", None)
        st.rerun()
    st.title(post["title"])
    if post.get("subtitle"):
        st.markdown(f"*{post['subtitle']}*")
    byline = [post.get("author"), post.get("location"), (post.get("published_at") or "")[:10]]
    st.caption(" · ".join(b for b in byline if b))
    if post.get("featured_image_url"):
        st.image(post["featured_image_url"], use_container_width=True)
    if post.get("key_insights"):
        with st.container(border=True):
            st.markdown("**Key insights**")
            for insight in post["key_insights"]:
                st.markdown(f"- {insight}")
    st.markdown(post.get("content") or "")


def run_archive():
    slug = st.session_state.get("nucleus_slug") or st.query_params.get("slug")
    if slug:
        show_post(slug)
        return

    page_header("Nucleus", "Articles and explainers from the team.")
    c1, c2, c3 = st.columns([2, 1, 1])
    search = c1.text_input("Search titles")
    category = c2.selectbox("Category", ["all", *list_categories()])
    sort = c3.selectbox("Sort", list(SORTS), format_func=SORT_LABELS.get)
    page = st.session_state.get("nucleus_page", 1)

    res = list_posts(page=page, category=category, search=search, sort=sort)
    if not res["posts"]:
        st.info("No posts match.")
        return

    cols = st.columns(3)
    for i, post in enumerate(res["posts"]):
        with cols[i % 3]:
            with st.container(border=True):
                if post.get("featured_image_url"):
                    st.image(post["featured_image_url"], use_container_width=True)
                st.markdown(f"**{post['title']}**")
                if post.get("summary"):
                    st.caption(post["summary"])
                if st.button("Read", key=f"read-{post['slug']}"):
                    st.session_state["nucleus_slug"] = post["slug"]
                    st.rerun()

    prev_col, mid, next_col = st.columns([1, 4, 1])
    mid.caption(f"Page {res['page']} of {res['total_pages']} · {res['total']} posts")
    if prev_col.button("← Prev", disabled=res["page"] <= 1):
        st.session_state["nucleus_page"] = res["page"] - 1
        st.rerun()
    if next_col.button("Next →", disabled=res["page"] >= res["total_pages"]):
        st.session_state["nucleus_page"] = res["page"] + 1
        st.rerun()


run_archive()
