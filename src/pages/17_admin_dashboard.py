import streamlit as st

from gateway.theme import page_header
from utils import admin_repo, nucleus_repo, quotas
from utils.errors import ServiceError
from utils.session import require_login


# ---------------------------------
# Feature toggles
# ---------------------------------
def toggles_tab():
    for row in admin_repo.list_feature_toggles():
        name = row["feature_name"]
        new = st.toggle(
            admin_repo.feature_display_name(name),
            value=bool(row.get("is_enabled")),
            key=f"toggle-{name}",
            help=row.get("description"),
        )
        if new != bool(row.get("is_enabled")):
            admin_repo.set_feature_toggle(feature_name=name, is_enabled=new)
            st.toast(f"{admin_repo.feature_display_name(name)} {'enabled' if new else 'disabled'}")


# ---------------------------------
# Users
# ---------------------------------
def users_tab():
    profiles = admin_repo.list_profiles()
    st.caption(f"{len(profiles)} user(s)")
    st.dataframe(profiles, use_container_width=True)

    with st.form("set-level"):
        ids = [p["id"] for p in profiles]
        user_id = st.selectbox("User", ids)
        level = st.selectbox("Level", quotas.LEVELS)
        expires = st.date_input("Researcher access expires (optional)", value=None)
        submitted = st.form_submit_button("Update level")
    if submitted and user_id:
        try:
            admin_repo.update_user_level(
                user_id=user_id, level=level, level_expires_at=expires.isoformat() if expires else None
            )
        except ServiceError as e:
            st.error(str(e))
        else:
            st.success(f"{user_id} is now {level}.")


# ---------------------------------
# Usage
# ---------------------------------
def usage_tab():
    days = st.select_slider("Window (days)", options=[7, 14, 30], value=7)
    stats = admin_repo.usage_stats(days=days)
    if not stats["features"]:
        st.info("No usage recorded in this window.")
        return

    cols = st.columns(min(4, len(stats["features"])))
    for i, f in enumerate(sorted(stats["features"], key=lambda f: -stats["totals"][f])[:4]):
        cols[i].metric(admin_repo.feature_display_name(f), stats["totals"][f], f"{stats['users'][f]} users")

    st.line_chart(stats["series"], x="date", y=stats["features"])
    st.markdown("**Today**")
    st.dataframe(
        [{"Feature": admin_repo.feature_display_name(t["feature_name"]), "Uses": t["total_usage"],
          "Users": len(t["user_ids"])} for t in stats["today"]],
        use_container_width=True,
    )


# ---------------------------------
# Quotas
# ---------------------------------
def quotas_tab():
    left = admin_repo.format_countdown(admin_repo.seconds_until_utc_midnight())
    st.caption(f"Daily counters reset at 00:00 UTC (in {left}).")
    table = admin_repo.user_quota_table()
    for uid, row in table.items():
        with st.expander(f"{uid} · {row['level']}"):
            st.dataframe(
                [
                    {
                        "Feature": admin_repo.feature_display_name(f),
                        "Used": q["used"],
                        "Limit": "∞" if q["limit"] is None else q["limit"],
                        "Remaining": "∞" if q["remaining"] is None else q["remaining"],
                    }
                    for f, q in row["quotas"].items()
                ],
                use_container_width=True,
            )
            if st.button("Reset today's usage", key=f"reset-{uid}"):
                admin_repo.reset_user_quota(user_id=uid)
                st.success("Usage reset.")
                st.rerun()


# ---------------------------------
# Nucleus
# ---------------------------------
def nucleus_tab():
    st.markdown("**Pending submissions**")
    pending = nucleus_repo.list_pending_submissions()
    if not pending:
        st.caption("Nothing waiting for review.")
    for sub in pending:
        with st.expander(f"{sub['title']} · {sub.get('name') or 'anonymous'}"):
            st.write(sub.get("summary") or "")
            a, r = st.columns(2)
            if a.button("Approve", key=f"ok-{sub['id']}"):
                nucleus_repo.set_submission_status(submission_id=sub["id"], status="approved")
                st.rerun()
            if r.button("Reject", key=f"no-{sub['id']}"):
                nucleus_repo.set_submission_status(submission_id=sub["id"], status="rejected")
                st.rerun()

    st.divider()
    st.markdown("**Posts**")
    posts = nucleus_repo.list_posts(page=1, per_page=50)["posts"]
    options = {"➕ New post": None, **{p["title"]: p for p in posts}}
    choice = st.selectbox("Edit", list(options))
    current = nucleus_repo.get_post_by_slug(options[choice]["slug"]) if options[choice] else {}

    with st.form("post-editor"):
        post = {
            "title": st.text_input("Title", value=current.get("title", "")),
            "slug": st.text_input("Slug (blank = from title)", value=current.get("slug", "")),
            "subtitle": st.text_input("Subtitle", value=current.get("subtitle") or ""),
            "summary": st.text_area("Summary", value=current.get("summary") or ""),
            "content": st.text_area("Content (Markdown)", value=current.get("content") or "", height=300),
            "category": st.text_input("Category", value=current.get("category") or ""),
            "author": st.text_input("Author", value=current.get("author") or ""),
            "location": st.text_input("Location", value=current.get("location") or ""),
            "featured_image_url": st.text_input("Image URL", value=current.get("featured_image_url") or ""),
            "key_insights": st.text_area("Key insights (one per line)",
                                         value="\n".join(current.get("key_insights") or [])),
        }
        save = st.form_submit_button("Save")
    if save:
        try:
            nucleus_repo.save_post(post=post, post_id=current.get("id"))
        except ServiceError as e:
            st.error(str(e))
        else:
            st.success("Saved.")
    if current and st.button("Delete this post"):
        nucleus_repo.delete_post(post_id=current["id"])
        st.rerun()


def run_admin():
    page_header("Admin Dashboard")
    require_login(required_level=quotas.ADMINISTRATOR)

    tabs = st.tabs(["Feature toggles", "Users", "Usage", "Quotas", "Nucleus"])
    for tab, render in zip(tabs, (toggles_tab, users_tab, usage_tab, quotas_tab, nucleus_tab)):
        with tab:
            render()


run_admin()
