import streamlit as st

from gateway.theme import page_header
from utils.errors import ServiceError
from utils.nucleus_repo import submit_idea
from utils.session import require_login


def run_submit():
    page_header("Submit an idea", "Pitch an article for Nucleus. An editor reviews every submission.")
    user = require_login()

    with st.form("nucleus-idea", clear_on_submit=True):
        title = st.text_input("Title *")
        subtitle = st.text_input("Subtitle")
        summary = st.text_area("Short summary", height=80)
        content = st.text_area("Your idea / draft *", height=240)
        key_insights = st.text_area("Key insights (one per line)", height=100)
        c1, c2 = st.columns(2)
        category = c1.text_input("Category")
        location = c2.text_input("Location")
        name = c1.text_input("Your name")
        email = c2.text_input("Email", value=user.email or "")
        submitted = st.form_submit_button("Submit")

    if not submitted:
        return
    payload = {
        "title": title.strip(), "subtitle": subtitle, "summary": summary, "content": content.strip(),
        "key_insights": key_insights, "category": category, "location": location,
        "name": name, "email": email, "author": name,
    }
    try:
        res = submit_idea(payload, None, captcha_required=False)
    except ServiceError as e:
        st.error(str(e))
    else:
        st.success(res["message"])


run_submit()
