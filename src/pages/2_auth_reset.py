import streamlit as st

from gateway.theme import page_header
from utils import auth_service
from utils.errors import ServiceError
from utils.session import current_user


def run_reset_page():
    page_header("Reset password")

    # the recovery e-mail links back here with ?token_hash=...&type=recovery
    token_hash = st.query_params.get("token_hash")
    user = current_user()

    if token_hash or user is not None:
        with st.form("new-password"):
            password = st.text_input("New password", type="password")
            confirm = st.text_input("Confirm new password", type="password")
            submitted = st.form_submit_button("Update password")
        if submitted:
            try:
                auth_service.update_password(
                    password,
                    confirm,
                    token_hash=token_hash,
                    access_token=getattr(user, "access_token", None),
                    refresh_token=getattr(user, "refresh_token", None),
                )
            except ServiceError as e:
                st.error(str(e))
            else:
                st.query_params.clear()
                st.success("Password updated. You can sign in with the new password.")
        return

    st.write("Enter your account email and we'll send you a reset link.")
    with st.form("forgot"):
        email = st.text_input("Email", placeholder="you@example.com")
        submitted = st.form_submit_button("Send reset link")
    if submitted:
        try:
            auth_service.request_password_reset(email)
        except ServiceError as e:
            st.error(str(e))
        else:
            st.success("If that email is registered, a reset link is on its way.")


run_reset_page()
