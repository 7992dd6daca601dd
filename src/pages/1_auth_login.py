import streamlit as st

from gateway.theme import page_header
from utils import auth_service
from utils.errors import ServiceError
from utils.session import current_user, set_current_user


def run_auth_page():
    page_header("Account", "Sign in to use the tools; your level sets your daily limits.")

    user = current_user()
    if user is not None:
        st.success(f"Signed in as {user.email} ({user.level}).")
        if st.button("Sign out"):
            auth_service.logout(user.access_token, user.refresh_token)
            set_current_user(None)
            st.rerun()
        return

    sign_in, sign_up = st.tabs(["Sign in", "Sign up"])

    # ---------------------------------
    # 1. Sign in
    # ---------------------------------
    with sign_in:
        with st.form("sign-in"):
            email = st.text_input("Email", placeholder="you@example.com")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in")
        if submitted:
            try:
                session = auth_service.login(email, password)
            except ServiceError as e:
                st.error(str(e))
            else:
                set_current_user(session)
                st.success("Welcome back!")
                st.rerun()
        st.page_link("pages/2_auth_reset.py", label="Forgot your password?")

    # ---------------------------------
    # 2. Sign up
    # ---------------------------------
    with sign_up:
        with st.form("sign-up"):
            email = st.text_input("Email", key="su-email", placeholder="you@example.com")
            password = st.text_input("Password", type="password", key="su-pass",
                                     help=f"At least {auth_service.MIN_PASSWORD_LENGTH} characters.")
            confirm = st.text_input("Confirm password", type="password", key="su-confirm")
            submitted = st.form_submit_button("Create account")
        if submitted:
            try:
                res = auth_service.register(email, password, confirm)
            except ServiceError as e:
                st.error(str(e))
            else:
                if res.get("confirmation_pending"):
                    st.info("Check your inbox to confirm your email, then sign in.")
                else:
                    st.success("Account created. You can sign in now.")


run_auth_page()
