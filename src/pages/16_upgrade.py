import streamlit as st

from gateway.theme import page_header
from gateway.ui import card
from utils import quotas
from utils.errors import ServiceError
from utils.payments import PLAN_PRICES, create_transaction
from utils.session import refresh_level, require_login

PLAN_PERKS = {
    quotas.PREMIUM: "Higher daily limits on every AI and reference tool.",
    quotas.RESEARCHER: "Unlimited use of most tools, plus Learning Resources.",
}


def run_upgrade():
    page_header("Upgrade plan", "Pay once through Midtrans; your level updates as soon as the payment settles.")
    user = require_login()
    st.write(f"Current level: **{user.level}**")

    cols = st.columns(len(PLAN_PRICES))
    for col, (plan, price) in zip(cols, PLAN_PRICES.items()):
        with col:
            with card(plan, f"Rp {price:,.0f}".replace(",", ".")):
                st.write(PLAN_PERKS.get(plan, ""))
                if user.level == plan:
                    st.caption("This is your current plan.")
                elif st.button(f"Choose {plan}", key=f"buy-{plan}"):
                    try:
                        tx = create_transaction(user.user_id, user.email, plan)
                    except ServiceError as e:
                        st.error(str(e))
                    else:
                        st.session_state["pending_tx"] = tx

    tx = st.session_state.get("pending_tx")
    if tx:
        st.info(f"Order {tx['order_id']} created.")
        st.link_button("Pay with Midtrans", tx["redirect_url"])

    st.divider()
    if st.button("I've paid, refresh my level"):
        updated = refresh_level()
        st.session_state.pop("pending_tx", None)
        st.success(f"Your level is now {updated.level}.")


run_upgrade()
