import streamlit as st

from gateway.theme import page_header
from tools.usda_fdc import get_food, search_foods
from utils.errors import ServiceError
from utils.session import require_login, run_gated

FEATURE = "nutrition_database"
KEY_NUTRIENTS = ("Energy", "Protein", "Total lipid (fat)", "Carbohydrate, by difference", "Fiber, total dietary")


def run_nutrition():
    page_header("Nutrition Database", "USDA FoodData Central.")
    user = require_login()

    query = st.text_input("Food", placeholder="e.g. brown rice")
    if st.button("Search", disabled=not query.strip()):
        with st.spinner("Searching FoodData Central..."):
            res = run_gated(FEATURE, lambda: search_foods(query), user)
        if res is not None:
            st.session_state["foods"] = res

    res = st.session_state.get("foods")
    if not res:
        return
    st.caption(f"{res['totalHits']} match(es)")

    for food in res["foods"]:
        label = food["description"] or str(food["fdcId"])
        if food.get("brandOwner"):
            label += f" ({food['brandOwner']})"
        with st.expander(f"{label} · {food.get('dataType') or ''}"):
            key_rows = [n for n in food["nutrients"] if n["name"] in KEY_NUTRIENTS]
            st.table([{"Nutrient": n["name"], "Amount": n["amount"], "Unit": n["unit"]} for n in key_rows])
            if st.button("All nutrients", key=f"fdc-{food['fdcId']}"):
                try:
                    detail = get_food(food["fdcId"])
                except ServiceError as e:
                    st.error(str(e))
                else:
                    if detail.get("servingSize"):
                        st.caption(f"Serving: {detail['servingSize']} {detail.get('servingSizeUnit') or ''}")
                    st.dataframe(detail["nutrients"], use_container_width=True)


run_nutrition()
