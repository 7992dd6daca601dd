import streamlit as st

from gateway.theme import page_header
from tools import renal_calculators as rc
from utils.session import gate_feature, require_login

FEATURE = "medical_calculator"


def _show(result: rc.RenalResult, unit: str) -> None:
    st.metric(unit, result.value)
    st.success(result.category)
    if result.description:
        st.caption(result.description)


def cockcroft_gault_tab():
    c1, c2 = st.columns(2)
    cr = c1.number_input("Serum creatinine (mg/dL)", min_value=0.0, value=None, key="cg-cr")
    age = c1.number_input("Age (years)", min_value=0.0, value=None, key="cg-age")
    weight = c2.number_input("Weight (kg)", min_value=0.0, value=None)
    female = c2.radio("Sex", ["Male", "Female"], horizontal=True, key="cg-sex") == "Female"
    if st.button("Calculate CrCl"):
        try:
            _show(rc.cockcroft_gault(cr, age, weight, female=female), "CrCl (mL/min)")
        except ValueError as e:
            st.error(str(e))


def egfr_tab():
    c1, c2 = st.columns(2)
    formula = c1.selectbox("Formula", rc.EGFR_FORMULAS)
    cr = c1.number_input("Serum creatinine (mg/dL)", min_value=0.0, value=None, key="egfr-cr")
    age = c2.number_input("Age (years)", min_value=0.0, value=None, key="egfr-age")
    female = c2.radio("Sex", ["Male", "Female"], horizontal=True, key="egfr-sex") == "Female"
    black = False
    if formula == "CKD-EPI 2009":
        black = st.checkbox("Black race (2009 equation only)")
    if st.button("Calculate eGFR"):
        try:
            _show(rc.egfr(cr, age, female=female, black=black, formula=formula), "eGFR (mL/min/1.73m²)")
        except ValueError as e:
            st.error(str(e))


def fena_tab():
    c1, c2 = st.columns(2)
    una = c1.number_input("Urine sodium (mEq/L)", min_value=0.0, value=None)
    sna = c1.number_input("Serum sodium (mEq/L)", min_value=0.0, value=None)
    ucr = c2.number_input("Urine creatinine (mg/dL)", min_value=0.0, value=None)
    scr = c2.number_input("Serum creatinine (mg/dL)", min_value=0.0, value=None, key="fena-scr")
    if st.button("Calculate FENa"):
        try:
            _show(rc.fena(una, sna, ucr, scr), "FENa (%)")
        except ValueError as e:
            st.error(str(e))


def uacr_tab():
    c1, c2 = st.columns(2)
    ua = c1.number_input("Urine albumin (mg/L)", min_value=0.0, value=None)
    uc = c2.number_input("Urine creatinine", min_value=0.0, value=None, key="uacr-uc")
    unit = c2.radio("Creatinine unit", ["mg/dL", "mmol/L"], horizontal=True)
    if st.button("Calculate UACR"):
        try:
            _show(rc.uacr(ua, uc, creatinine_unit=unit), "UACR (mg/g)")
        except ValueError as e:
            st.error(str(e))


def run_renal():
    page_header("Renal Calculators", "Kidney function and AKI work-up.")
    require_login()
    if not gate_feature(FEATURE).allowed:
        return

    tabs = st.tabs(["Cockcroft-Gault", "eGFR", "FENa", "UACR"])
    for tab, render in zip(tabs, (cockcroft_gault_tab, egfr_tab, fena_tab, uacr_tab)):
        with tab:
            render()


run_renal()
