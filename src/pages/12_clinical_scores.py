import streamlit as st

from gateway.theme import page_header
from tools import clinical_scores as cs
from utils.session import gate_feature, require_login

FEATURE = "clinical_scoring"


def _show(result: cs.ScoreResult) -> None:
    if result.score is None:
        st.info(result.interpretation)
    else:
        st.success(result.interpretation)


def chadsvasc_tab():
    c1, c2 = st.columns(2)
    r = cs.chadsvasc(
        chf=c1.checkbox("Congestive heart failure"),
        hypertension=c1.checkbox("Hypertension"),
        age_75_or_older=c1.checkbox("Age ≥ 75"),
        diabetes=c1.checkbox("Diabetes mellitus"),
        stroke_tia=c2.checkbox("Stroke / TIA / thromboembolism"),
        vascular_disease=c2.checkbox("Vascular disease (MI, PAD, aortic plaque)"),
        age_65_to_74=c2.checkbox("Age 65-74"),
        female=c2.checkbox("Female sex"),
    )
    _show(r)


def curb65_tab():
    r = cs.curb65(
        confusion=st.checkbox("Confusion"),
        urea_over_7=st.checkbox("Urea > 7 mmol/L (BUN > 19 mg/dL)"),
        respiratory_rate_30=st.checkbox("Respiratory rate ≥ 30"),
        low_blood_pressure=st.checkbox("SBP < 90 or DBP ≤ 60 mmHg"),
        age_65_or_older=st.checkbox("Age ≥ 65", key="curb-age"),
    )
    _show(r)


EYE = {4: "Spontaneous", 3: "To voice", 2: "To pain", 1: "None"}
VERBAL = {5: "Oriented", 4: "Confused", 3: "Inappropriate words", 2: "Incomprehensible sounds", 1: "None"}
MOTOR = {6: "Obeys commands", 5: "Localises pain", 4: "Withdraws from pain", 3: "Abnormal flexion",
         2: "Extension", 1: "None"}


def gcs_tab():
    c1, c2, c3 = st.columns(3)
    e = c1.radio("Eyes", list(EYE), format_func=lambda k: f"{k} · {EYE[k]}", index=None)
    v = c2.radio("Verbal", list(VERBAL), format_func=lambda k: f"{k} · {VERBAL[k]}", index=None)
    m = c3.radio("Motor", list(MOTOR), format_func=lambda k: f"{k} · {MOTOR[k]}", index=None)
    _show(cs.gcs(e, v, m))


def meld_tab():
    c1, c2 = st.columns(2)
    bili = c1.number_input("Bilirubin (mg/dL)", min_value=0.0, value=None, step=0.1)
    cr = c1.number_input("Creatinine (mg/dL)", min_value=0.0, value=None, step=0.1)
    inr = c2.number_input("INR", min_value=0.0, value=None, step=0.1)
    na = c2.number_input("Sodium (mmol/L, optional)", min_value=0.0, value=None, step=1.0)
    dialysis = st.checkbox("Dialysis ≥ 2 times (or CVVHD ≥ 24h) in the past week")
    try:
        _show(cs.meld(bili, cr, inr, na, dialysis=dialysis))
    except ValueError as e:
        st.error(str(e))


def wells_dvt_tab():
    r = cs.wells_dvt(
        active_cancer=st.checkbox("Active cancer"),
        paralysis_or_cast=st.checkbox("Paralysis, paresis or recent leg cast"),
        bedridden_or_surgery=st.checkbox("Bedridden > 3 days or major surgery within 12 weeks"),
        localized_tenderness=st.checkbox("Tenderness along the deep veins"),
        entire_leg_swollen=st.checkbox("Entire leg swollen"),
        calf_swelling=st.checkbox("Calf swelling > 3 cm vs the other leg"),
        pitting_edema=st.checkbox("Pitting oedema in the symptomatic leg"),
        collateral_veins=st.checkbox("Collateral superficial veins"),
        previous_dvt=st.checkbox("Previously documented DVT"),
        alternative_diagnosis_likely=st.checkbox("Alternative diagnosis at least as likely (-2)"),
    )
    _show(r)


def wells_pe_tab():
    r = cs.wells_pe(
        dvt_signs=st.checkbox("Clinical signs of DVT (3)"),
        pe_most_likely=st.checkbox("PE is the most likely diagnosis (3)"),
        heart_rate_over_100=st.checkbox("Heart rate > 100 (1.5)"),
        immobilization_or_surgery=st.checkbox("Immobilisation ≥ 3 days or surgery in past 4 weeks (1.5)"),
        previous_pe_dvt=st.checkbox("Previous PE or DVT (1.5)"),
        hemoptysis=st.checkbox("Haemoptysis (1)"),
        malignancy=st.checkbox("Malignancy (1)"),
    )
    _show(r)
    st.caption(f"Simplified: {r.extra}")


def anion_gap_tab():
    c1, c2, c3 = st.columns(3)
    na = c1.number_input("Sodium (mEq/L)", min_value=0.0, value=None, key="ag-na")
    cl = c2.number_input("Chloride (mEq/L)", min_value=0.0, value=None)
    hco3 = c3.number_input("Bicarbonate (mEq/L)", min_value=0.0, value=None)
    if st.button("Calculate anion gap"):
        try:
            r = cs.anion_gap(na, cl, hco3)
        except ValueError as e:
            st.error(str(e))
        else:
            st.metric("Anion gap (mEq/L)", r.score)
            st.success(r.interpretation)


def run_scoring_hub():
    page_header("Clinical Scoring Hub", "Risk scores for the bedside. Decision support only.")
    require_login()
    if not gate_feature(FEATURE).allowed:
        return

    tabs = st.tabs(["CHA₂DS₂-VASc", "CURB-65", "GCS", "MELD", "Wells DVT", "Wells PE", "Anion gap"])
    for tab, render in zip(tabs, (chadsvasc_tab, curb65_tab, gcs_tab, meld_tab, wells_dvt_tab, wells_pe_tab,
                                  anion_gap_tab)):
        with tab:
            render()


run_scoring_hub()
