# src/tools/clinical_scores.py
"""
Bedside scores used by the scoring hub page. Every function is pure: it
takes the checked criteria / lab values and returns a ScoreResult.
"""

from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel


class ScoreResult(BaseModel):
    score: Optional[float] = None
    interpretation: str
    extra: Optional[str] = None  # secondary reading (simplified Wells, MELD-Na)


def _fmt(n: float) -> str:
    # 1.5 stays 1.5, 3.0 prints as 3
    return str(int(n)) if float(n).is_integer() else str(n)


# -----------------------------
# CHA2DS2-VASc
# -----------------------------
def chadsvasc(
    *,
    chf: bool = False,
    hypertension: bool = False,
    age_75_or_older: bool = False,
    diabetes: bool = False,
    stroke_tia: bool = False,
    vascular_disease: bool = False,
    age_65_to_74: bool = False,
    female: bool = False,
) -> ScoreResult:
    score = 0
    score += 1 if chf else 0
    score += 1 if hypertension else 0
    score += 2 if age_75_or_older else 0
    score += 1 if diabetes else 0
    score += 2 if stroke_tia else 0
    score += 1 if vascular_disease else 0
    if age_65_to_74 and not age_75_or_older:
        score += 1
    score += 1 if female else 0

    if female:
        if score == 1:
            text = "Score 1 (Female): Consider anticoagulation (Risk ~1.9%/year)"
        elif score >= 2:
            text = f"Score {score} (Female): Anticoagulation recommended (Risk increases with score)"
        else:
            text = "Score 0 (Female): Low risk, anticoagulation generally not recommended (Risk ~1.1%/year)"
    else:
        if score == 0:
            text = "Score 0 (Male): Low risk, anticoagulation generally not recommended (Risk ~0.8%/year)"
        else:
            text = f"Score {score} (Male): Anticoagulation recommended (Risk increases with score)"
    return ScoreResult(score=score, interpretation=text)


# -----------------------------
# CURB-65
# -----------------------------
def curb65(
    *,
    confusion: bool = False,
    urea_over_7: bool = False,
    respiratory_rate_30: bool = False,
    low_blood_pressure: bool = False,
    age_65_or_older: bool = False,
) -> ScoreResult:
    score = sum(
        1 for flag in (confusion, urea_over_7, respiratory_rate_30, low_blood_pressure, age_65_or_older) if flag
    )
    if score <= 1:
        text = f"Score {score}: Low risk (Mortality ~1.5%). Consider outpatient treatment."
    elif score == 2:
        text = f"Score {score}: Moderate risk (Mortality ~9.2%). Consider hospital admission."
    else:
        text = f"Score {score}: High risk (Mortality ~22%). Urgent hospital admission, consider ICU."
    return ScoreResult(score=score, interpretation=text)


# -----------------------------
# Glasgow Coma Scale
# -----------------------------
GCS_RANGES = {"eye": (1, 4), "verbal": (1, 5), "motor": (1, 6)}


def gcs(eye: Optional[int], verbal: Optional[int], motor: Optional[int]) -> ScoreResult:
    if eye is None or verbal is None or motor is None:
        return ScoreResult(
            score=None,
            interpretation="Select one option from each category (Eyes, Verbal, Motor) to calculate the score.",
        )
    for name, value in (("eye", eye), ("verbal", verbal), ("motor", motor)):
        lo, hi = GCS_RANGES[name]
        if not lo <= int(value) <= hi:
            raise ValueError(f"GCS {name} response must be between {lo} and {hi}.")

    total = int(eye) + int(verbal) + int(motor)
    if total >= 13:
        severity = "Mild Brain Injury"
    elif total >= 9:
        severity = "Moderate Brain Injury"
    else:
        severity = "Severe Brain Injury"
    return ScoreResult(
        score=total,
        interpretation=f"Total Score {total}: {severity}. (Components: E{eye} V{verbal} M{motor})",
    )


# -----------------------------
# MELD / MELD-Na
# -----------------------------
def meld(
    bilirubin: Optional[float],
    creatinine: Optional[float],
    inr: Optional[float],
    sodium: Optional[float] = None,
    *,
    dialysis: bool = False,
) -> ScoreResult:
    """MELD with the UNOS 2016 sodium adjustment. Lab units: mg/dL, mg/dL, ratio, mmol/L."""
    if bilirubin is None or creatinine is None or inr is None:
        return ScoreResult(score=None, interpretation="Enter Bilirubin, Creatinine, and INR values.")
    if bilirubin <= 0 or creatinine <= 0 or inr <= 0:
        raise ValueError("Bilirubin, creatinine and INR must be positive numbers.")
    if sodium is not None and sodium <= 0:
        raise ValueError("Sodium must be a positive number.")

    bili = max(float(bilirubin), 1.0)
    cr = max(float(creatinine), 1.0)
    if dialysis or cr > 4.0:
        cr = 4.0
    inr_v = max(float(inr), 1.0)

    raw = 0.957 * math.log(cr) + 0.378 * math.log(bili) + 1.120 * math.log(inr_v) + 0.643
    score = round(raw * 10)

    score_na = None
    if sodium is not None:
        score_na = score
        if score > 11:
            na = min(max(float(sodium), 125), 137)
            score_na = score + 1.32 * (137 - na) - (0.033 * score * (137 - na))
        score_na = round(score_na)

    final = min(max(score, 6), 40)
    final_na = min(max(score_na, final), 40) if score_na is not None else None

    if final >= 40:
        risk = "~71.3% mortality"
    elif final >= 30:
        risk = "~52.6% mortality"
    elif final >= 20:
        risk = "~19.6% mortality"
    elif final >= 10:
        risk = "~6.0% mortality"
    else:
        risk = "<1.9% mortality"
    na_text = f" MELD-Na Score: {final_na}." if final_na is not None else ""
    return ScoreResult(
        score=final,
        interpretation=(
            f"MELD Score: {final} ({risk}).{na_text} "
            "Used for liver transplant allocation and prognostication."
        ),
        extra=str(final_na) if final_na is not None else None,
    )


# -----------------------------
# Wells (DVT / PE)
# -----------------------------
def wells_dvt(
    *,
    active_cancer: bool = False,
    paralysis_or_cast: bool = False,
    bedridden_or_surgery: bool = False,
    localized_tenderness: bool = False,
    entire_leg_swollen: bool = False,
    calf_swelling: bool = False,
    pitting_edema: bool = False,
    collateral_veins: bool = False,
    previous_dvt: bool = False,
    alternative_diagnosis_likely: bool = False,
) -> ScoreResult:
    score = sum(
        1
        for flag in (
            active_cancer,
            paralysis_or_cast,
            bedridden_or_surgery,
            localized_tenderness,
            entire_leg_swollen,
            calf_swelling,
            pitting_edema,
            collateral_veins,
            previous_dvt,
        )
        if flag
    )
    if alternative_diagnosis_likely:
        score -= 2

    if score >= 3:
        text = f"Score {score}: High Probability of DVT (~75%)"
    elif score >= 1:
        text = f"Score {score}: Moderate Probability of DVT (~17%)"
    else:
        text = f"Score {score}: Low Probability of DVT (~3%)"
    return ScoreResult(score=score, interpretation=text)


def wells_pe(
    *,
    dvt_signs: bool = False,
    pe_most_likely: bool = False,
    heart_rate_over_100: bool = False,
    immobilization_or_surgery: bool = False,
    previous_pe_dvt: bool = False,
    hemoptysis: bool = False,
    malignancy: bool = False,
) -> ScoreResult:
    score = 0.0
    score += 3 if dvt_signs else 0
    score += 3 if pe_most_likely else 0
    score += 1.5 if heart_rate_over_100 else 0
    score += 1.5 if immobilization_or_surgery else 0
    score += 1.5 if previous_pe_dvt else 0
    score += 1 if hemoptysis else 0
    score += 1 if malignancy else 0

    s = _fmt(score)
    if score > 6:
        text = f"Score {s}: High Probability of PE"
    elif score >= 2:
        text = f"Score {s}: Moderate Probability of PE"
    else:
        text = f"Score {s}: Low Probability of PE"
    simplified = f"Score {s}: PE Likely" if score > 4 else f"Score {s}: PE Unlikely"
    return ScoreResult(score=score, interpretation=text, extra=simplified)


# -----------------------------
# Anion gap
# -----------------------------
def anion_gap(sodium: float, chloride: float, bicarbonate: float) -> ScoreResult:
    if sodium is None or chloride is None or bicarbonate is None or min(sodium, chloride, bicarbonate) <= 0:
        raise ValueError("Please enter valid positive numbers for Sodium, Chloride, and Bicarbonate.")
    gap = float(sodium) - (float(chloride) + float(bicarbonate))
    if gap > 12:
        text = "High Anion Gap Metabolic Acidosis (HAGMA)"
    elif gap < 8:
        text = "Low Anion Gap"
    else:
        text = "Normal Anion Gap"
    return ScoreResult(score=round(gap, 2), interpretation=text)
