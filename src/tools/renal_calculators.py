# src/tools/renal_calculators.py
"""Kidney function calculators: creatinine clearance, eGFR, FENa, UACR."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class RenalResult(BaseModel):
    value: float
    category: str
    description: Optional[str] = None


def _positive(**values: Optional[float]) -> None:
    bad = [k for k, v in values.items() if v is None or v <= 0]
    if bad:
        raise ValueError(f"Please enter valid positive numbers for: {', '.join(bad)}.")


# -----------------------------
# Cockcroft-Gault
# -----------------------------
DOSE_BANDS = (
    (60, "Normal dose"),
    (30, "Consider dose adjustment (e.g. reduce the dose or extend the interval)"),
    (15, "Significant dose adjustment needed, or avoid certain drugs"),
)
KIDNEY_FAILURE_DOSING = "Kidney failure. Strict dose adjustment, or avoid most renally excreted drugs."


def cockcroft_gault(creatinine: float, age: float, weight: float, *, female: bool = False) -> RenalResult:
    """Creatinine clearance in mL/min; creatinine in mg/dL, weight in kg."""
    _positive(creatinine=creatinine, age=age, weight=weight)
    crcl = ((140 - age) * weight) / (72 * creatinine)
    if female:
        crcl *= 0.85
    suggestion = next((text for floor, text in DOSE_BANDS if crcl >= floor), KIDNEY_FAILURE_DOSING)
    return RenalResult(value=round(crcl, 2), category=suggestion)


# -----------------------------
# eGFR (CKD-EPI)
# -----------------------------
CKD_STAGES = (
    (90, "G1: Normal or high", "Normal or high kidney function. Continue routine monitoring."),
    (60, "G2: Mildly decreased", "Mildly decreased kidney function. Watch risk factors and lifestyle."),
    (45, "G3a: Mildly to moderately decreased",
     "Mild to moderate loss of kidney function. Needs further monitoring and management."),
    (30, "G3b: Moderately to severely decreased",
     "Moderate to severe loss of kidney function. Nephrology referral recommended."),
    (15, "G4: Severely decreased",
     "Severe loss of kidney function. Preparation for kidney replacement therapy may be needed."),
    (0, "G5: Kidney failure", "Kidney failure. Kidney replacement therapy (dialysis or transplant) is required."),
)
EGFR_FORMULAS = ("CKD-EPI 2021", "CKD-EPI 2009")


def ckd_stage(egfr_value: float) -> tuple[str, str]:
    for floor, stage, description in CKD_STAGES:
        if egfr_value >= floor:
            return stage, description
    return CKD_STAGES[-1][1], CKD_STAGES[-1][2]


def egfr(
    creatinine: float,
    age: float,
    *,
    female: bool = False,
    black: bool = False,
    formula: str = "CKD-EPI 2021",
) -> RenalResult:
    """eGFR in mL/min/1.73m². The race coefficient only exists in the 2009 equation."""
    _positive(creatinine=creatinine, age=age)
    if formula not in EGFR_FORMULAS:
        raise ValueError(f"Unknown eGFR formula: {formula}")

    kappa = 0.7 if female else 0.9
    ratio = creatinine / kappa
    if formula == "CKD-EPI 2021":
        alpha = -0.241 if female else -0.302
        value = 142 * min(ratio, 1) ** alpha * max(ratio, 1) ** -1.200 * 0.9938 ** age
        if female:
            value *= 1.012
    else:
        alpha = -0.329 if female else -0.411
        value = 141 * min(ratio, 1) ** alpha * max(ratio, 1) ** -1.209 * 0.993 ** age
        if female:
            value *= 1.018
        if black:
            value *= 1.159

    stage, description = ckd_stage(value)
    return RenalResult(value=round(value, 2), category=stage, description=description)


# -----------------------------
# FENa
# -----------------------------
def fena(urine_sodium: float, serum_sodium: float, urine_creatinine: float, serum_creatinine: float) -> RenalResult:
    if urine_sodium is None or urine_sodium < 0:
        raise ValueError("Urine sodium must be zero or a positive number.")
    _positive(serum_sodium=serum_sodium, urine_creatinine=urine_creatinine, serum_creatinine=serum_creatinine)

    value = (urine_sodium * serum_creatinine * 100) / (serum_sodium * urine_creatinine)
    if value < 1:
        category = "Pre-renal AKI"
    elif value > 2:
        category = "Intrinsic AKI (ATN)"
    else:
        category = "Grey zone, consider other factors"
    return RenalResult(value=round(value, 2), category=category)


# -----------------------------
# UACR
# -----------------------------
MMOL_TO_MG_DL = 11.3


def uacr(urine_albumin: float, urine_creatinine: float, *, creatinine_unit: str = "mg/dL") -> RenalResult:
    """Albumin in mg/L; creatinine in mg/dL or mmol/L. Result in mg/g."""
    if urine_albumin is None or urine_albumin < 0:
        raise ValueError("Urine albumin must be zero or a positive number.")
    _positive(urine_creatinine=urine_creatinine)

    uc = urine_creatinine * MMOL_TO_MG_DL if creatinine_unit == "mmol/L" else urine_creatinine
    value = urine_albumin / uc * 1000

    if value < 30:
        category = "A1: Normal to mildly increased"
        description = "< 30 mg/g: No or mild albuminuria. Low CKD risk."
    elif value <= 300:
        category = "A2: Moderately increased (microalbuminuria)"
        description = "30-300 mg/g: Microalbuminuria, an early sign of kidney damage. Needs monitoring."
    else:
        category = "A3: Severely increased (macroalbuminuria)"
        description = "> 300 mg/g: Macroalbuminuria, significant kidney damage. Needs intervention."
    return RenalResult(value=round(value, 2), category=category, description=description)
