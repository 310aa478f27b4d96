"""Heuristic scoring of free-text music analyses returned by the model."""

from __future__ import annotations

from typing import Any

_LENGTH_TARGET_CHARS = 2000

MUSICAL_TERMS = (
    "chord",
    "progression",
    "melody",
    "rhythm",
    "dynamics",
    "tempo",
    "key",
    "scale",
    "harmony",
    "instrumentation",
    "orchestration",
    "modulation",
    "voice leading",
    "articulation",
    "phrasing",
    "texture",
)
STRUCTURE_TERMS = ("opening", "development", "climax", "resolution", "section", "build")
TECHNICAL_TERMS = ("reverb", "delay", "compression", "eq", "filter", "effects", "panning", "stereo", "mix", "production")

TERMINOLOGY_CATEGORIES: dict[str, tuple[int, tuple[str, ...]]] = {
    "harmony": (
        25,
        (
            "chord progression",
            "roman numeral",
            "voice leading",
            "modulation",
            "cadence",
            "resolution",
            "suspension",
            "extension",
            "alteration",
            "secondary dominant",
            "tritone substitution",
            "modal interchange",
        ),
    ),
    "rhythm": (
        20,
        (
            "time signature",
            "polyrhythm",
            "hemiola",
            "syncopation",
            "metric modulation",
            "subdivision",
            "tuplet",
            "cross-rhythm",
            "displacement",
            "augmentation",
            "diminution",
        ),
    ),
    "melody": (
        20,
        (
            "interval",
            "scale degree",
            "step",
            "leap",
            "contour",
            "sequence",
            "motif",
            "phrase",
            "period",
            "antecedent",
            "consequent",
            "inversion",
            "retrograde",
        ),
    ),
    "orchestration": (
        15,
        (
            "timbre",
            "articulation",
            "dynamics",
            "texture",
            "voicing",
            "doubling",
            "register",
            "tessitura",
            "color",
            "blend",
            "balance",
            "scoring",
        ),
    ),
    "form": (
        10,
        (
            "section",
            "development",
            "recapitulation",
            "bridge",
            "transition",
            "climax",
            "coda",
            "introduction",
            "verse",
            "chorus",
            "build",
            "breakdown",
        ),
    ),
    "production": (
        10,
        (
            "reverb",
            "delay",
            "compression",
            "eq",
            "filter",
            "saturation",
            "panning",
            "stereo",
            "processing",
            "effects",
            "mix",
            "master",
        ),
    ),
}


def _found_terms(text: str, terms: tuple[str, ...]) -> list[str]:
    return [term for term in terms if term in text]


def _weighted(found: int, total: int, weight: float) -> float:
    return min((found / total) * weight, weight)


def calculate_quality_score(analysis: str) -> int:
    text = (analysis or "").lower()
    score = min((len(text) / _LENGTH_TARGET_CHARS) * 30, 30)
    score += _weighted(len(_found_terms(text, MUSICAL_TERMS)), len(MUSICAL_TERMS), 40)
    score += _weighted(len(_found_terms(text, STRUCTURE_TERMS)), len(STRUCTURE_TERMS), 20)
    score += _weighted(len(_found_terms(text, TECHNICAL_TERMS)), len(TECHNICAL_TERMS), 10)
    return round(score)


def get_musical_terminology_grade(score: float) -> str:
    if score >= 90:
        return "A+ (Professional Composer Level)"
    if score >= 80:
        return "A (Advanced Musical Knowledge)"
    if score >= 70:
        return "B+ (Strong Musical Terminology)"
    if score >= 60:
        return "B (Good Musical Understanding)"
    if score >= 50:
        return "C+ (Basic Musical Terms)"
    if score >= 40:
        return "C (Limited Musical Vocabulary)"
    return "D (Insufficient Musical Terminology)"


def validate_musical_terminology(analysis: str) -> dict[str, Any]:
    text = (analysis or "").lower()
    categories: dict[str, dict[str, Any]] = {}
    strengths: list[str] = []
    missing_elements: list[str] = []
    total_score = 0.0

    for category, (weight, terms) in TERMINOLOGY_CATEGORIES.items():
        found = _found_terms(text, terms)
        category_score = _weighted(len(found), len(terms), weight)
        total_score += category_score
        categories[category] = {
            "score": round(category_score),
            "maxScore": weight,
            "termsFound": len(found),
            "totalTerms": len(terms),
            "percentage": round(len(found) / len(terms) * 100),
            "foundTerms": found,
        }
        if len(found) >= len(terms) * 0.5:
            strengths.append(category)
        if len(found) < len(terms) * 0.3:
            missing_elements.append(category)

    score = round(total_score)
    return {
        "score": score,
        "grade": get_musical_terminology_grade(score),
        "categories": categories,
        "strengths": strengths,
        "missingElements": missing_elements,
    }
