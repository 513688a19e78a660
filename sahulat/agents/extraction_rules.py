"""Per-locale regex rule tables for profile extraction.

Each locale is a complete, independent ``LocaleRules`` table. The extraction
algorithm in ``profile_parser`` only walks these tables, so adding a locale
means adding a table here and registering it in ``LOCALE_RULES``.

Ordering matters everywhere:
- enumerated fields (gender, education, income): groups are tried in the
  order declared and the first group with any matching pattern wins;
- numeric and free-text fields: patterns are tried in order, the first one
  whose capture passes validation wins;
- goals: every rule is tested, matches are collected in declaration order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from sahulat.models.profile import EducationLevel, Gender, IncomeLevel

Pattern = re.Pattern[str]


def _rx(*patterns: str) -> tuple[Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


@dataclass(frozen=True)
class LocaleRules:
    """Complete rule table for one locale."""

    language: str
    age: tuple[Pattern, ...]
    gender: tuple[tuple[Gender, tuple[Pattern, ...]], ...]
    education: tuple[tuple[EducationLevel, tuple[Pattern, ...]], ...]
    income: tuple[tuple[IncomeLevel, tuple[Pattern, ...]], ...]
    location: tuple[Pattern, ...]
    occupation: tuple[Pattern, ...]
    family_size: tuple[Pattern, ...]
    goals: tuple[tuple[str, Pattern], ...]
    disabilities: tuple[Pattern, ...]
    suggestions: Mapping[str, str]


# =============================================================================
# English
# =============================================================================

ENGLISH_RULES = LocaleRules(
    language="english",
    age=_rx(
        r"\b(\d{1,3})\s*(?:years?\s*old|y\.?o\b\.?)",
        r"\bage\s*(?:is\s*)?(\d{1,3})\b",
        r"\b(\d{1,3})\s*(?:years?)\b",
    ),
    gender=(
        (Gender.MALE, _rx(r"\bmale\b", r"\bman\b", r"\bboy\b", r"\bhe\b", r"\bhis\b")),
        (Gender.FEMALE, _rx(r"\bfemale\b", r"\bwoman\b", r"\bgirl\b", r"\bshe\b", r"\bher\b")),
        (Gender.OTHER, _rx(r"\bother\b", r"\bnon-binary\b", r"\btransgender\b")),
    ),
    education=(
        (EducationLevel.NONE, _rx(r"\bno\s*education\b", r"\billiterate\b", r"never\s*went\s*to\s*school")),
        (EducationLevel.PRIMARY, _rx(r"\bprimary\b", r"\belementary\b", r"\bgrade\s*[1-5]\b")),
        (EducationLevel.SECONDARY, _rx(r"\bsecondary\b", r"\bmiddle\s*school\b", r"\bgrade\s*[6-8]\b")),
        (EducationLevel.HIGH_SCHOOL, _rx(r"\bhigh\s*school\b", r"\bmatric\b", r"\bgrade\s*(?:9|10|11|12)\b")),
        (EducationLevel.BACHELOR, _rx(r"\bbachelor", r"\bb\.?s\.?c?\b", r"\bb\.?a\.?\b", r"\bundergraduate\b")),
        (EducationLevel.MASTER, _rx(r"\bmaster", r"\bm\.?s\.?c?\b", r"\bm\.?a\.?\b", r"\bgraduate\b")),
        (EducationLevel.PHD, _rx(r"\bph\.?d\b", r"\bdoctorate\b", r"\bdoctor\b")),
        (EducationLevel.VOCATIONAL, _rx(r"\bvocational\b", r"\bdiploma\b", r"\bcertificate\b")),
        (EducationLevel.TECHNICAL, _rx(r"\btechnical\b", r"\bpolytechnic\b", r"\bengineering\b")),
    ),
    income=(
        (IncomeLevel.LOW, _rx(r"\blow\s*income\b", r"\bpoor\b", r"\bstruggling\b", r"\bminimum\s*wage\b")),
        (IncomeLevel.MEDIUM, _rx(r"\bmedium\s*income\b", r"\baverage\b", r"\bmiddle\s*class\b")),
        (IncomeLevel.HIGH, _rx(r"\bhigh\s*income\b", r"\bwell\s*off\b", r"\baffluent\b")),
        (IncomeLevel.VERY_HIGH, _rx(r"\bvery\s*high\s*income\b", r"\brich\b", r"\bwealthy\b")),
    ),
    location=_rx(
        r"\b(?:from|in|live\s*in|located\s*in)\s+([A-Za-z\s]+(?:city|province|state|country)?)",
        r"([A-Za-z\s]+(?:city|province|state|country))\b",
    ),
    occupation=_rx(
        r"\b(?:work\s*as|job\s*is|occupation\s*is)\s+(?:an?\s+)?([A-Za-z\s]+)",
        r"\b(?:am|is)\s+an?\s+([A-Za-z\s]+)",
    ),
    family_size=_rx(
        r"\b(\d+)\s*(?:family\s*members?|people\s*in\s*(?:my\s*)?family|children)\b",
        r"\bfamily\s*of\s*(\d+)\b",
    ),
    goals=(
        ("scholarship", re.compile(r"scholarship", re.IGNORECASE)),
        ("grant", re.compile(r"\bgrants?\b", re.IGNORECASE)),
        ("loan", re.compile(r"\bloans?\b", re.IGNORECASE)),
        ("education", re.compile(r"\beducation", re.IGNORECASE)),
        ("study", re.compile(r"\bstud(?:y|ies|ying)\b", re.IGNORECASE)),
        ("university", re.compile(r"\buniversit(?:y|ies)\b", re.IGNORECASE)),
        ("skill", re.compile(r"\bskills?\b", re.IGNORECASE)),
        ("training", re.compile(r"\btraining\b", re.IGNORECASE)),
        ("job", re.compile(r"\bjobs?\b", re.IGNORECASE)),
        ("employment", re.compile(r"\bemployment\b", re.IGNORECASE)),
        ("business", re.compile(r"\bbusiness", re.IGNORECASE)),
        ("startup", re.compile(r"\bstart-?ups?\b", re.IGNORECASE)),
        ("housing", re.compile(r"\bhousing\b", re.IGNORECASE)),
        ("home", re.compile(r"\bhomes?\b", re.IGNORECASE)),
        ("medical", re.compile(r"\bmedical\b", re.IGNORECASE)),
        ("health", re.compile(r"\bhealth", re.IGNORECASE)),
        ("disability", re.compile(r"\bdisabilit(?:y|ies)\b", re.IGNORECASE)),
    ),
    disabilities=_rx(
        r"\bdisabilit(?:y|ies)\b", r"\bdisabled\b", r"\bwheelchair\b",
        r"\bblind\b", r"\bdeaf\b", r"\bmobility\b",
    ),
    suggestions=MappingProxyType({
        "age": "Please provide your age",
        "education": "Please mention your education level",
        "location": "Please provide your location",
        "goals": "Please mention your goals (scholarship, job, etc.)",
    }),
)


# =============================================================================
# Urdu
# =============================================================================

# Arabic-script letters; used to bound free-text captures
_URDU_TEXT = r"[\u0600-\u06FF\s]+"

URDU_RULES = LocaleRules(
    language="urdu",
    age=_rx(
        r"(\d{1,3})\s*(?:سالہ\s*ہوں|سالہ\s*ہیں|سالہ|سال)",
        r"عمر\s*(?:ہے\s*)?(\d{1,3})",
        r"(\d{1,3})\s*(?:سالہ)",
    ),
    # "وہ" is listed under both male and female; male is declared first and wins
    gender=(
        (Gender.MALE, _rx(r"مرد", r"لڑکا", r"وہ", r"اس\s*کا")),
        (Gender.FEMALE, _rx(r"عورت", r"لڑکی", r"وہ", r"اس\s*کی")),
        (Gender.OTHER, _rx(r"دیگر", r"غیر\s*ثنائی")),
    ),
    education=(
        (EducationLevel.NONE, _rx(r"کوئی\s*تعلیم\s*نہیں", r"ان\s*پڑھ")),
        (EducationLevel.PRIMARY, _rx(r"پرائمری", r"ابتدائی", r"کلاس\s*[1-5]")),
        (EducationLevel.SECONDARY, _rx(r"ثانوی", r"مڈل", r"کلاس\s*[6-8]")),
        (EducationLevel.HIGH_SCHOOL, _rx(r"ہائی\s*اسکول", r"میٹرک", r"کلاس\s*(?:9|10|11|12)")),
        (EducationLevel.BACHELOR, _rx(r"بیچلر", r"گریجویٹ", r"انڈرگریجویٹ")),
        (EducationLevel.MASTER, _rx(r"ماسٹر", r"پوسٹ\s*گریجویٹ")),
        (EducationLevel.PHD, _rx(r"پی\s*ایچ\s*ڈی", r"ڈاکٹریٹ")),
        (EducationLevel.VOCATIONAL, _rx(r"ووکیشنل", r"ڈپلومہ", r"سرٹیفکیٹ")),
        (EducationLevel.TECHNICAL, _rx(r"ٹیکنیکل", r"انجینئرنگ")),
    ),
    income=(
        (IncomeLevel.LOW, _rx(r"کم\s*آمدنی", r"غریب", r"مفلس")),
        (IncomeLevel.MEDIUM, _rx(r"درمیانی\s*آمدنی", r"اوسط")),
        (IncomeLevel.HIGH, _rx(r"زیادہ\s*آمدنی", r"امیر")),
        (IncomeLevel.VERY_HIGH, _rx(r"بہت\s*زیادہ\s*آمدنی", r"مالدار")),
    ),
    location=_rx(
        r"(?:سے|میں|رہتا\s*ہوں|رہتی\s*ہوں)\s*(" + _URDU_TEXT + ")",
        r"(" + _URDU_TEXT + r"(?:شہر|صوبہ|ملک))",
    ),
    occupation=_rx(
        r"(?:کام\s*کرتا\s*ہوں|کام\s*کرتی\s*ہوں|ملازمت\s*ہے)\s*(" + _URDU_TEXT + ")",
        r"(?:ہوں|ہیں)\s*(" + _URDU_TEXT + ")",
    ),
    family_size=_rx(
        r"(\d+)\s*(?:خاندان|افراد|بچے)",
        r"خاندان\s*میں\s*(\d+)",
    ),
    # Urdu goal words map onto the same tokens as English so searches stay uniform
    goals=(
        ("scholarship", re.compile(r"وظیفہ")),
        ("grant", re.compile(r"گرانٹ")),
        ("loan", re.compile(r"قرضہ")),
        ("education", re.compile(r"تعلیم")),
        ("study", re.compile(r"پڑھائی")),
        ("university", re.compile(r"یونیورسٹی")),
        ("skill", re.compile(r"ہنر")),
        ("training", re.compile(r"تربیت")),
        ("employment", re.compile(r"ملازمت")),
        ("business", re.compile(r"کاروبار")),
        ("home", re.compile(r"گھر")),
        ("health", re.compile(r"صحت")),
        ("disability", re.compile(r"معذوری")),
    ),
    disabilities=_rx(r"معذوری", r"معذور", r"اندھا", r"بہرا", r"چلنے\s*میں\s*مشکل"),
    suggestions=MappingProxyType({
        "age": "براہ کرم اپنی عمر بتائیں",
        "education": "براہ کرم اپنی تعلیمی سطح بتائیں",
        "location": "براہ کرم اپنا مقام بتائیں",
        "goals": "براہ کرم اپنے اہداف بتائیں (وظیفہ، ملازمت، وغیرہ)",
    }),
)


DEFAULT_LOCALE = "en"

LOCALE_RULES: Mapping[str, LocaleRules] = MappingProxyType({
    "en": ENGLISH_RULES,
    "ur": URDU_RULES,
})


def rules_for(locale: str) -> LocaleRules:
    """Return the rule table for a locale, or the default table if unknown."""
    return LOCALE_RULES.get(locale, LOCALE_RULES[DEFAULT_LOCALE])
