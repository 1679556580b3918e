# face_reading/services/majors.py
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel

from face_reading.schemas.insight_schema import Indicator, ManifestingPoint


def point(indicator: Indicator, title: str, description: str) -> ManifestingPoint:
    return ManifestingPoint(indicator=indicator, title=title, description=description)


# Reference data for every recommendable track (major)
MAJOR_REFERENCE_STORE_DATA = {
    "RPL": {
        "code": "RPL",
        "name": "Rekayasa Perangkat Lunak",
        "note": "Cocok untuk pemikir analitis yang senang membangun solusi digital.",
        "reasons": [
            point(
                Indicator.STRENGTH,
                "Logika terstruktur",
                "Mood yang stabil menandakan kemampuan menganalisis pola dan membangun solusi bertahap.",
            ),
            point(
                Indicator.OPPORTUNITY,
                "Eksperimen digital",
                "Gunakan rasa ingin tahu untuk mencoba membuat aplikasi atau automasi sederhana.",
            ),
        ],
        "focus_step": "Luangkan 30 menit per hari untuk latihan logika atau coding dasar di platform gratis.",
        "habits": [
            "Catat ide masalah yang ingin kamu pecahkan lalu coba terjemahkan ke konsep aplikasi.",
            "Ikut komunitas pemrograman pemula seminggu sekali untuk review kode sederhana.",
        ],
    },
    "DKV": {
        "code": "DKV",
        "name": "Desain Komunikasi Visual",
        "note": "Selaras bagi yang ekspresif dan ingin menyalurkan kreativitas visual.",
        "reasons": [
            point(
                Indicator.STRENGTH,
                "Ekspresi kreatif",
                "Energi ekspresif cocok diterjemahkan menjadi karya visual dan storytelling kuat.",
            ),
            point(
                Indicator.OPPORTUNITY,
                "Sensitivitas estetika",
                "Asah kepekaan warna dan komposisi lewat latihan visual harian.",
            ),
        ],
        "focus_step": "Buat moodboard mingguan dari referensi visual untuk melatih rasa estetika.",
        "habits": [
            "Lakukan sketsa cepat 10 menit setiap hari dengan tema berbeda.",
            "Unggah karya ke media sosial atau forum desain untuk meminta umpan balik.",
        ],
    },
    "TKJ": {
        "code": "TKJ",
        "name": "Teknik Komputer dan Jaringan",
        "note": "Pas untuk pribadi teknis yang suka merakit dan menjaga sistem teknologi.",
        "reasons": [
            point(
                Indicator.STRENGTH,
                "Ketekunan teknis",
                "Mood fokus menunjukkan ketelitian tinggi saat memecahkan masalah perangkat.",
            ),
            point(
                Indicator.OPPORTUNITY,
                "Problem solving nyata",
                "Gunakan rasa penasaran untuk membongkar dan memahami cara kerja jaringan.",
            ),
        ],
        "focus_step": "Kerjakan proyek mini jaringan atau perakitan perangkat setiap pekan dan dokumentasikan prosesnya.",
        "habits": [
            "Tulis checklist troubleshooting setiap kali menemukan masalah teknis.",
            "Ikut kanal komunitas teknologi untuk berdiskusi minimal dua kali seminggu.",
        ],
    },
}

# Canonical order: primary first, then the remaining codes in this order as alternatives.
MAJOR_CODES: List[str] = list(MAJOR_REFERENCE_STORE_DATA.keys())
DEFAULT_MAJOR_CODE = "RPL"


class MajorReference(BaseModel):
    code: str
    name: str
    note: str
    reasons: List[ManifestingPoint]
    focus_step: str
    habits: List[str]


_MAJORS: Dict[str, MajorReference] = {
    code: MajorReference(**data) for code, data in MAJOR_REFERENCE_STORE_DATA.items()
}


def is_major_code(value: Optional[str]) -> bool:
    return (value or "").strip().upper() in _MAJORS


def normalize_major_code(value: Optional[str]) -> str:
    upper = (value or "").strip().upper()
    return upper if upper in _MAJORS else DEFAULT_MAJOR_CODE


def get_major(code: Optional[str]) -> MajorReference:
    return _MAJORS[normalize_major_code(code)]


def resolve_major_name(code: Optional[str], provided_name: Optional[str] = None) -> str:
    # A provided name only counts when it belongs to a recognized code.
    if is_major_code(code) and provided_name and provided_name.strip():
        return provided_name.strip()
    return get_major(code).name
