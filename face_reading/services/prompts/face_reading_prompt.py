# face_reading/services/prompts/face_reading_prompt.py
from __future__ import annotations

from typing import Dict, List

from face_reading.schemas.insight_schema import AgeInsight, ExpressionInsight
from face_reading.services.age import describe_age_stage, format_age_range_text, stage_reference_age
from face_reading.services.majors import get_major

# Soft steering hint for the generator, not a constraint
EXPRESSION_MAJOR_AFFINITY: Dict[str, List[str]] = {
    "happiness": ["DKV", "RPL", "TKJ"],
    "surprise": ["DKV", "RPL", "TKJ"],
    "sadness": ["RPL", "DKV", "TKJ"],
    "anger": ["TKJ", "RPL", "DKV"],
    "disgust": ["TKJ", "RPL", "DKV"],
    "fear": ["TKJ", "RPL", "DKV"],
    "contempt": ["RPL", "TKJ", "DKV"],
    "neutral": ["RPL", "TKJ", "DKV"],
    "unknown": ["DKV", "RPL", "TKJ"],
    "default": ["RPL", "DKV", "TKJ"],
}

IMAGE_HINT_LENGTH = 64

# System instruction sent with every request (fixed JSON output shape)
SYSTEM_PROMPT = " ".join([
    "Kamu adalah peramal wajah modern yang komunikatif, fokus pada pengembangan diri.",
    "Gunakan bahasa Indonesia, tone positif, dan hindari klaim medis.",
    "Balas hanya dalam format JSON dengan struktur:",
    "{",
    '  "expressionSummary": {',
    '     "headline": "string singkat",',
    '     "energyTone": "1 kalimat",',
    '     "personalityHighlight": "1 kalimat",',
    '     "confidenceModifier": 0.0',
    "  },",
    '  "manifesting": {',
    '     "pekerjaanKarir": [',
    '        {"title": "string", "description": "maks 2 kalimat", "indicator": "strength|opportunity|warning"}',
    "     ],",
    '     "masaDepan": [',
    '        {"title": "string", "description": "maks 2 kalimat", "indicator": "strength|opportunity|warning"}',
    "     ]",
    "  },",
    '  "rekomendasiJurusan": {',
    '     "utama": {',
    '        "kode": "RPL atau DKV atau TKJ",',
    '        "nama": "string",',
    '        "alasan": [',
    '           {"title": "string", "description": "maks 2 kalimat", "indicator": "strength|opportunity|warning"}',
    "        ],",
    '        "langkahFokus": "1 kalimat praktis",',
    '        "kebiasaanPendukung": ["bullet singkat", "..."]',
    "     },",
    '     "alternatif": [',
    '        {"kode": "RPL|DKV|TKJ", "nama": "string", "catatan": "1 kalimat"}',
    "     ]",
    "  }",
    "}",
    "Pastikan setiap indikator selaras dengan tone positif, hindari klaim medis.",
    "Batasi kode jurusan hanya pada RPL, DKV, atau TKJ.",
    "Variasikan jurusan utama sesuai konteks ekspresi dan usia, jangan terpaku pada satu jurusan seperti RPL saja.",
    "Berikan wawasan lintas disiplin (contoh: peluang industri, komunitas, proyek kolaboratif) agar insight terasa luas dan tidak monoton.",
])

USER_PROMPT_TEMPLATE = """Analisis wajah berikut untuk membuat hasil face reading:
- Ekspresi utama: {expression_narrative}.
- Label model: {expression_label} dengan confidence {expression_confidence:.1f}%.
- Hash singkat gambar (untuk referensi saja): {image_hint}.
- Gunakan ekspresi sebagai dasar untuk menyusun manifesting karier dan masa depan.
- Pertimbangkan gambaran umum face reading modern (potensi, karakter, peluang).
- Fokuskan rekomendasi jurusan pada RPL, DKV, atau TKJ. Pilih satu sebagai jurusan utama dan jadikan dua lainnya sebagai alternatif dengan catatan singkat yang relevan.
- Langkah fokus harus aplikatif untuk pelajar (misal: aktivitas penguatan keterampilan, proyek mini, kebiasaan belajar).
- Kebiasaan pendukung gunakan format bullet pendek yang mendukung jurusan utama.
{age_line}
- Prioritas jurusan yang umum cocok untuk ekspresi ini: {affinity}. Gunakan sebagai referensi agar variasi jurusan utama tetap seimbang dan tidak monoton.
Jika informasi ekspresi kurang jelas, buat analisis umum yang tetap relevan dan positif."""


def get_major_affinity(label: str) -> List[str]:
    return EXPRESSION_MAJOR_AFFINITY.get(label.lower(), EXPRESSION_MAJOR_AFFINITY["default"])


def build_age_line(age: AgeInsight) -> str:
    range_text = format_age_range_text(age.range, age.estimated)
    stage = describe_age_stage(stage_reference_age(age))
    if range_text:
        return (
            f"- Estimasi umur visual: {range_text} (keyakinan {round(age.confidence * 100)}%). "
            f"Tulis rekomendasi yang relevan bagi {stage.prompt}."
        )
    return f"- Usia visual belum terbaca dengan pasti; gunakan bahasa yang tetap ramah untuk {stage.prompt}."


def build_user_prompt(expression: ExpressionInsight, age: AgeInsight, image_hint: str) -> str:
    affinity = ", ".join(f"{code} ({get_major(code).name})" for code in get_major_affinity(expression.label))

    return USER_PROMPT_TEMPLATE.format(
        expression_narrative=expression.narrative,
        expression_label=expression.label,
        expression_confidence=expression.confidence * 100,
        image_hint=image_hint[:IMAGE_HINT_LENGTH],
        age_line=build_age_line(age),
        affinity=affinity,
    )
