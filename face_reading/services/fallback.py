# face_reading/services/fallback.py
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from face_reading.schemas.insight_schema import (
    AlternativeMajorDraft,
    ExpressionInsight,
    ExpressionSummaryDraft,
    Indicator,
    ManifestingDraft,
    ManifestingPoint,
    NarrativeResult,
    PointDraft,
    PrimaryMajorDraft,
    RecommendationDraft,
)
from face_reading.services.majors import MAJOR_CODES, get_major, is_major_code, normalize_major_code, point

S = Indicator.STRENGTH
O = Indicator.OPPORTUNITY
W = Indicator.WARNING

# Per-expression templates used when narrative generation fails
FALLBACK_TEMPLATE_STORE_DATA = {
    "default": {
        "energy_tone": "Energi wajah stabil; manfaatkan untuk menjaga ritme eksplorasi kreatif secara konsisten.",
        "personality": "Karakter adaptif dan tangguh, tinggal menguatkan keberanian menampilkan karya.",
        "major": "DKV",
        "career": [
            point(S, "Sense visual terarah", "Ekspresimu menunjukkan kemampuan menjaga detail sehingga cocok merancang konten visual yang rapi."),
            point(O, "Perkuat storytelling", "Coba rutin membuat moodboard dan menarasikan ide agar pesan kreatif tersampaikan kuat."),
        ],
        "future": [
            point(O, "Bangun portofolio lintas media", "Eksperimen dengan ilustrasi, motion, dan desain UI supaya identitas kreatif makin terlihat."),
            point(W, "Jaga konsistensi ritme", "Atur jadwal istirahat agar inspirasi tetap segar dan tidak burnout saat menyelesaikan proyek panjang."),
        ],
        "reasons": [
            point(S, "Studio kreatif lengkap", "DKV menyediakan laboratorium multimedia dan mentor visual untuk mengasah ide menjadi karya nyata."),
            point(O, "Eksperimen lintas format", "Setiap mata pelajaran DKV membuka peluang mencoba berbagai media sehingga potensi kreatifmu tidak monoton."),
        ],
        "confidence_modifier": -0.15,
        "alternative_notes": {
            "RPL": "Jika ingin mengemas ide ke aplikasi interaktif, RPL membantumu menerjemahkan konsep ke produk digital.",
            "TKJ": "Bila tertarik pada perangkat dan jaringan, TKJ menawarkan praktik teknis yang melatih ketelitianmu.",
        },
    },
    "neutral": {
        "energy_tone": "Ekspresi netral menggambarkan kestabilan dan kesiapan menerima pelajaran baru.",
        "personality": "Karakter fleksibel, mudah menyesuaikan dengan berbagai situasi belajar.",
        "major": "TKJ",
        "career": [
            point(S, "Kerapian sistem", "Ketelitianmu membantu menjaga perangkat dan jaringan tetap stabil meski di bawah tekanan."),
            point(O, "Kolaborasi troubleshooting", "Libatkan teman untuk menyelesaikan kasus jaringan sederhana agar komunikasi teknismu semakin matang."),
        ],
        "future": [
            point(O, "Spesialis infrastruktur digital", "Bidang jaringan, cloud dasar, atau keamanan memberi banyak jalur peningkatan karier."),
            point(W, "Terus update teknologi", "Jadwalkan belajar rutin agar tidak tertinggal perkembangan tools dan standar terbaru."),
        ],
        "alternative_notes": {
            "RPL": "Jika ingin menulis automasi untuk solusi perangkat, RPL bisa membantu memadukan logika dan sistem.",
            "DKV": "Untuk menyalurkan sisi kreatif, DKV menawarkan eksplorasi visual yang segar.",
        },
    },
    "happiness": {
        "energy_tone": "Energi wajah ceria dan hangat, mudah membangun situasi kolaboratif.",
        "personality": "Karakter supel serta ekspresif, cocok memimpin aktivitas kreatif.",
        "major": "DKV",
        "career": [
            point(S, "Karisma tim", "Aura positif memudahkan mengambil peran koordinasi dalam proyek bersama."),
            point(O, "Salurkan ide visual", "Eksplor kelas multimedia atau desain untuk menyalurkan imajinasi."),
        ],
        "future": [
            point(O, "Bangun portofolio", "Kumpulkan hasil karya tiap bulan sebagai bukti konsistensi kreativitas."),
            point(W, "Atur prioritas", "Gunakan to-do list harian agar energi tidak terpecah ke terlalu banyak aktivitas."),
        ],
        "reasons": [
            point(S, "Studio kreatif lengkap", "Jurusan DKV menyediakan fasilitas desain dan mentor kreatif untuk menyalurkan imajinasi."),
            point(O, "Portofolio kuat", "Tiap proyek desain bisa dijadikan portofolio untuk menembus industri kreatif sejak dini."),
        ],
        "focus_step": "Susun portofolio mini berisi proyek sekolah atau karya mandiri dalam 3 bulan ke depan.",
        "habits": [
            "Dokumentasikan progres proyek mingguan dalam bentuk foto atau video pendek.",
            "Ikut komunitas kreatif daring untuk bertukar ide dan feedback.",
        ],
        "alternative_notes": {
            "RPL": "Jika ingin menyalurkan ide ke aplikasi interaktif, RPL bisa jadi kombinasi yang seru.",
            "TKJ": "Energi positifmu juga bisa menghidupkan tim teknis di jurusan TKJ.",
        },
    },
    "anger": {
        "energy_tone": "Energi tegas menonjol, cocok untuk peran yang membutuhkan keberanian keputusan.",
        "personality": "Karakter kompetitif dan berorientasi hasil, butuh kanal produktif agar energi tersalurkan.",
        "major": "TKJ",
        "career": [
            point(S, "Kecepatan respon", "Ketegasanmu membantu menyelesaikan tugas operasional di bawah tekanan."),
            point(W, "Kelola emosi", "Latih teknik napas atau olahraga ringan sebelum mengambil keputusan penting."),
        ],
        "future": [
            point(O, "Peran kepemimpinan", "Ambil posisi koordinator proyek untuk menyalurkan insting memimpin."),
            point(W, "Bangun empati", "Sisihkan waktu mendengar masukan tim agar keputusan lebih diterima."),
        ],
        "reasons": [
            point(S, "Tantangan teknis nyata", "TKJ memberi banyak praktik lapangan untuk menyalurkan energi kompetitifmu."),
            point(O, "Simulasi industri", "Kegiatan prakerin menyiapkan mental menghadapi tekanan kerja sebenarnya."),
        ],
        "focus_step": "Terapkan metode GTD (Getting Things Done) sederhana untuk menjaga fokus prioritas.",
        "habits": [
            "Mulai hari dengan 5 menit pernapasan atau peregangan.",
            "Catat pemicu emosi dan siapkan respon alternatif yang lebih tenang.",
        ],
        "alternative_notes": {
            "RPL": "Jika ingin menyalurkan ketegasan lewat problem solving digital, RPL bisa dicoba.",
            "DKV": "Energi besar juga dapat diarahkan membuat konten berpengaruh di DKV.",
        },
    },
    "sadness": {
        "energy_tone": "Energi terlihat lembut dan empatik, mudah menangkap perasaan orang lain.",
        "personality": "Karakter peduli, cocok pada peran pelayanan atau pendampingan.",
        "major": "RPL",
        "career": [
            point(S, "Empati tinggi", "Kepekaan emosimu memberi nilai tambah pada bidang sosial atau pendidikan."),
            point(O, "Bangun daya juang", "Perkuat ketahanan mental melalui journaling dan dukungan komunitas."),
        ],
        "future": [
            point(O, "Solusi berdampak", "Menciptakan aplikasi bantu belajar atau kesehatan mental bisa jadi fokus menarik."),
            point(W, "Jaga semangat", "Tetapkan penghargaan diri setiap kali menyelesaikan modul atau proyek."),
        ],
        "reasons": [
            point(S, "Kolaborasi empatik", "Proyek RPL menuntut kerja tim sehingga empati kamu menjadi keunggulan."),
            point(O, "Transformasi ide jadi solusi", "Mood sensitif mempermudahmu merancang fitur yang benar-benar membantu pengguna."),
        ],
        "habits": [
            "Refleksikan emosi dan ide solusi dalam jurnal setiap malam.",
            "Libatkan teman untuk pair programming ringan seminggu sekali.",
        ],
        "alternative_notes": {
            "DKV": "Jika ingin menyalurkan emosi lewat visual, DKV bisa menjadi ruang berekspresi.",
            "TKJ": "TKJ cocok bila kamu ingin fokus ke sistem yang menjamin kenyamanan banyak orang.",
        },
    },
    "surprise": {
        "energy_tone": "Ekspresi penuh rasa ingin tahu, cepat menangkap informasi baru.",
        "personality": "Karakter eksploratif dan adaptif, senang mencoba hal berbeda.",
        "major": "RPL",
        "career": [
            point(S, "Respons cepat", "Kamu sigap mengatasi perubahan, cocok di bidang teknologi atau event."),
            point(O, "Struktur belajar", "Susun kerangka belajar agar rasa penasaran tetap terarah."),
        ],
        "future": [
            point(O, "Inovasi berkelanjutan", "Bidang startup atau riset terapan memberi ruang eksplorasi tanpa batas."),
            point(W, "Hindari loncat-loncat", "Tentukan satu fokus utama tiap semester agar hasil terasa nyata."),
        ],
        "reasons": [
            point(S, "Eksperimen terencana", "RPL memungkinkanmu menguji ide inovatif melalui prototipe digital."),
            point(O, "Jalur portofolio", "Setiap aplikasi kecil bisa dijadikan studi kasus untuk menonjolkan rasa ingin tahu."),
        ],
        "focus_step": "Ambil satu proyek ekstrakurikuler dan jadikan studi kasus portofolio.",
        "habits": [
            "Gunakan papan ide untuk menampung inspirasi sebelum dieksekusi.",
            "Review pembelajaran tiap Jumat untuk memilih ide teratas minggu berikutnya.",
        ],
        "alternative_notes": {
            "DKV": "Jika imajinasi visualmu menguat, DKV memberi ruang eksplorasi konsep unik.",
            "TKJ": "TKJ cocok bila kamu ingin mendalami perangkat yang mendukung ide-ide besar.",
        },
    },
    "disgust": {
        "energy_tone": "Ekspresi menunjukkan standar tinggi dan keinginan menjaga kualitas.",
        "personality": "Karakter perfeksionis, teliti terhadap detail dan lingkungan.",
        "major": "TKJ",
        "career": [
            point(S, "Kontrol kualitas", "Kepekaanmu terhadap detail cocok di bidang kuliner, kecantikan, atau produksi."),
            point(O, "Kelola ekspektasi", "Belajar membagi standar: mana yang wajib tinggi dan mana yang bisa fleksibel."),
        ],
        "future": [
            point(O, "Spesialis kualitas", "Pertimbangkan profesi QC, UX, atau desain interior yang menuntut cita rasa."),
            point(W, "Hindari overkritik", "Gunakan sudut pandang apresiasi sebelum memberi evaluasi pada orang lain."),
        ],
        "reasons": [
            point(S, "Kerapian sistem", "TKJ membiasakan standar check list dan dokumentasi sehingga perfeksimu tersalurkan."),
            point(O, "Praktik bertahap", "Setiap proyek jaringan melatihmu menilai kualitas konfigurasi secara rinci."),
        ],
        "focus_step": "Buat checklist mutu pribadi sebelum memulai dan selesai mengerjakan proyek.",
        "habits": [
            "Latihan sensory check selama 10 menit tiap hari.",
            "Berikan apresiasi diri atas progres kecil untuk menjaga motivasi.",
        ],
        "alternative_notes": {
            "RPL": "Jika ingin mengontrol kualitas software, RPL memberi ruang testing dan QA.",
            "DKV": "Ketekunan detailmu juga bermanfaat menciptakan karya visual yang presisi di DKV.",
        },
    },
    "fear": {
        "energy_tone": "Ekspresi berhati-hati menunjukkan kebutuhan akan rasa aman sebelum melangkah.",
        "personality": "Karakter analitis namun membutuhkan dorongan kepercayaan diri.",
        "major": "TKJ",
        "career": [
            point(S, "Detil dan teliti", "Kehati-hatianmu cocok di bidang riset, akuntansi, atau kontrol kualitas."),
            point(O, "Bangun keberanian", "Mulai ambil proyek kecil bertahap untuk melatih percaya diri."),
        ],
        "future": [
            point(O, "Perencanaan matang", "Profesi analis data atau perencana keuangan selaras dengan gaya berpikir sistematismu."),
            point(W, "Atasi overthinking", "Gunakan teknik 5-4-3-2-1 atau journaling untuk meredam kekhawatiran."),
        ],
        "reasons": [
            point(S, "Sistem yang aman", "TKJ mengajarkan cara menjaga jaringan tetap stabil sehingga selaras dengan kebutuhanmu akan rasa aman."),
            point(O, "Proyek bertahap", "Pembelajaran praktikum memungkinkanmu menaikkan percaya diri setahap demi setahap."),
        ],
        "focus_step": "Susun rencana mingguan berisi tiga prioritas utama agar fokus mudah dijaga.",
        "habits": [
            "Gunakan daftar afirmasi positif setiap pagi.",
            "Cek-in emosi di tengah hari dengan skala 1-5 lalu sesuaikan aktivitas.",
        ],
        "alternative_notes": {
            "RPL": "Jika ingin belajar membangun solusi yang membantu orang banyak, RPL memberimu pijakan aman.",
            "DKV": "Menyalurkan rasa hati-hati lewat karya visual di DKV bisa menjadi terapi kreatif.",
        },
    },
    "contempt": {
        "energy_tone": "Ekspresi kritis menandakan intuisi tajam dalam menilai kondisi.",
        "personality": "Karakter analitis dan tegas, cocok menjadi penasehat atau strategi.",
        "major": "RPL",
        "career": [
            point(S, "Analisis tajam", "Kemampuan menilai cepat membantu di bidang hukum, debat, atau riset kebijakan."),
            point(W, "Bangun empati komunikatif", "Sertakan langkah solutif saat menyampaikan kritik agar penerimaan lebih baik."),
        ],
        "future": [
            point(O, "Peran strategi", "Pertimbangkan profesi konsultan, analis bisnis, atau content strategist."),
            point(W, "Jaga fleksibilitas", "Latih melihat sisi positif agar tidak terjebak pada penilaian yang terlalu keras."),
        ],
        "reasons": [
            point(S, "Logika tajam", "RPL memfasilitasi pola pikir kritis lewat debugging dan analisis sistem."),
            point(O, "Solusi aplikatif", "Setiap kritik bisa diterjemahkan menjadi fitur baru pada aplikasi yang kamu bangun."),
        ],
        "focus_step": "Setiap memberi evaluasi, sertakan minimal dua apresiasi dan satu alternatif solusi.",
        "habits": [
            "Latihan menulis opini dengan format sandwich feedback.",
            "Ikuti konten atau buku tentang empati dan komunikasi asertif.",
        ],
        "alternative_notes": {
            "DKV": "Jika ingin mengasah kritik visual, DKV memberimu ruang menilai estetika.",
            "TKJ": "TKJ cocok bila kamu ingin memastikan standar teknis dan keamanan tertata rapi.",
        },
    },
}

DEFAULT_CONFIDENCE_MODIFIER = -0.1


class FallbackTemplate(BaseModel):
    energy_tone: str
    personality: str
    major: str
    career: List[ManifestingPoint]
    future: List[ManifestingPoint]
    reasons: List[ManifestingPoint] = Field(default_factory=list)
    focus_step: Optional[str] = None
    habits: List[str] = Field(default_factory=list)
    confidence_modifier: Optional[float] = None
    alternative_notes: Dict[str, str] = Field(default_factory=dict)


_TEMPLATES: Dict[str, FallbackTemplate] = {
    key: FallbackTemplate(**data) for key, data in FALLBACK_TEMPLATE_STORE_DATA.items()
}


def get_fallback_template(label: Optional[str]) -> FallbackTemplate:
    key = (label or "").lower()
    return _TEMPLATES.get(key, _TEMPLATES["default"])


def _draft(points: List[ManifestingPoint]) -> List[Optional[PointDraft]]:
    return [PointDraft(**p.model_dump(mode="json")) for p in points]


def build_fallback_analysis(expression: ExpressionInsight) -> NarrativeResult:
    """
    Deterministic stand-in for the narrative generator, keyed by the expression label.
    Total: every label (empty and unknown included) resolves to one template.
    """
    template = get_fallback_template(expression.label)
    major = normalize_major_code(template.major)
    reference = get_major(major)

    notes: Dict[str, str] = {}
    for code, note in template.alternative_notes.items():
        if is_major_code(code) and note:
            notes[normalize_major_code(code)] = note
    for code in MAJOR_CODES:
        if code != major and code not in notes:
            notes[code] = get_major(code).note

    focus_step = (template.focus_step or "").strip() or reference.focus_step
    habits = [entry.strip() for entry in template.habits if entry.strip()] or list(reference.habits)
    reasons = template.reasons or reference.reasons

    modifier = template.confidence_modifier
    return NarrativeResult(
        expression_summary=ExpressionSummaryDraft(
            headline=expression.narrative,
            energy_tone=template.energy_tone,
            personality_highlight=template.personality,
            confidence_modifier=DEFAULT_CONFIDENCE_MODIFIER if modifier is None else modifier,
        ),
        manifesting=ManifestingDraft(
            career=_draft(template.career),
            future=_draft(template.future),
        ),
        recommendation=RecommendationDraft(
            primary=PrimaryMajorDraft(
                code=major,
                name=reference.name,
                reasons=_draft(reasons),
                focus_step=focus_step,
                habits=habits,
            ),
            alternatives=[
                AlternativeMajorDraft(code=code, name=get_major(code).name, note=note)
                for code, note in notes.items()
            ],
        ),
    )
