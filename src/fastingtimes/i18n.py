"""Simple two-language (en/ar) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "en": "Ramadan Fasting Times",
        "ar": "مواقيت الصيام في رمضان",
    },
    "subtitle": {
        "en": "Suhoor (Fajr) and Iftar (Sunset) Times",
        "ar": "مواقيت السحور (الفجر) والإفطار (المغرب)",
    },
    "label_start": {
        "en": "Start date",
        "ar": "تاريخ البداية",
    },
    "label_end": {
        "en": "End date",
        "ar": "تاريخ النهاية",
    },
    "label_lat": {
        "en": "Latitude",
        "ar": "خط العرض",
    },
    "label_lng": {
        "en": "Longitude",
        "ar": "خط الطول",
    },
    "label_angle": {
        "en": "Fajr angle (°)",
        "ar": "زاوية الفجر (°)",
    },
    "label_address": {
        "en": "Find coordinates by address",
        "ar": "البحث عن الإحداثيات بالعنوان",
    },
    "btn_lookup": {
        "en": "Look up",
        "ar": "بحث",
    },
    "btn_gps": {
        "en": "Get My GPS Location",
        "ar": "تحديد موقعي",
    },
    "btn_calculate": {
        "en": "Calculate",
        "ar": "احسب",
    },
    "btn_pdf": {
        "en": "Download PDF",
        "ar": "تنزيل PDF",
    },
    "btn_csv": {
        "en": "Download CSV",
        "ar": "تنزيل CSV",
    },
    "loading_compute": {
        "en": "Calculating {days} days...",
        "ar": "جارٍ حساب {days} يومًا...",
    },
    "gps_refining": {
        "en": "Refining... ({attempt}/{total})",
        "ar": "جارٍ التحسين... ({attempt}/{total})",
    },
    "gps_low": {
        "en": "Location found but accuracy is low ({accuracy}). For better results, enable GPS and try outdoors.",
        "ar": "تم تحديد الموقع لكن الدقة منخفضة ({accuracy}). لنتائج أفضل فعّل GPS وحاول في الخارج.",
    },
    "gps_found": {
        "en": "Found {accuracy}",
        "ar": "تم التحديد {accuracy}",
    },
    "gps_precise": {
        "en": "Precise location {accuracy}",
        "ar": "موقع دقيق {accuracy}",
    },
    "failed_days": {
        "en": "{count} day(s) have no times for this location and angle.",
        "ar": "{count} يوم بلا مواقيت لهذا الموقع وهذه الزاوية.",
    },
    "info_title": {
        "en": "How times are rounded",
        "ar": "كيف يتم تقريب المواقيت",
    },
    "info_body": {
        "en": "Fajr is rounded down to the minute so Suhoor never ends late. "
        "Sunset is rounded up to the minute so Iftar never starts early. "
        "Exact times are shown to the millisecond for verification.",
        "ar": "يُقرَّب الفجر إلى الدقيقة الأدنى حتى لا يتأخر انتهاء السحور، "
        "ويُقرَّب المغرب إلى الدقيقة الأعلى حتى لا يتقدم الإفطار. "
        "تُعرض الأوقات الدقيقة حتى الميلي ثانية للتحقق.",
    },
}


def t(key: str, lang: str, **kwargs: object) -> str:
    """Return the translated string for key in lang, formatted with kwargs.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    text = entry.get(lang) or entry.get("en") or key
    return text.format(**kwargs) if kwargs else text
