"""Fasting Times: Streamlit app for a Ramadan Suhoor/Iftar timetable."""

import datetime
import time

import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import get_geolocation, streamlit_js_eval

load_dotenv()

from fastingtimes.compute import run  # noqa: E402
from fastingtimes.config import Settings, configure_logging  # noqa: E402
from fastingtimes.ephemeris import EphemerisError  # noqa: E402
from fastingtimes.geolocate import (  # noqa: E402
    MAX_ATTEMPTS,
    PAUSE_S,
    Fix,
    GeolocationError,
    accuracy_grade,
    describe_accuracy,
    fix_from_browser,
    geocode_address,
    observer_from_fix,
    settle,
    take_sample,
)
from fastingtimes.i18n import t  # noqa: E402
from fastingtimes.models import QueryInput  # noqa: E402
from fastingtimes.renderers.pdf import pdf_bytes  # noqa: E402
from fastingtimes.renderers.table import (  # noqa: E402
    build_rows,
    column_titles,
    csv_text,
    export_filename,
    header_lines,
)
from fastingtimes.validation import InputValidationError, requested_days  # noqa: E402

_settings = Settings.from_env()
configure_logging(_settings.log_level)

# --- Language detection (browser-first via streamlit-js-eval) ---
# On the first run the JS call returns None; the rerun fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "ar" if _browser_lang.lower().startswith("ar") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(page_title=t("page_title", _lang), page_icon="☪", layout="wide")

# --- Session state initialization ---
if "batch" not in st.session_state:
    st.session_state.batch = None
if "error_msg" not in st.session_state:
    st.session_state.error_msg = None
if "gps_samples" not in st.session_state:
    st.session_state.gps_samples = []
if "gps_active" not in st.session_state:
    st.session_state.gps_active = False
if "gps_status" not in st.session_state:
    st.session_state.gps_status = ""
if "lat" not in st.session_state:
    st.session_state.lat = "51.5"
if "lng" not in st.session_state:
    st.session_state.lng = "-0.12"

st.title(t("page_title", _lang))
st.caption(t("subtitle", _lang))


def _use_fix(fix: Fix) -> bool:
    try:
        observer = observer_from_fix(fix)
    except InputValidationError as e:
        st.session_state.error_msg = str(e)
        return False
    st.session_state.lat = f"{observer.lat:.8f}"
    st.session_state.lng = f"{observer.lng:.8f}"
    return True


# --- Location: address lookup and browser GPS ---
loc_col1, loc_col2, loc_col3 = st.columns([4, 1, 2])
with loc_col1:
    address = st.text_input(t("label_address", _lang))
with loc_col2:
    st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
    if st.button(t("btn_lookup", _lang), disabled=not address):
        st.session_state.error_msg = None
        try:
            _use_fix(geocode_address(address))
        except GeolocationError as e:
            st.session_state.error_msg = str(e)
with loc_col3:
    st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
    if st.button(t("btn_gps", _lang), disabled=st.session_state.gps_active):
        st.session_state.gps_active = True
        st.session_state.gps_samples = []
        st.session_state.error_msg = None

# Best-of-N refinement: one reading per rerun, each under its own component key.
if st.session_state.gps_active:
    samples: list[Fix] = st.session_state.gps_samples
    payload = get_geolocation(component_key=f"gps_{len(samples)}")
    if payload is not None:
        try:
            more = take_sample(samples, lambda: fix_from_browser(payload))
        except GeolocationError as e:
            st.session_state.error_msg = str(e)
            st.session_state.gps_active = False
        else:
            if more:
                st.session_state.gps_status = t(
                    "gps_refining", _lang, attempt=len(samples), total=MAX_ATTEMPTS
                )
                time.sleep(PAUSE_S)
            else:
                best = settle(samples)
                st.session_state.gps_active = False
                if _use_fix(best) and best.accuracy_m is not None:
                    accuracy = describe_accuracy(best.accuracy_m)
                    grade = accuracy_grade(best.accuracy_m)
                    if grade == "low":
                        st.session_state.error_msg = t("gps_low", _lang, accuracy=accuracy)
                    st.session_state.gps_status = t(f"gps_{grade}", _lang, accuracy=accuracy)
        st.rerun()

if st.session_state.gps_status:
    st.caption(st.session_state.gps_status)

# --- Calculation form ---
with st.form("query"):
    col1, col2, col3, col4, col5 = st.columns(5)
    with col1:
        start_val = st.date_input(t("label_start", _lang), value=datetime.date(2025, 3, 1))
    with col2:
        end_val = st.date_input(t("label_end", _lang), value=datetime.date(2025, 3, 30))
    with col3:
        lat_val = st.text_input(t("label_lat", _lang), key="lat")
    with col4:
        lng_val = st.text_input(t("label_lng", _lang), key="lng")
    with col5:
        angle_val = st.text_input(t("label_angle", _lang), value="-18")
    submitted = st.form_submit_button(t("btn_calculate", _lang))

if submitted:
    query = QueryInput(
        start=start_val.isoformat() if start_val else "",
        end=end_val.isoformat() if end_val else "",
        lat=lat_val,
        lng=lng_val,
        angle=angle_val,
    )
    st.session_state.error_msg = None
    st.session_state.batch = None
    progress = st.progress(
        0.0, text=t("loading_compute", _lang, days=requested_days(start_val, end_val))
    )

    def _on_progress(done: int, total: int, _result) -> None:
        progress.progress(done / total, text=t("loading_compute", _lang, days=total))

    try:
        st.session_state.batch = run(query, on_progress=_on_progress)
    except (InputValidationError, EphemerisError) as e:
        st.session_state.error_msg = str(e)
    progress.empty()

# --- Error message ---
if st.session_state.error_msg:
    st.error(st.session_state.error_msg)

# --- Timetable ---
batch = st.session_state.batch
if batch is not None:
    rows = build_rows(batch)
    _, _, meta = header_lines(batch)
    st.caption(meta)
    if batch.failures:
        st.warning(t("failed_days", _lang, count=len(batch.failures)))

    titles = column_titles(batch.angle)
    st.dataframe(
        [
            dict(
                zip(
                    titles,
                    (
                        r.day,
                        r.date_label,
                        r.twilight_precise,
                        r.sunset_precise,
                        r.twilight_rounded,
                        r.sunset_rounded,
                    ),
                )
            )
            for r in rows
        ],
        hide_index=True,
        width="stretch",
    )

    dl_col1, dl_col2 = st.columns(2)
    with dl_col1:
        st.download_button(
            t("btn_pdf", _lang),
            data=pdf_bytes(batch, rows),
            file_name=export_filename(batch, "pdf"),
            mime="application/pdf",
        )
    with dl_col2:
        st.download_button(
            t("btn_csv", _lang),
            data=csv_text(batch, rows),
            file_name=export_filename(batch, "csv"),
            mime="text/csv",
        )

with st.expander(t("info_title", _lang)):
    st.write(t("info_body", _lang))
