from __future__ import annotations

from contextlib import contextmanager
from typing import List, Optional

import streamlit as st

from core.aggregate import CHART_FIELDS, all_category_counts
from core.charts import pie_chart
from core.commands import ClearCommand, ExportCommand, SearchCommand
from core.config import configure_logging, get_settings
from core.errors import ExportInProgressError, ExportRenderError, NothingToExportError, RecordNotFoundError
from core.filters import SearchCriteria, normalize_criteria
from core.metrics_overview import EMPTY_MESSAGE, TABLE_COLUMNS, compute_detail, compute_options, results_table
from core.session import PortfolioSession


settings = get_settings()
configure_logging(settings)

CRITERIA_KEYS = ["activity_type", "name", "department", "level", "activity_format", "start_date", "end_date"]
ALL_OPTION = "ทั้งหมด"
WIDGET_BLANKS = {"activity_type": ALL_OPTION, "start_date": None, "end_date": None}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #fecaca;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #b91c1c;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #b91c1c;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #fef2f2;border: 1px solid #fecaca;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(criteria: SearchCriteria) -> str:
    if criteria.is_blank:
        return "<span class='chip'>ทุกรายการ</span>"
    chips: List[str] = []
    labels = {
        "activity_type": "ประเภทกิจกรรม",
        "name": "ชื่อ",
        "department": "สังกัด",
        "level": "ระดับ",
        "activity_format": "รูปแบบ",
    }
    for key, label in labels.items():
        value = getattr(criteria, key)
        if value:
            chips.append(f"{label}: {value}")
    if criteria.start_date is not None:
        chips.append(f"ตั้งแต่: {criteria.start_date.date().isoformat()}")
    if criteria.end_date is not None:
        chips.append(f"ถึง: {criteria.end_date.date().isoformat()}")
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, filter_summary_html: str):
    st.markdown(
        f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
        unsafe_allow_html=True,
    )
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


def get_session() -> PortfolioSession:
    if "portfolio_session" not in st.session_state:
        st.session_state["portfolio_session"] = PortfolioSession()
    return st.session_state["portfolio_session"]


def reset_criteria():
    blank = ClearCommand().execute(get_session())
    for key in CRITERIA_KEYS:
        st.session_state[f"crit_{key}"] = getattr(blank, key) or WIDGET_BLANKS.get(key, "")


def drop_artifacts():
    for key in [k for k in st.session_state.keys() if str(k).endswith("_artifact")]:
        del st.session_state[key]


def export_control(label: str, kind: str, key: str, record_index: Optional[int] = None):
    if st.button(label, key=key):
        try:
            with st.spinner("กำลังสร้างไฟล์..."):
                artifact = ExportCommand(kind, record_index=record_index, settings=settings).execute(get_session())
            st.session_state[f"{key}_artifact"] = artifact
        except NothingToExportError as exc:
            st.warning(str(exc))
        except (ExportRenderError, ExportInProgressError, RecordNotFoundError) as exc:
            st.error(str(exc))
    artifact = st.session_state.get(f"{key}_artifact")
    if artifact is not None:
        st.download_button(
            f"บันทึก {artifact.filename}",
            data=artifact.content,
            file_name=artifact.filename,
            mime=artifact.media_type,
            key=f"{key}_download",
        )


# ---------- UI setup ----------
st.set_page_config(page_title=settings.report_title, layout="wide")
inject_base_styles()
st.title(settings.report_title)
st.caption(settings.organization_name)

session = get_session()
if session.dataset.is_empty:
    with st.spinner("กำลังโหลดข้อมูล..."):
        session.ensure_loaded()

options = compute_options(session.dataset)

# ----- Sidebar: search form -----
with st.sidebar:
    st.markdown("### ค้นหาข้อมูล")
    st.selectbox("ประเภทกิจกรรม", options=[ALL_OPTION] + options["activity_types"], key="crit_activity_type")
    st.text_input("ชื่อ", key="crit_name")
    st.text_input("สังกัด", key="crit_department")
    st.text_input("ระดับ", key="crit_level")
    st.text_input("รูปแบบกิจกรรม", key="crit_activity_format")
    st.date_input("ตั้งแต่วันที่", value=None, key="crit_start_date")
    st.date_input("ถึงวันที่", value=None, key="crit_end_date")

    btn_cols = st.columns(2)
    search_clicked = btn_cols[0].button("ค้นหา", key="search_btn", type="primary")
    btn_cols[1].button("ล้างข้อมูลการค้นหา", key="clear_btn", on_click=reset_criteria)

    st.markdown("---")
    if st.button("โหลดข้อมูลใหม่", key="refresh_btn"):
        with st.spinner("กำลังโหลดข้อมูล..."):
            session.refresh()
        st.session_state["searched"] = False
        drop_artifacts()
        st.rerun()
    st.caption(f"ข้อมูลทั้งหมด {len(session.dataset.records):,} รายการ")

if search_clicked:
    raw = {key: st.session_state.get(f"crit_{key}") for key in CRITERIA_KEYS}
    if raw["activity_type"] == ALL_OPTION:
        raw["activity_type"] = ""
    SearchCommand(normalize_criteria(raw)).execute(session)
    st.session_state["searched"] = True
    drop_artifacts()

if not st.session_state.get("searched"):
    st.info("กรอกเงื่อนไขแล้วกด \"ค้นหา\" เพื่อแสดงข้อมูล")
    st.stop()

result = session.result
records = list(result.records)
summary = result.summary

render_page_header("ผลการค้นหา", "หน้าหลัก / ข้อมูลสารสนเทศ", format_filter_summary(result.criteria))

metric_cols = st.columns(2)
metric_cols[0].metric("จำนวนรายการทั้งหมด", f"{summary.count:,}")
metric_cols[1].metric("จำนวนชั่วโมงอบรมรวม", summary.total_hours_display)

with card("สรุปข้อมูล"):
    if not records:
        st.info(EMPTY_MESSAGE)
    else:
        counts = all_category_counts(records)
        chart_cols = st.columns(3)
        for n, (key, _, title) in enumerate(CHART_FIELDS):
            with chart_cols[n % 3]:
                st.altair_chart(pie_chart(counts[key], title), use_container_width=True)

with card("รายการผลงาน"):
    export_cols = st.columns(2)
    with export_cols[0]:
        export_control("ดาวน์โหลด CSV", "csv", "csv_export")
    with export_cols[1]:
        export_control("ดาวน์โหลด PDF", "pdf", "pdf_export")
    if not records:
        st.info(EMPTY_MESSAGE)
    else:
        table = results_table(records, settings.display_tz).rename(columns=TABLE_COLUMNS)
        table["index"] = table["index"] + 1
        st.dataframe(table.rename(columns={"index": "ลำดับ"}), use_container_width=True, hide_index=True)

if records:
    with card("ดูรายละเอียด"):
        choice = st.selectbox(
            "เลือกรายการ",
            options=list(range(len(records))),
            format_func=lambda i: f"{i + 1}. {records[i].name or '-'} – {records[i].activity_name or '-'}",
            key="detail_index",
        )
        detail = compute_detail(records[choice], choice, settings)
        field_cols = st.columns(2)
        for n, item in enumerate(detail["fields"]):
            field_cols[n % 2].markdown(f"**{item['label']}**  \n{item['value']}")
        if detail["attachments"]:
            st.markdown("#### เอกสารแนบ")
            att_cols = st.columns(4)
            for n, att in enumerate(detail["attachments"]):
                with att_cols[n % 4]:
                    if att["thumbnail_url"]:
                        st.image(att["thumbnail_url"], use_container_width=True)
                    else:
                        st.markdown("<div style='font-size:2rem;text-align:center'>📎</div>", unsafe_allow_html=True)
                    st.markdown(f"[{att['label']}]({att['url']})")
        export_control("ดาวน์โหลด PDF รายละเอียด", "detail_pdf", f"detail_export_{choice}", record_index=choice)
