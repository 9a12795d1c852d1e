from __future__ import annotations

import streamlit as st

from stockcount.config import get_settings
from stockcount.db import get_conn
from stockcount.services.demo_data import seed_sample_data
from stockcount.weeks import week_start

st.set_page_config(page_title="Weekly Stock Count", page_icon="📦", layout="wide")

st.title("📦 Weekly Stock Count")
st.caption("Stores submit a weekly physical count; expected vs actual variance flags pilferage.")

settings = get_settings()
conn = get_conn(settings.db_path)
seed_sample_data(conn)

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")
    st.write(f"**Email:** {'configured' if settings.email_enabled else 'not configured'}")

st.info(
    f"Current reporting week starts **{week_start()}**. Use **📝 Stock Count** to submit a store's sheet, "
    "**📋 Submission Status** to chase missing stores, and **📊 Pilferage Report** to review variances.",
    icon="ℹ️",
)
