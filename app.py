from __future__ import annotations

import streamlit as st

st.set_page_config(page_title="Weekly Stock Count", page_icon="📦", layout="wide")

pages = [
    st.Page("home.py", title="Home", icon="🏠"),
    st.Page("pages/1_📝_Stock_Count.py", title="Stock Count", icon="📝"),
    st.Page("pages/2_📋_Submission_Status.py", title="Submission Status", icon="📋"),
    st.Page("pages/3_📊_Pilferage_Report.py", title="Pilferage Report", icon="📊"),
    st.Page("pages/4_🛠️_Admin.py", title="Admin", icon="🛠️"),
    st.Page("pages/5_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

st.navigation(pages).run()
