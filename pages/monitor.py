import streamlit as st

import config
from data_manager import list_snapshots, load_run_status

# Page configuration
st.set_page_config(
    page_title="Update Monitor",
    page_icon="🔍",
    layout="wide"
)

st.title("Chart Update Monitor")

run_status = load_run_status()

if run_status:
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Status", run_status["status"])
    with col2:
        st.metric("Charts Changed", f"{run_status['changed']} / {run_status['tasks']}")
    with col3:
        st.metric("Started", run_status["started_at"])
    with col4:
        st.metric("Finished", run_status["finished_at"])

    if run_status.get("error"):
        st.error(f"Last run failed: {run_status['error']}")
else:
    st.info("No update has run yet.")

snapshots = list_snapshots()

if snapshots.empty:
    st.warning(f"No snapshots found in {config.DATA_DIR}")
else:
    # Style the dataframe
    def color_entries(val):
        if val is None or val != val:
            return 'background-color: #FFB6C1'
        elif val == 0:
            return 'background-color: #FFE5B4'
        return ''

    summary = snapshots.groupby(["country_code", "pricing"]).agg(
        charts=("genre", "count"),
        apps=("entries", "sum"),
        last_modified=("modified", "max"),
    ).reset_index()

    st.subheader("Per Country")
    st.dataframe(summary, use_container_width=True)

    st.subheader("Snapshots")
    st.dataframe(snapshots.style.map(color_entries, subset=["entries"]), use_container_width=True)

    st.markdown("""
    ### Status Explanations:
    - 🟡 **0 entries**: Snapshot created but the feed never returned apps for it
    - 🔴 **No count**: Snapshot file could not be read

    ### Update Schedule:
    - Charts are updated daily by the scheduler, with a backup run every few hours
    - Manual updates can be triggered from the main dashboard
    """)
