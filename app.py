import atexit

import pandas as pd
import plotly.express as px
import streamlit as st

import config
import top_apps
from charts import store_config
from charts.app_store import get_bundle_id
from data_manager import load_run_status
from scheduler import UpdateInProgress, run_exclusive_update, start_scheduler, stop_scheduler

# Only run the background scheduler alongside the dashboard when asked to
if config.DASHBOARD_SCHEDULER:
    start_scheduler()
    atexit.register(stop_scheduler)

# Page configuration
st.set_page_config(
    page_title="App Store Top Charts",
    page_icon="📱",
    layout="wide",
    initial_sidebar_state="expanded"
)

COUNTRY_CODES = [country_code for _, country_code in store_config.STORE_FRONTS]
GENRE_NAMES = [genre_name for _, genre_name in store_config.GENRES]
ANY = "(any)"

# Sidebar for navigation and settings
st.sidebar.title("Navigation")
page = st.sidebar.radio("Select Page", ["App Lookup", "Charts"])

run_status = load_run_status()
if run_status:
    st.sidebar.caption(f"Last update: {run_status['finished_at']} ({run_status['status']})")
else:
    st.sidebar.caption("No update has run yet")

# Update data button in sidebar
if st.sidebar.button("Update All Charts"):
    with st.spinner("Fetching every chart from the App Store, this takes a while..."):
        try:
            status = run_exclusive_update()
            st.sidebar.success(f"Charts updated ({status})")
        except UpdateInProgress:
            st.sidebar.warning("A chart update is already running, try again later")
        except Exception as e:
            st.sidebar.error(f"Update failed: {str(e)}")


def _optional(value):
    return None if value == ANY else value


def entry_row(entry):
    """Flatten a chart entry into a table row"""
    position = entry.get("$position", {})
    return {
        "Rank": position.get("index"),
        "Name": (entry.get("im:name") or {}).get("label"),
        "Developer": (entry.get("im:artist") or {}).get("label"),
        "Bundle ID": get_bundle_id(entry),
        "Genre": position.get("genre"),
        "Pricing": position.get("pricing"),
    }


if page == "App Lookup":
    st.title("App Store Top Charts")
    st.markdown("""
    Look up where an app currently ranks in the App Store top charts.
    Charts are tracked for every store front, for paid and free apps and for each genre.
    """)

    bundle_id = st.text_input("Bundle identifier", placeholder="com.example.app")

    col1, col2, col3 = st.columns(3)
    with col1:
        country_code = st.selectbox("Country", [ANY] + COUNTRY_CODES)
    with col2:
        pricing = st.selectbox("Pricing", [ANY] + store_config.PRICINGS)
    with col3:
        genre = st.selectbox("Genre", [ANY] + GENRE_NAMES)

    if bundle_id:
        positions = top_apps.get_app_positions_df(
            bundle_id.strip(), _optional(country_code), _optional(pricing), _optional(genre)
        )

        if positions.empty:
            st.info(f"{bundle_id} is not in any matching top chart.")
        else:
            st.success(f"{bundle_id} is in {len(positions)} top chart(s).")
            st.metric("Best Rank", f"#{int(positions['index'].min())}")

            positions["chart"] = positions["country_code"] + " / " + positions["pricing"] + " / " + positions["genre"]
            positions = positions.sort_values("index")

            fig = px.bar(
                positions,
                x="chart",
                y="index",
                hover_data=["total"],
                labels={"chart": "Chart", "index": "Rank"},
                title=f"{bundle_id} Chart Positions",
            )
            # Rank #1 at the top
            fig.update_yaxes(autorange="reversed")
            st.plotly_chart(fig, use_container_width=True)

            st.dataframe(positions.drop(columns=["chart"]), use_container_width=True)

elif page == "Charts":
    st.header("Browse a Chart")

    col1, col2, col3 = st.columns(3)
    with col1:
        country_code = st.selectbox("Country", COUNTRY_CODES, index=COUNTRY_CODES.index("us"))
    with col2:
        pricing = st.selectbox("Pricing", store_config.PRICINGS, index=1)
    with col3:
        genre = st.selectbox("Genre", GENRE_NAMES)

    chart = top_apps.get_chart(country_code, pricing, genre)
    if chart:
        st.dataframe(pd.DataFrame([entry_row(entry) for entry in chart]), use_container_width=True, hide_index=True)
    else:
        st.warning("No snapshot for this chart yet. Run an update first.")
