
import streamlit as st

from data_manager import load_apps_index

# Disable streamlit elements and set page config
st.set_page_config(initial_sidebar_state="collapsed")
hide_streamlit_style = """
<style>
#MainMenu {visibility: hidden;}
footer {visibility: hidden;}
header {visibility: hidden;}
</style>
"""
st.markdown(hide_streamlit_style, unsafe_allow_html=True)

# OK as long as the apps index can be read
try:
    load_apps_index()
    st.write("OK")
except (OSError, ValueError) as e:
    st.write(f"ERROR: {str(e)}")
