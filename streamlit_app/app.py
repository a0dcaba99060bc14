import streamlit as st
from navigation import setup_navigation

st.set_page_config(page_title="Project Dashboard", layout="wide")

pg = setup_navigation()
pg.run()
