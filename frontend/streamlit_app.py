import streamlit as st
from dynaconf import Dynaconf

from components.connection_panel import render_connection_panel
from components.graph_view import render_graph_view
from components.node_editor import render_node_editor
from components.node_form import render_node_form
from services.api_client import (
    ApiError,
    fetch_graph,
    fetch_graph_stats,
    fetch_persistence_status,
)


settings = Dynaconf(
    envvar_prefix="FAQFLOW",
    load_dotenv=True,
    settings_files=[],
)

st.set_page_config(page_title="faqflow editor", layout="wide")

if "qp_init" not in st.session_state:
    qp = st.query_params
    if "api_url" in qp:
        st.session_state["api_url"] = qp["api_url"]
    st.session_state["qp_init"] = True

st.title("FAQ editor")

with st.sidebar:
    st.subheader("Backend")
    default_url = settings.get("API_URL", "http://localhost:8000")
    api_url = st.text_input(
        "API base URL",
        value=st.session_state.get("api_url", default_url),
    )
    st.session_state["api_url"] = api_url

    try:
        stats = fetch_graph_stats(api_url)
        st.metric("Cards", stats.get("nodes", 0))
        st.metric("Connections", stats.get("edges", 0))
        if stats.get("orphans"):
            st.caption(f"{stats['orphans']} orphaned card(s) shown as roots")
    except Exception as exc:
        st.error(f"Backend error: {exc}")
        st.stop()

st.query_params["api_url"] = api_url

try:
    data = fetch_graph(api_url)
except ApiError as exc:
    st.error(f"Failed to load graph: {exc}")
    st.stop()

nodes_by_id = {n["id"]: n for n in data.get("nodes", [])}

try:
    status = fetch_persistence_status(api_url)
    if not status.get("ok", True):
        st.warning(
            f"Last save failed; your edits are kept in memory. {status.get('last_error')}"
        )
except ApiError as exc:
    st.caption(f"Save status unavailable: {exc}")

with st.sidebar:
    st.divider()
    if render_node_form(api_url, list(nodes_by_id.values())):
        st.rerun()

col_left, col_right = st.columns([2, 1])
with col_left:
    clicked = render_graph_view(data)
    if clicked:
        st.session_state["selected_node"] = clicked

with col_right:
    selected = st.session_state.get("selected_node")
    if selected in nodes_by_id:
        if render_node_editor(api_url, nodes_by_id[selected], nodes_by_id):
            st.rerun()
    else:
        st.caption("Click a card in the graph to edit it.")

st.divider()
if render_connection_panel(api_url, data):
    st.rerun()
