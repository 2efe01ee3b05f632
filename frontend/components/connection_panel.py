import streamlit as st

from services.api_client import ApiError, connect, disconnect


def render_connection_panel(api_url: str, data: dict) -> bool:
    st.subheader("Connections")
    nodes = {n["id"]: n for n in data.get("nodes", [])}
    if len(nodes) < 2:
        st.caption("Create at least two cards to connect them.")
        return False

    def _label(node_id: str) -> str:
        return f"{nodes[node_id]['title']} ({nodes[node_id]['label']})"

    ids = list(nodes)
    col_a, col_b = st.columns(2)
    source = col_a.selectbox("From", options=ids, format_func=_label, key="conn_source")
    target = col_b.selectbox("To", options=ids, format_func=_label, key="conn_target")
    as_child = st.checkbox("Connect as child", value=True)

    try:
        if st.button("Connect", use_container_width=True):
            connect(api_url, source, target, as_child=as_child)
            return True

        for edge in data.get("edges", []):
            col_a, col_b = st.columns([4, 1])
            kind = "child" if edge["kind"] == "relation" else "link"
            col_a.write(
                f"{_label(edge['source'])} → {_label(edge['target'])} · {kind}"
            )
            if col_b.button("Remove", key=f"disc_{edge['id']}"):
                disconnect(api_url, edge["id"])
                return True
    except ApiError as exc:
        st.error(f"Backend error: {exc}")

    return False
