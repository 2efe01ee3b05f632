import streamlit as st

from components.level_selector import render_level_selector
from services.api_client import ApiError, create_node


def _node_option(nodes_by_id: dict, node_id) -> str:
    if node_id is None:
        return "(root)"
    node = nodes_by_id[node_id]
    return f"{node['title']} ({node['label']})"


def render_node_form(api_url: str, nodes: list[dict]) -> bool:
    """
    Create-card form. Returns True when a card was created.
    """
    st.subheader("New card")

    with st.form("create_node", clear_on_submit=True):
        level = render_level_selector(key="create_level")
        title = st.text_input("Title", placeholder="How does the system work?")
        description = st.text_area("Description", height=80)
        url = st.text_input("URL (optional)", placeholder="https://example.com/faq")
        order = st.number_input("Order", value=0, step=1)

        nodes_by_id = {n["id"]: n for n in nodes}
        parent = st.selectbox(
            "Parent",
            options=[None] + list(nodes_by_id),
            format_func=lambda v: _node_option(nodes_by_id, v),
            index=0,
        )

        submitted = st.form_submit_button("Create", type="primary", use_container_width=True)

    if not submitted:
        return False

    if not title.strip():
        st.warning("Please enter a title.")
        return False

    payload = {
        "level": level,
        "title": title.strip(),
        "order": order,
        "description": description.strip() or None,
        "url": url.strip() or None,
        "parent_id": parent,
    }
    try:
        node_id = create_node(api_url, payload)
    except ApiError as exc:
        st.error(f"Create failed: {exc}")
        return False

    st.success(f"Created {node_id}")
    return True
