import streamlit as st

from components.level_selector import render_level_selector
from services.api_client import (
    ApiError,
    delete_node,
    remove_child,
    reorder,
    set_parent,
    update_node,
)


def render_node_editor(api_url: str, node: dict, nodes_by_id: dict) -> bool:
    """
    Edit, reparent or delete one card. Returns True when anything
    changed on the server.
    """
    st.subheader(f"Card {node['label']}")
    st.caption(node["id"])

    with st.form(f"edit_{node['id']}"):
        level = render_level_selector(node.get("level") or 1, key=f"edit_level_{node['id']}")
        title = st.text_input("Title", value=node["title"])
        description = st.text_area("Description", value=node.get("description") or "", height=80)
        url = st.text_input("URL", value=node.get("url") or "")
        order = st.number_input("Order", value=float(node.get("order", 0)), step=1.0)
        saved = st.form_submit_button("Save", use_container_width=True)

    try:
        if saved:
            update_node(
                api_url,
                node["id"],
                {
                    "title": title,
                    "description": description,
                    "url": url,
                    "level": level,
                    "order": order,
                },
            )
            return True

        others = [n for n in nodes_by_id.values() if n["id"] != node["id"]]
        options = ["(root)"] + [n["id"] for n in others]
        current = node.get("parent_id")
        index = options.index(current) if current in options else 0
        parent = st.selectbox(
            "Parent",
            options=options,
            index=index,
            format_func=lambda i: i if i == "(root)" else f"{nodes_by_id[i]['title']} ({i})",
            key=f"parent_{node['id']}",
        )
        if st.button("Set parent", key=f"set_parent_{node['id']}"):
            set_parent(api_url, node["id"], None if parent == "(root)" else parent)
            return True

        if node.get("children"):
            st.markdown("**Children**")
        kids = sorted(
            node.get("children", []),
            key=lambda c: nodes_by_id.get(c, {}).get("order", 0),
        )
        for index, child_id in enumerate(kids):
            child = nodes_by_id.get(child_id, {"title": child_id})
            col_a, col_b, col_c = st.columns([3, 1, 1])
            col_a.write(child["title"])
            if index > 0 and col_b.button("Up", key=f"up_{node['id']}_{child_id}"):
                sequence = list(kids)
                sequence[index - 1], sequence[index] = sequence[index], sequence[index - 1]
                reorder(api_url, node["id"], sequence)
                return True
            if col_c.button("Remove", key=f"rm_{node['id']}_{child_id}"):
                remove_child(api_url, node["id"], child_id)
                return True

        st.divider()
        if st.button("Delete card", type="primary", key=f"delete_{node['id']}"):
            removed = delete_node(api_url, node["id"])
            st.session_state.pop("selected_node", None)
            st.toast(f"Deleted {len(removed)} card(s)")
            return True
    except ApiError as exc:
        st.error(f"Backend error: {exc}")

    return False
