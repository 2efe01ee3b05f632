import streamlit as st
from streamlit_agraph import agraph, Node, Edge, Config

from components.node_legend import render_node_legend


def render_graph_view(data: dict):
    """
    Draw the forest at the server-computed layout positions.

    Returns the id of the clicked card, if any.
    """
    st.subheader("Graph View")
    render_node_legend()

    all_nodes = data.get("nodes", [])
    all_edges = data.get("edges", [])
    if not all_nodes:
        st.info("No cards yet. Create one from the sidebar.")
        return None

    node_objs = []
    for n in all_nodes:
        position = n.get("position") or {}
        title = n["title"]
        if n.get("description"):
            title = f"{title}\n{n['description']}"
        node_objs.append(
            Node(
                id=n["id"],
                label=n["title"],
                size=18,
                shape="box",
                color=n["color"],
                title=title,
                x=position.get("x", 0.0),
                y=position.get("y", 0.0),
            )
        )

    edge_objs = [
        Edge(
            source=e["source"],
            target=e["target"],
            color=e["color"],
            dashes=e["kind"] == "connection",
        )
        for e in all_edges
    ]

    config = Config(
        width="100%",
        height=560,
        directed=True,
        physics=False,
        hierarchical=False,
    )
    return agraph(nodes=node_objs, edges=edge_objs, config=config)
