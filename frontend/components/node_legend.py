import streamlit as st

from faqflow.graph.graph_schema import LEVEL_COLORS, level_label


def render_node_legend():
    st.markdown("**Card levels**")
    cols = st.columns(len(LEVEL_COLORS))
    for i, (level, color) in enumerate(sorted(LEVEL_COLORS.items())):
        cols[i].markdown(
            f"<div style='display:flex;align-items:center;gap:6px;'>"
            f"<span style='width:12px;height:12px;border-radius:3px;background:{color};display:inline-block;'></span>"
            f"<span>{level_label(level)}</span></div>",
            unsafe_allow_html=True,
        )
    st.caption("Select a card to edit it. Connect cards from the relations panel.")
