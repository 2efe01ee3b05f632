import streamlit as st

from faqflow.graph.graph_schema import LEVELS, level_label


def render_level_selector(default: int = 1, *, key: str = "level") -> int:
    index = LEVELS.index(default) if default in LEVELS else 0
    return st.selectbox(
        "Level",
        options=list(LEVELS),
        index=index,
        format_func=level_label,
        key=key,
    )
