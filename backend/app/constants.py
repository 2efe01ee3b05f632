DEFAULTS = {
    # Where the file gateway keeps the {"faqs": [...]} snapshot
    "SNAPSHOT_PATH": "data/faqs.json",
    # What happens to the children of a deleted card: orphan | promote | cascade
    "DELETE_POLICY": "orphan",
    # Persist after content-only edits as well as structural ones
    "SAVE_ON_UPDATE": True,
    # Card width in canvas pixels
    "LAYOUT_NODE_WIDTH": 256.0,
    # Extra horizontal room between neighbouring cards
    "LAYOUT_GUTTER": 44.0,
    # Distance between tree levels
    "LAYOUT_VERTICAL_SPACING": 200.0,
    # Left margin of the first root
    "LAYOUT_MARGIN_X": 0.0,
    # Top margin of the first row of roots
    "LAYOUT_MARGIN_TOP": 50.0,
    # Wrap roots onto a new row past this width (0 = never wrap)
    "LAYOUT_CANVAS_WIDTH": 0,
    # Remote /faqs endpoint; when set, snapshots go there instead of the file
    "SNAPSHOT_API_URL": "",
    # Seconds to wait on the remote endpoint
    "SNAPSHOT_TIMEOUT_S": 20.0,
    # Default backend API URL for UI
    "API_URL": "http://localhost:8000",
}
