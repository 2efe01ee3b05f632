from dataclasses import dataclass
from dynaconf import Dynaconf
from backend.app.constants import DEFAULTS

from faqflow.config.settings import (
    LayoutConfig,
    MutationConfig,
    PersistenceConfig,
    FaqflowConfig,
)

settings = Dynaconf(
    envvar_prefix="FAQFLOW",
    load_dotenv=True,
    settings_files=[],
)
settings.update(DEFAULTS)


def _optional_width(value):
    if value in (None, "", 0, 0.0):
        return None
    return float(value)


@dataclass(frozen=True)
class AppConfig:
    # ---------------- App ----------------
    app_name: str = settings.get("APP_NAME", "faqflow-backend")
    api_prefix: str = settings.get("API_PREFIX", "")

    # ---------------- Persistence ----------------
    snapshot_path: str = settings.get("SNAPSHOT_PATH", "data/faqs.json")

    # ---------------- Editor Policy ----------------
    faqflow: FaqflowConfig = FaqflowConfig(
        layout=LayoutConfig(
            node_width=float(settings.get("LAYOUT_NODE_WIDTH", 256.0)),
            gutter=float(settings.get("LAYOUT_GUTTER", 44.0)),
            vertical_spacing=float(settings.get("LAYOUT_VERTICAL_SPACING", 200.0)),
            margin_x=float(settings.get("LAYOUT_MARGIN_X", 0.0)),
            margin_top=float(settings.get("LAYOUT_MARGIN_TOP", 50.0)),
            canvas_width=_optional_width(settings.get("LAYOUT_CANVAS_WIDTH", 0)),
        ),
        mutation=MutationConfig(
            delete_policy=settings.get("DELETE_POLICY", "orphan"),
            save_on_update=settings.get("SAVE_ON_UPDATE", True),
        ),
        persistence=PersistenceConfig(
            snapshot_path=settings.get("SNAPSHOT_PATH", "data/faqs.json"),
            api_url=settings.get("SNAPSHOT_API_URL") or None,
            timeout_s=float(settings.get("SNAPSHOT_TIMEOUT_S", 20.0)),
        ),
    )
