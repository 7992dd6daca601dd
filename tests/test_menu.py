from pathlib import Path

from gateway.menu import MENU, iter_pages
from utils import quotas

SRC = Path(__file__).resolve().parents[1] / "src"


def test_every_menu_page_exists():
    for _, page in iter_pages():
        assert (SRC / page["path"]).is_file(), page["path"]


def test_gated_pages_use_known_features():
    for _, page in iter_pages():
        if page.get("feature"):
            assert quotas.is_known_feature(page["feature"]), page["feature"]


def test_admin_section_hidden_below_administrator():
    admin = next(s for s in MENU if s["section"] == "Admin")
    for page in admin["pages"]:
        assert not quotas.has_required_level(quotas.RESEARCHER, page.get("level"))
        assert quotas.has_required_level(quotas.ADMINISTRATOR, page.get("level"))
