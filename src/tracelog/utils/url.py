from urllib.parse import urljoin

from tracelog.env import TRACELOG_URL_OVERRIDE


def url_for(path: str, base: str = TRACELOG_URL_OVERRIDE) -> str:
    return urljoin(base if base.endswith("/") else base + "/", path.lstrip("/"))


__all__ = ("url_for",)
