import random
import re

from constants import FALLBACK_TECH_ICON, INTERVIEW_COVERS, TECH_ICON_BASE_URL, TECH_MAPPINGS

_JS_SUFFIX_RE = re.compile(r"\.js$")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_tech_name(tech: str) -> str | None:
    """Map a free-form tech name ("React.js", "Node JS") to its devicon slug."""
    key = _WHITESPACE_RE.sub("", _JS_SUFFIX_RE.sub("", tech.strip().lower()))
    return TECH_MAPPINGS.get(key)


def get_tech_logos(techstack: list[str]) -> list[dict[str, str]]:
    out: list[dict[str, str]] = []
    for tech in techstack:
        slug = normalize_tech_name(tech)
        url = f"{TECH_ICON_BASE_URL}/{slug}/{slug}-original.svg" if slug else FALLBACK_TECH_ICON
        out.append({"tech": tech, "url": url})
    return out


def get_random_interview_cover() -> str:
    return f"/covers{random.choice(INTERVIEW_COVERS)}"


def split_techstack(value: str | list[str]) -> list[str]:
    items = value if isinstance(value, list) else str(value).split(",")
    return [item.strip() for item in items if str(item).strip()]
