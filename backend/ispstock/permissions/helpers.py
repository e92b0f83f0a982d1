# Overview: Lookups over the permission catalogue used by /api/auth/me.

from .definitions import PERMISSION_DEFINITIONS


_BY_CODE = {
    code: {"code": code, "name": name, "description": description, "category": category}
    for code, name, description, category in PERMISSION_DEFINITIONS
}


def get_all_permission_codes() -> list[str]:
    return list(_BY_CODE)


def get_permission_definition(code: str) -> dict | None:
    """Catalogue entry for code as a dict, or None for an unknown code."""
    entry = _BY_CODE.get(code)
    return dict(entry) if entry else None
