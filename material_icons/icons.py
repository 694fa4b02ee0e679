# Generated by generate_icons.py from the icon catalog. Do not edit.

__all__ = [
    "THREE_D_ROTATION",
    "ADD",
    "DELETE",
    "HOME",
    "MENU",
    "SEARCH",
    "SETTINGS",
    "STAR",
    "ICONS",
]

THREE_D_ROTATION = 0xE84D
ADD = 0xE145
DELETE = 0xE872
HOME = 0xE88A
MENU = 0xE5D2
SEARCH = 0xE8B6
SETTINGS = 0xE8B8
STAR = 0xE838

ICONS = {
    "3d_rotation": THREE_D_ROTATION,
    "add": ADD,
    "delete": DELETE,
    "home": HOME,
    "menu": MENU,
    "search": SEARCH,
    "settings": SETTINGS,
    "star": STAR,
}
