"""Theme colors and color utilities for the UI."""


class SpaceColors:
    """Dark night-sky palette."""

    BG = "#0f172a"
    PANEL = "#1e293b"
    PANEL_HOVER = "#334155"
    PANEL_LOCKED = "#1e293b80"

    ACCENT = "#2563eb"
    ACCENT_HOVER = "#1d4ed8"
    STAR = "#facc15"

    TEXT_PRIMARY = "#f8fafc"
    TEXT_SECONDARY = "#cbd5e1"
    TEXT_MUTED = "#94a3b8"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b. Anything else returns ``a`` unchanged."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"
