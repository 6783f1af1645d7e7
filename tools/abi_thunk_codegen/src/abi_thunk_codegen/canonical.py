from __future__ import annotations

_REWRITES = (
    (" *", "*"),
    ("* ", "*"),
    (" ,", ","),
    (", ", ","),
    ("  ", " "),
    ("\t", " "),
)


def canonicalize(text: str) -> str:
    """Collapse spacing around '*' and ',' and runs of blanks, then trim.

    The rewrites are applied until the text stops changing, so the result is
    a fixed point and canonicalize(canonicalize(s)) == canonicalize(s).
    """
    current = text
    previous = None
    while previous != current:
        previous = current
        for old, new in _REWRITES:
            current = current.replace(old, new)
    return current.strip()
