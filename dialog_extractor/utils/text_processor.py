"""
Post-processing of recognized dialog text, and saving it to disk.
"""

import re
from pathlib import Path
from typing import Iterable, Union


# Japanese endings after which a dialog sentence continues on the next line
DIALOG_CONTINUATIONS = ("、", "かつ", "で", "の")


def join_dialog_lines(text: str, continuations: Iterable[str] = DIALOG_CONTINUATIONS) -> str:
    """
    Remove line breaks that split a sentence in the middle.

    A break directly after one of ``continuations`` is dropped, so
    ``"今日は、\\n晴れ"`` becomes ``"今日は、晴れ"``. Both ``\\n`` and
    ``\\r\\n`` breaks are handled.
    """
    if not text:
        return ""

    endings = "|".join(re.escape(c) for c in continuations)
    if not endings:
        return text
    return re.sub(f"({endings})\r?\n", r"\1", text)


def strip_spaces(text: str) -> str:
    """Drop ASCII spaces, which OCR engines insert between CJK glyphs."""
    return text.replace(" ", "")


def save_text(path: Union[str, Path], text: str) -> Path:
    """
    Write extracted text to ``path`` as UTF-8.

    Missing parent directories are created. Line endings are written as
    they are in ``text``, without platform translation.

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text or "")
    return path
