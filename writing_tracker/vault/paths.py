"""Vault path helpers shared by the vault adapters."""

from pathlib import PurePosixPath

ROOT_FOLDER = "/"


def normalize_path(path: str) -> str:
    """Convert an OS or slash-prefixed path to a vault path ("notes/a.md")."""
    path = path.replace("\\", "/").strip("/")
    return str(PurePosixPath(path)) if path else ROOT_FOLDER


def get_parent_folder(path: str) -> str:
    """
    Get the folder containing a vault path.

    Files at the top of the vault live in the root folder "/".
    """
    parent = str(PurePosixPath(normalize_path(path)).parent)
    return ROOT_FOLDER if parent in (".", "/") else parent


def is_markdown(path: str) -> bool:
    return path.lower().endswith(".md")


def candidate_targets(files: list[str]) -> list[str]:
    """
    Every file plus every non-root folder that contains one.

    These are the choices offered when picking a goal target.
    """
    folders = []
    for path in files:
        folder = get_parent_folder(path)
        while folder != ROOT_FOLDER:
            folders.append(folder)
            folder = get_parent_folder(folder)

    # dict keeps first-seen order while dropping duplicates
    return list(dict.fromkeys(list(files) + folders))


def fuzzy_filter(query: str, items: list[str], limit: int = 50) -> list[str]:
    """
    Keep items containing the query characters in order.

    Tighter matches rank first, then shorter items, e.g. "dra" ranks "draft.md"
    above "data/readme.md".
    """
    query = query.lower().replace(" ", "")
    if not query:
        return items[:limit]

    scored = []
    for index, item in enumerate(items):
        span = _match_span(query, item.lower())
        if span is not None:
            scored.append((span, len(item), index, item))

    scored.sort()
    return [item for *_, item in scored[:limit]]


def _match_span(query: str, text: str):
    """Length of the shortest window matching query as a subsequence, or None."""
    best = None
    start = text.find(query[0])
    while start != -1:
        pos = start
        for char in query[1:]:
            pos = text.find(char, pos + 1)
            if pos == -1:
                return best
        span = pos - start + 1
        if best is None or span < best:
            best = span
        start = text.find(query[0], start + 1)
    return best
