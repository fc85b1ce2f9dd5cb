"""Cross-store identity resolution by natural key."""

from typing import Any, Callable, Hashable, Iterable, Optional


class Matcher:
    """
    Finds the target counterpart of a source item.

    Source and target IDs are never comparable, so identity is established only
    through a natural key extracted by ``key_func``. The first candidate with an
    equal key wins; items without a key never match.
    """

    def __init__(self, key_func: Callable[[Any], Optional[Hashable]]):
        self.key_func = key_func

    def key(self, item: Any) -> Optional[Hashable]:
        key = self.key_func(item)
        if key is None or key == "":
            return None
        if isinstance(key, tuple) and any(part is None or part == "" for part in key):
            return None
        return key

    def match(self, item: Any, candidates: Iterable[Any]) -> Optional[Any]:
        key = self.key(item)
        if key is None:
            return None
        for candidate in candidates:
            if self.key(candidate) == key:
                return candidate
        return None


def _get(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


handle_matcher = Matcher(lambda item: _get(item, "handle"))

metafield_matcher = Matcher(lambda item: (_get(item, "namespace"), _get(item, "key")))
