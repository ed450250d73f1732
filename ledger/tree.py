"""Category Tree Resolver.

Categories form a forest through ``parent_id``. The resolver indexes a
snapshot once and answers children/leaf/root queries against it. Root
resolution is bounded: a cyclic chain or one deeper than ``max_depth``
raises :class:`CorruptHierarchyError` instead of looping.
"""
import logging
from collections import defaultdict
from typing import Iterable, Optional

from ledger.domain import Category, CategoryRef, UnknownCategory
from ledger.errors import CorruptHierarchyError, UnknownReferenceError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


class CategoryTree:
    def __init__(self, categories: Iterable[Category], max_depth: int = DEFAULT_MAX_DEPTH):
        self.categories: tuple[Category, ...] = tuple(categories)
        self.max_depth = max_depth
        self._by_id: dict[str, Category] = {c.id: c for c in self.categories}
        self._children: dict[Optional[str], list[Category]] = defaultdict(list)
        for c in self.categories:
            # a parent id that does not resolve makes the category an orphan root
            parent = c.parent_id if c.parent_id in self._by_id else None
            self._children[parent].append(c)
        self._warn_kind_mismatches()

    def __contains__(self, category_id: str) -> bool:
        return category_id in self._by_id

    def get(self, category_id: str) -> CategoryRef:
        return self._by_id.get(category_id) or UnknownCategory(category_id)

    def require(self, category_id: str) -> Category:
        try:
            return self._by_id[category_id]
        except KeyError:
            raise UnknownReferenceError("category", category_id) from None

    def name_of(self, category_id: str) -> str:
        return self.get(category_id).name

    def children_of(self, category_id: Optional[str] = None) -> tuple[Category, ...]:
        return tuple(self._children.get(category_id, ()))

    def roots(self, kind: Optional[str] = None) -> tuple[Category, ...]:
        return tuple(c for c in self._children.get(None, ()) if kind is None or c.kind == kind)

    def is_leaf(self, category_id: str) -> bool:
        return not self._children.get(category_id)

    def ancestors(self, category_id: str) -> tuple[str, ...]:
        """Chain of ids from ``category_id`` up to its root, both included."""
        chain = [category_id]
        seen = {category_id}
        current = self._by_id.get(category_id)
        while current is not None and current.parent_id in self._by_id:
            parent_id = current.parent_id
            if parent_id in seen:
                raise CorruptHierarchyError(category_id, tuple(chain) + (parent_id,))
            if len(chain) > self.max_depth:
                raise CorruptHierarchyError(category_id, tuple(chain), reason="too deep")
            chain.append(parent_id)
            seen.add(parent_id)
            current = self._by_id[parent_id]
        return tuple(chain)

    def root_of(self, category_id: str) -> str:
        # unknown ids come back unchanged, treated as self-rooted orphans
        return self.ancestors(category_id)[-1]

    def descendants(self, category_id: str) -> tuple[Category, ...]:
        result: list[Category] = []
        visited = {category_id}
        stack = list(reversed(self.children_of(category_id)))
        while stack:
            child = stack.pop()
            if child.id in visited:
                continue
            visited.add(child.id)
            result.append(child)
            stack.extend(reversed(self.children_of(child.id)))
        return tuple(result)

    def kind_mismatches(self) -> tuple[str, ...]:
        """Ids of categories whose kind differs from their root's kind.

        Categories caught in a cycle have no root and are left out.
        """
        return tuple(
            c.id for c, root in self._roots_by_category()
            if root is not None and root.kind != c.kind
        )

    def _roots_by_category(self):
        for c in self.categories:
            try:
                yield c, self._by_id[self.root_of(c.id)]
            except CorruptHierarchyError as exc:
                logger.warning("Cannot check kind of category %r: %s", c.id, exc)
                yield c, None

    def _warn_kind_mismatches(self) -> None:
        for c, root in self._roots_by_category():
            if root is not None and root.kind != c.kind:
                logger.warning(
                    "Category %r has kind %r but its root %r is %r",
                    c.id, c.kind, root.id, root.kind,
                )
