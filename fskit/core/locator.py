"""
Filtered directory searches.

``GenericLocator`` collects entities found in one or more directories,
optionally keeping only those accepted by a filter. The filter is any
callable taking an ``Entity`` and returning a bool.
"""

import logging
from typing import Callable, Dict, List, Optional

from fskit.core.entity import Check, Entity, dir_entity, entity_from_entry
from fskit.core.exceptions import ConfigurationError, EntityReadError
from fskit.core.paths import PathArg

logger = logging.getLogger(__name__)

EntityFilter = Callable[[Entity], bool]


class GenericLocator:
    """
    Locates files and directories matching a filter.

    Results accumulate across ``search_dir`` calls and are keyed by the
    resolved path, so an entity reached twice is only kept once.

    Example:
        >>> locator = GenericLocator(lambda e: e.is_file() and e.has_extension("py"))
        >>> locator.search_dir("src", recursive=True).get_paths()
        ['/home/user/project/src/app.py', ...]
    """

    def __init__(self, filter: Optional[EntityFilter] = None):
        self._entities: Dict[str, Entity] = {}
        self._filter: Optional[EntityFilter] = None
        self.set_filter(filter)

    def set_filter(self, filter: Optional[EntityFilter] = None) -> "GenericLocator":
        """
        Set the filter used by subsequent searches.

        Raises:
            ConfigurationError: If filter is neither None nor callable
        """
        if filter is not None and not callable(filter):
            raise ConfigurationError(
                f"filter must be callable as filter(entity) -> bool, "
                f"got {type(filter).__name__}"
            )
        self._filter = filter
        return self

    def search_dir(self, directory: PathArg, recursive: bool = False) -> "GenericLocator":
        """
        Search a directory for matching entities.

        Args:
            directory: Directory to search
            recursive: Descend into subdirectories

        Raises:
            EntityReadError: If the directory does not exist or is unreadable
        """
        root = dir_entity(directory)
        result = root.test(Check.EXISTS | Check.READABLE)
        if not result:
            raise EntityReadError(
                f"failed to search directory; {result.error}", root.path
            )

        for entry in root.iter_entries(recursive=recursive):
            entity = entity_from_entry(entry)
            if entity.path in self._entities:
                continue
            if self._filter is not None and not self._filter(entity):
                continue
            self._entities[entity.path] = entity

        logger.debug(f"Located {len(self._entities)} entities after searching {root}")
        return self

    def get_paths(self) -> List[str]:
        return list(self._entities)

    def get_entities(self) -> List[Entity]:
        return list(self._entities.values())
