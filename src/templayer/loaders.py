"""Template source access.

Sources come from any ``jinja2.BaseLoader``: ``FileSystemLoader`` over the
configured root by default, or a caller-supplied override such as
``DictLoader``/``PackageLoader``. The loader is never installed on the
runtime environment, so Jinja's own ``{% extends %}``/``{% include %}``
cannot bypass resolution.
"""
from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import List, Optional, Sequence, Union

from jinja2 import BaseLoader, Environment, FileSystemLoader
from jinja2 import TemplateNotFound

from .exceptions import TemplateNotFoundError
from .types import TemplateSource

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Normalize a logical name to the ``a/b.html`` form used as cache key."""
    cleaned = posixpath.normpath(name.replace("\\", "/").strip())
    return cleaned.lstrip("/")


class TemplateSourceReader:
    """Reads raw sources and enumerates template-bearing names."""

    def __init__(
        self,
        environment: Environment,
        loader: Optional[BaseLoader] = None,
        root: Union[str, Path] = ".",
        extensions: Sequence[str] = (".html",),
    ) -> None:
        self.environment = environment
        self.loader = loader if loader is not None else FileSystemLoader(str(root))
        self.extensions = tuple(extensions)

    def read(self, name: str, *, referenced_by: Optional[str] = None) -> TemplateSource:
        """Return the raw source of ``name``.

        Raises:
            TemplateNotFoundError: If the loader cannot provide the source.
        """
        try:
            content, filename, _uptodate = self.loader.get_source(self.environment, name)
        except TemplateNotFound as exc:
            raise TemplateNotFoundError(name, referenced_by=referenced_by) from exc
        except OSError as exc:
            raise TemplateNotFoundError(
                name, referenced_by=referenced_by, context={"reason": str(exc)}
            ) from exc
        logger.debug("Read template source %s", name)
        return TemplateSource(name=name, content=content, filename=filename)

    def walk(self) -> List[str]:
        """Return every logical name ending in one of the configured extensions."""
        names = [
            normalize_name(name)
            for name in self.loader.list_templates()
            if name.endswith(self.extensions)
        ]
        return sorted(set(names))


__all__ = ["TemplateSourceReader", "normalize_name"]
