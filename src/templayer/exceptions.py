from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple


class TemplayerError(Exception):
    """Base exception for templayer."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigurationError(TemplayerError, ValueError):
    """Raised for malformed directives, reserved function names and bad config."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        TemplayerError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class TemplateSyntaxError(TemplayerError):
    """Raised when the runtime cannot parse or compile a template."""

    def __init__(
        self,
        message: str,
        *,
        name: str,
        lineno: Optional[int] = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        ctx.update({"template": name, "lineno": lineno})
        location = f"{name}:{lineno}" if lineno else name
        super().__init__(f"Syntax error in {location}: {message}", context=ctx)
        self.name = name
        self.lineno = lineno


class TemplateNotFoundError(TemplayerError, LookupError):
    """Raised for unreadable sources, missing include targets and unknown names."""

    def __init__(
        self,
        name: str,
        *,
        referenced_by: Optional[str] = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        ctx["template"] = name
        if referenced_by:
            ctx["referenced_by"] = referenced_by
            message = f"Template {name!r} not found (referenced by {referenced_by!r})"
        else:
            message = f"Template {name!r} not found"
        TemplayerError.__init__(self, message, context=ctx)
        LookupError.__init__(self, message)
        self.name = name
        self.referenced_by = referenced_by


class CycleError(TemplayerError):
    """Raised when an extends or include chain refers back to itself."""

    def __init__(self, relation: str, chain: Sequence[str]) -> None:
        self.relation = relation
        self.chain: Tuple[str, ...] = tuple(chain)
        super().__init__(
            f"Circular {relation} detected: {' -> '.join(self.chain)}",
            context={"relation": relation, "chain": list(self.chain)},
        )


class TemplateRenderError(TemplayerError, RuntimeError):
    """Raised when executing a resolved template against data fails."""

    def __init__(self, name: str, cause: BaseException) -> None:
        message = f"Error rendering template {name!r}: {cause}"
        TemplayerError.__init__(self, message, context={"template": name})
        RuntimeError.__init__(self, message)
        self.name = name
        self.cause = cause


class EngineNotLoadedError(ConfigurationError):
    """Raised when the default engine is used before ``templayer.default.load``."""


__all__ = [
    "TemplayerError",
    "ConfigurationError",
    "TemplateSyntaxError",
    "TemplateNotFoundError",
    "CycleError",
    "TemplateRenderError",
    "EngineNotLoadedError",
]
