"""Exceptions raised by the macro registry."""

from __future__ import annotations


class MacroError(Exception):
    """Base exception for macro registry errors."""

    pass


class InvalidMacroError(MacroError, ValueError):
    """Raised for malformed registrations.

    Covers empty host, name or namespace, drafts committed without an
    implementation, and overwrite-protected duplicate registrations.
    """

    pass


class MacroNotFoundError(MacroError, AttributeError):
    """Raised when a dynamic call targets a macro that does not resolve.

    Subclasses AttributeError so a missing macro behaves like any other
    undefined method on the host.
    """

    def __init__(
        self,
        message: str,
        *,
        host: str,
        name: str,
        namespace: str | None = None,
    ) -> None:
        super().__init__(message)
        self.host = host
        self.name = name
        self.namespace = namespace

    @classmethod
    def for_method(cls, host: str, name: str) -> MacroNotFoundError:
        return cls(f"Method {host}::{name} does not exist.", host=host, name=name)

    @classmethod
    def for_namespaced(cls, namespace: str, host: str, name: str) -> MacroNotFoundError:
        return cls(
            f"Namespaced method {namespace}::{host}::{name} does not exist.",
            host=host,
            name=name,
            namespace=namespace,
        )
