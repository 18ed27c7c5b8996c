"""Edgerouter exception hierarchy.

Registration errors are fatal at setup time. ``ClientError`` is the one
exception the dispatch pipeline recovers into a JSON response; everywhere
inside the pipeline it travels as a ``StructuredError`` value.
"""

from __future__ import annotations

from dataclasses import dataclass

from edgerouter.http.status import STATUS_MESSAGES


class EdgeRouterError(Exception):
    """Base for all edgerouter-specific errors."""


class RegistrationError(EdgeRouterError):
    """Raised while building the route table or middleware registry.

    Never recovered: a router that fails to register is misconfigured.
    """


class ReservedPathError(RegistrationError):
    """A user route targets ``/docs`` or ``/openapi.json`` while internal routes are off."""


class DescriptorMismatchError(RegistrationError):
    """A path placeholder has no ``path`` descriptor, or that descriptor is optional."""


class InvalidAttributeError(RegistrationError):
    """Handler metadata carries an unknown attribute or an invalid value."""


class InvalidPatternError(RegistrationError):
    """A path template has a malformed or duplicate placeholder."""


class InvalidMiddlewareError(RegistrationError):
    """A middleware does not take exactly one ``request`` or ``response`` parameter."""


@dataclass(frozen=True, slots=True)
class StructuredError:
    """A failure on its way to becoming a JSON error response."""

    status_code: int
    status_message: str

    @classmethod
    def of(cls, status_code: int = 500, status_message: str = "") -> StructuredError:
        """Build a failure, filling the message from the default table.

        Raises ``ValueError`` for codes the table does not know.
        """
        if status_code not in STATUS_MESSAGES:
            msg = f"Invalid status code {status_code} for an error response!"
            raise ValueError(msg)
        return cls(status_code, status_message or STATUS_MESSAGES[status_code])


@dataclass(frozen=True, slots=True)
class ClientError(EdgeRouterError):
    """An error with an explicit status and a client-visible message.

    Raised by middleware, handlers, and the argument binder::

        raise ClientError("Token expired", 401)
    """

    status_message: str = "Client Error"
    status_code: int = 400

    def __str__(self) -> str:
        return f"{self.status_code}: {self.status_message}"

    @property
    def structured(self) -> StructuredError:
        """The failure value carried through the dispatch pipeline.

        An empty message falls back to the default for the status code.
        """
        message = self.status_message or STATUS_MESSAGES.get(self.status_code, "")
        return StructuredError(self.status_code, message)
