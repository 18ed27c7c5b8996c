"""Edgerouter — request routing for serverless and edge HTTP hosts.

Compiles path templates, binds typed handler arguments from the request,
runs category-filtered middleware, and turns every failure into a JSON
error response.

Basic usage::

    from edgerouter import EdgeRouter

    router = EdgeRouter()

    async def hello(name):
        \"""Say hello.

        @param where:path type:string name:name
        \"""
        return {"hello": name}

    router.get("/hello/:name", hello)

Hosts: ASGI (``router`` is an ASGI app), AWS Lambda proxy
(``edgerouter.server.lambda_proxy.lambda_handler(router)``), or any
synchronous caller through ``router.dispatch_sync(request)``.
"""

__version__ = "0.1.0"
__all__ = [
    "ClientError",
    "DescriptorMismatchError",
    "EdgeRouter",
    "EdgeRouterError",
    "Headers",
    "InvalidAttributeError",
    "InvalidMiddlewareError",
    "InvalidPatternError",
    "ParameterDescriptor",
    "RegistrationError",
    "ReservedPathError",
    "Request",
    "Response",
    "RouterConfig",
    "StructuredError",
    "json_response",
    "lambda_handler",
    "param",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import edgerouter`` fast while providing a clean top-level API.
    """
    if name == "EdgeRouter":
        from edgerouter.router import EdgeRouter

        return EdgeRouter

    if name == "RouterConfig":
        from edgerouter.config import RouterConfig

        return RouterConfig

    if name == "Request":
        from edgerouter.http.request import Request

        return Request

    if name in ("Response", "json_response"):
        from edgerouter.http import response

        return getattr(response, name)

    if name == "Headers":
        from edgerouter.http.headers import Headers

        return Headers

    if name in ("ParameterDescriptor", "param"):
        from edgerouter.routing import descriptors

        return getattr(descriptors, name)

    if name in (
        "ClientError",
        "DescriptorMismatchError",
        "EdgeRouterError",
        "InvalidAttributeError",
        "InvalidMiddlewareError",
        "InvalidPatternError",
        "RegistrationError",
        "ReservedPathError",
        "StructuredError",
    ):
        from edgerouter import errors

        return getattr(errors, name)

    if name == "lambda_handler":
        from edgerouter.server.lambda_proxy import lambda_handler

        return lambda_handler

    msg = f"module 'edgerouter' has no attribute {name!r}"
    raise AttributeError(msg)
