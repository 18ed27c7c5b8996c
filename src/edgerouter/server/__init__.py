"""Host adapters: ASGI and API Gateway (Lambda proxy) entry points."""
