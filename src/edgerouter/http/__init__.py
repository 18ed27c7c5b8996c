"""HTTP primitives: headers, query strings, cookies, request, response."""
