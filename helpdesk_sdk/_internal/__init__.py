"""Internal modules for the Helpdesk SDK.

WARNING: This package contains the framework the public resources are built
on. These modules are not intended for direct use in application code.

Modules:
    attributes - Attribute declarations, schemas and coercion
    model - Resource model base class
    association - Lazy references between resources
    request - Requests, response envelope and Real/Mock strategies
    collection - Scoped, paged collections
    mock - In-process simulated service
    http - Shared HTTP client configuration
    redaction - Redaction of sensitive keys in debug output
"""
