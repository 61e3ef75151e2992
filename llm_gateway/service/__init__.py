"""HTTP surface of the gateway: FastAPI app, cache headers, CLI and dev server.

``llm_gateway.service.app`` is imported lazily by uvicorn
(``llm_gateway.service.app:app``); importing this package does not build the
application.
"""
