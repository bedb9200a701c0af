"""Dashboard presentation layer -- API client, report store, controller and text renderer.

Consumes the deals API over HTTP and keeps the nested panel state the view is
rendered from. Shares the server's Pydantic read models for response parsing.
"""
