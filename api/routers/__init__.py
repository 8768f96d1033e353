"""
API Routers - Organized endpoint handlers for the counter API.

Each router handles a specific domain:
- kiosk: public self-service intake
- document_types: catalog listing and management
- requests / items: staff processing of requests and their documents
- queue: ticket flow and the public display board
- persons: person registry and provisional review
- repair: reconciliation of interrupted intakes
"""
