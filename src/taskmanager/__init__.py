"""
AI Task Manager.

- taskmanager.api: FastAPI backend (Task API and AI proxy)
- taskmanager.client: client state layer (API client, AI orchestration, derived views)
"""

__version__ = "0.1.0"
