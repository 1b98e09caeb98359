"""
AI Task Manager backend package.

The FastAPI application lives in taskmanager.api.main (taskmanager.api.main:app).
"""
