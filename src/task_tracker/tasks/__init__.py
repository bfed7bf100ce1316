"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskPatch, Priority, Status, Category)
- task_store.py: JSON-file storage + record codec
- task_service.py: create/update/delete/query entry points for the command layer
"""
