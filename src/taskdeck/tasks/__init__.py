"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Epic, Subtask, TaskStatus) and epic aggregation rules
- errors.py: named error kinds raised by the store
- history.py: most-recently-viewed cache
- scheduling.py: admitted time windows, overlap checks, priority view
- task_store.py: in-memory store orchestrating all of the above
- task_api.py: small high-level helpers used by the console commands
"""
