"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, NewTask, TaskEdit)
- task_store.py: SQLite-backed storage, subtask resolution, overdue sweep
- task_lifecycle.py: lifecycle rules (due date, completion gate, partial edits)
"""
