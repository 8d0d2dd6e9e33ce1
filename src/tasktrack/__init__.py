"""
tasktrack: task tracking with subtasks, completion gating and lazy overdue marking.
"""

__version__ = "0.1.0"
