"""DevTasks — multi-user project and task tracker.

Users register, log in, create projects they own and track tasks in
those projects across three board columns (ToDo / InProgress / Done).
"""

__version__ = "0.1.0"
