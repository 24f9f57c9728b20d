"""workhub: workplace productivity backend (attendance, tasks, chat, manuals, meetings)."""

__version__ = "0.1.0"
