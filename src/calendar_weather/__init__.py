"""Calendar weather bot.

Annotates calendar event titles with the forecast weather for the event's
scheduled time, keeping titles in sync as events and forecasts change.
"""

__version__ = "0.1.0"
