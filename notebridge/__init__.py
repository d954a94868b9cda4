"""notebridge - persistent bridge client between an automation host and a note app."""

__version__ = "0.1.0"
__logo__ = "🌉"
