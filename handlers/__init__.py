"""
handlers/ - Presentation Layer
================================
Command handlers. Each handler receives a parsed command (or callback) plus
the BotContext, delegates to the appropriate Service, and returns the replies
to send. Handlers never call Telegram directly.
No business logic lives here.
"""
