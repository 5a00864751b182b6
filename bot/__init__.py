"""
bot/ - Transport Layer
======================
Turns Telegram updates into transport-neutral events, routes them to the
command handlers and delivers the replies the handlers return.
"""
