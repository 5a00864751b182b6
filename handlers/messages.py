"""
handlers/messages.py
--------------------
User-facing texts.
"""

HELP_TEXT = """\
Available commands:
/start - register this chat and show this message
/token <token> - redeem your registration token
/first <n> - the first n participants
/last <n> - the last n participants
/rand <n> - n participants picked at random
/help - show this message
"""

WELCOME_GROUP = "👋 Hello, {title}! I keep track of registrations here."
WELCOME_PRIVATE = "👋 Hello, {name}! Send /token <token> to register."
ALREADY_REGISTERED = "You are registered: application {application}."

TOKEN_ACCEPTED = "✅ Token accepted. Your application #{id} is registered."
TOKEN_REPEATED = "ℹ️ You already redeemed this token. Application #{id} is {status}."
TOKEN_UNKNOWN = "❌ Unknown token."
TOKEN_EXPIRED = "⌛ This token has expired."
TOKEN_TAKEN = "🚫 This token has already been used by someone else."

CONFIRM_BUTTON = "Confirm ✅"
CONFIRMED = "✅ Application #{id} confirmed. Thank you, {name}!"
CONFIRM_ANSWER = "Confirmed"
NOT_YOURS = "This application is not yours."
NOT_FOUND = "Application not found."

NO_PERSONS = "📭 No participants yet."
FIRST_TITLE = "First {count} participant(s):"
LAST_TITLE = "Last {count} participant(s):"
RAND_TITLE = "{count} random participant(s):"
MORE_BUTTON = "More ▶"
EARLIER_BUTTON = "◀ Earlier"
AGAIN_BUTTON = "🎲 Again"
