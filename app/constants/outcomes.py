"""
Dispatch outcome constants - how the engine classified an inbound event.
"""

# Menu sends
OUTCOME_GREETING = "greeting"  # First contact, default/admin menu sent
OUTCOME_MENU_RESEND = "menu_resend"  # Greeted contact typed the menu keyword

# Selections
OUTCOME_SELECTION = "selection"  # Structured reply resolved to an option
OUTCOME_LABEL_SELECTION = "label_selection"  # Free text matched an option label
OUTCOME_UNKNOWN_SELECTION = "unknown_selection"  # Selection did not resolve

# Anything else from a greeted contact
OUTCOME_HELP_FALLBACK = "help_fallback"
